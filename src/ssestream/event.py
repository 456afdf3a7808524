"""仿照 aiosseclient 弄了个自己习惯的"""

from dataclasses import dataclass

from .errors import EventFormatError
from .utils import END_OF_LINE, coerce_int


@dataclass(frozen=True)
class Event:
    data: str = ""
    event: str = "message"
    id: str | None = None
    retry: int | None = None

    @classmethod
    def parse(cls, raw: str | bytes, encoding: str = "utf-8") -> "Event":
        return parse_sse_message(raw, encoding)


def _split_field(line: str) -> tuple[str, str]:
    field, colon, value = line.partition(":")
    if colon and value.startswith(" "):
        # 只去掉冒号后的一个空格
        value = value[1:]
    return field, value


def parse_sse_message(sse_message: str | bytes, encoding: str = "utf-8") -> Event:
    """
    将一条不含分隔符的原始消息解析为 Event

    行分隔符只认 ``\\r\\n``、``\\n``、``\\r``，允许混用；
    无法拆成行的输入（解码失败或类型不对）会抛出 EventFormatError
    """
    if isinstance(sse_message, (bytes, bytearray)):
        try:
            sse_message = bytes(sse_message).decode(encoding)
        except UnicodeDecodeError as e:
            raise EventFormatError(
                f"Cannot decode message as {encoding}: {e}", bytes(sse_message)
            ) from e
    if not isinstance(sse_message, str):
        raise EventFormatError(
            f"Invalid input format: {type(sse_message).__name__}"
        )

    event_type = "message"
    data: str = ""
    event_id: str | None = None
    retry: int | None = None
    for line in END_OF_LINE.split(sse_message):
        field, value = _split_field(line)
        if field == "":
            # comment
            continue

        match field:
            case "event":
                event_type = value
            case "data":
                data = f"{data}\n{value}" if data else value  # 拼接多行 data
            case "id":
                # 空 id 与没有 id 同等对待
                event_id = value or None
            case "retry":
                retry = coerce_int(value)
            case _:
                continue

    return Event(data=data, event=event_type, id=event_id, retry=retry)
