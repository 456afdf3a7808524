from collections.abc import Callable
import functools
import re
from typing import Concatenate, TypeVar, ParamSpec, Protocol
from collections.abc import Awaitable
import asyncio


###### From Meloland/melobot by @aicorein, modified ######
#: 泛型 T，无约束
T = TypeVar("T")
#: :obj:`~typing.ParamSpec` 泛型 P，无约束
P = ParamSpec("P")


class _HasLock(Protocol):
    _pull_lock: asyncio.Lock


S = TypeVar("S", bound=_HasLock)


def serialized(
    func: Callable[Concatenate[S, P], Awaitable[T]],
) -> Callable[Concatenate[S, P], Awaitable[T]]:
    """锁装饰器，锁跟着实例走，同一个实例上的调用依次执行"""

    @functools.wraps(func)
    async def wrapped_func(self: S, *args: P.args, **kwargs: P.kwargs) -> T:
        async with self._pull_lock:
            return await func(self, *args, **kwargs)

    return wrapped_func


##### melobot end ######


# 三种分隔符逐字匹配，谁先出现用谁
END_OF_MESSAGE = re.compile(rb"\r\n\r\n|\n\n|\r\r")
END_OF_LINE = re.compile(r"\r\n|\n|\r")
_LEADING_INT = re.compile(r"\s*(\d+)", re.ASCII)


def split_message(buffer: bytes | bytearray) -> tuple[bytes, bytes] | None:
    """
    在缓冲区中寻找第一个消息分隔符

    找到时返回 (分隔符之前的原始消息, 分隔符之后的剩余部分)，否则返回 None
    """
    match = END_OF_MESSAGE.search(buffer)
    if match is None:
        return None
    start, end = match.span()
    return bytes(buffer[:start]), bytes(buffer[end:])


def coerce_int(value: str) -> int:
    """Best-effort integer coercion: leading digits or 0"""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0
