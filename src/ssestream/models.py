from pydantic import BaseModel, Field

# 协议要求的请求头，调用方给的同名头会被覆盖
FORCED_HEADERS = {
    "Accept": "text/event-stream",
    "Cache-Control": "no-cache",
}
RETRY_DEFAULT_MS = 3000


class ClientConfig(BaseModel):
    # 额外的请求头
    headers: dict[str, str] = {}
    # 自建 session 时使用的凭据
    username: str | None = None
    password: str | None = None
    # 超时，None 表示不限制
    total_timeout: float | None = Field(None, gt=0.0)
    # 两次读取之间允许的最长间隔，超时按断连处理
    read_timeout: float | None = Field(None, gt=0.0)
    # 初始重连间隔，会被服务端的 retry 字段覆盖
    retry_interval_ms: int = Field(RETRY_DEFAULT_MS, ge=0)
    # 持久化 last id 的文件，None 表示不持久化
    last_id_file: str | None = None
    # 等待 last id 文件锁的秒数
    lock_timeout: float = Field(5.0, ge=0.0)
    encoding: str = "utf-8"
    # 遇到格式错误的消息时跳过而不是结束
    skip_malformed: bool = False

    def request_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        forced = {k.lower() for k in FORCED_HEADERS}
        headers = {
            k: v
            for k, v in {**self.headers, **(extra or {})}.items()
            if k.lower() not in forced
        }
        headers.update(FORCED_HEADERS)
        return headers


class AppConfig(ClientConfig):
    # 要订阅的 SSE 端点
    url: str = "http://127.0.0.1:8000/events"
