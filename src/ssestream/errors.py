class SSEError(Exception):
    """Base class of all errors raised by ssestream"""


class ServerRefusedRetry(SSEError):
    """服务端以 204 响应，要求客户端不再重连"""

    def __init__(self, url: str):
        super().__init__(f"Server forbid connection retry by responding 204: {url}")
        self.url = url


class EventFormatError(SSEError, ValueError):
    def __init__(self, message: str, raw: str | bytes | None = None):
        super().__init__(message)
        self.raw = raw
