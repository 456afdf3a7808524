import asyncio
from collections.abc import Awaitable
import logging
from typing import Self, TypeVar, Unpack

from yarl import URL
import aiohttp

from .errors import EventFormatError, ServerRefusedRetry
from .event import Event, parse_sse_message
from .models import ClientConfig
from .storage import LastIdStore
from .utils import serialized, split_message

T = TypeVar("T")
# 读取时遇到这些异常按断连处理，等待后重连
_TRANSIENT_ERRORS = (
    aiohttp.ClientPayloadError,
    aiohttp.ClientConnectionError,
    TimeoutError,
)
logger = logging.getLogger(__name__)


class _Cancelled(Exception):
    """读取或等待被 cancel() 打断"""


class SSEClient:
    """
    Server-Sent Events 客户端

    用 ``async with`` 获取：进入时读取持久化的 last id 并建立第一次连接，
    退出时写回 last id 并关闭连接。事件通过 ``async for`` 逐个拉取，
    断连后按当前重连间隔等待，带上 ``Last-Event-ID`` 重新连接::

        async with SSEClient("http://127.0.0.1:8000/events") as client:
            async for event in client:
                print(event.event, event.data)
    """

    def __init__(
        self,
        url: str | URL,
        config: ClientConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        **kwargs: Unpack[aiohttp.client._RequestOptions],
    ):
        self._url = URL(url)
        self._config = (config or ClientConfig()).model_copy(deep=True)
        extra_headers = kwargs.pop("headers", None)
        self._headers = self._config.request_headers(
            dict(extra_headers) if extra_headers else None
        )
        self._request_options = kwargs
        self._session = session
        self._owns_session = session is None
        self._store = (
            LastIdStore(self._config.last_id_file, self._config.lock_timeout)
            if self._config.last_id_file
            else None
        )

        self._response: aiohttp.ClientResponse | None = None
        # 尚未遇到分隔符的字节，每次重连清空
        self._buffer = bytearray()
        self._last_id: str | None = None
        self._retry_ms = self._config.retry_interval_ms
        self._reconnects = 0
        self._finished = False
        self._cancelled = asyncio.Event()
        self._pull_lock = asyncio.Lock()

    @property
    def url(self):
        return self._url

    @property
    def last_id(self):
        return self._last_id

    @property
    def retry_interval_ms(self):
        return self._retry_ms

    @property
    def reconnects(self):
        return self._reconnects

    @property
    def headers(self):
        return dict(self._headers)

    def _make_session(self):
        auth = (
            aiohttp.BasicAuth(
                login=self._config.username,
                password=self._config.password,
                encoding="utf-8",
            )
            if self._config.username and self._config.password
            else None
        )
        timeout = aiohttp.ClientTimeout(
            total=self._config.total_timeout, sock_read=self._config.read_timeout
        )
        return aiohttp.ClientSession(auth=auth, timeout=timeout)

    async def open(self) -> Self:
        """读取持久化的 last id 并建立第一次连接，失败时释放自建的 session"""
        if self._store is not None:
            self._last_id = self._store.load()
        if self._session is None:
            self._session = self._make_session()
        try:
            await self.connect()
        except BaseException:
            await self._close_transport()
            raise
        return self

    async def connect(self):
        """
        发起 GET 请求并替换当前连接

        服务端返回 204 时抛出 :class:`ServerRefusedRetry`，之后不会再有事件；
        其余状态码一律当作正常的流处理
        """
        if self._session is None:
            self._session = self._make_session()
        headers = dict(self._headers)
        if self._last_id:
            headers["Last-Event-ID"] = self._last_id
        self._close_response()

        logger.debug("GET %s, headers = %s", self._url, headers)
        resp = await self._session.get(
            self._url, headers=headers, **self._request_options
        )
        if resp.status == 204:
            resp.close()
            self._finished = True
            raise ServerRefusedRetry(str(self._url))
        if resp.status >= 400:
            logger.warning("unexpected status code in SSE response: %d", resp.status)
        self._response = resp
        logger.info("connected to %s, status = %d", self._url, resp.status)

    def cancel(self):
        """打断正在进行的读取或等待，事件序列随之结束"""
        self._cancelled.set()

    def __aiter__(self):
        return self

    async def __anext__(self) -> Event:
        return await self.next_event()

    @serialized
    async def next_event(self) -> Event:
        """拉取下一个事件，序列结束时抛出 StopAsyncIteration"""
        if self._finished or self._cancelled.is_set():
            raise StopAsyncIteration
        try:
            return await self._next_event()
        except _Cancelled:
            self._finished = True
            raise StopAsyncIteration from None
        except Exception:
            self._finished = True
            raise

    async def _next_event(self) -> Event:
        if self._response is None:
            raise RuntimeError("SSEClient is not connected, use 'async with' first")
        while True:
            if (parts := split_message(self._buffer)) is not None:
                raw, rest = parts
                self._buffer = bytearray(rest)
                event = self._parse(raw)
                if event is None:
                    continue
                self._remember(event)
                return event

            chunk = await self._read_chunk()
            if chunk:
                self._buffer += chunk
            else:
                await self._reconnect()

    def _parse(self, raw: bytes) -> Event | None:
        try:
            event = parse_sse_message(raw, self._config.encoding)
        except EventFormatError as e:
            if not self._config.skip_malformed:
                raise
            logger.warning("skip malformed message: %s", e)
            return None
        logger.debug("receive event: %s", event)
        return event

    def _remember(self, event: Event):
        if event.id:
            self._last_id = event.id
        if event.retry:
            if event.retry != self._retry_ms:
                logger.debug(
                    "retry interval %d ms -> %d ms", self._retry_ms, event.retry
                )
            self._retry_ms = event.retry

    async def _read_chunk(self) -> bytes:
        try:
            return await self._interruptible(self._response.content.readany())
        except _TRANSIENT_ERRORS as e:
            logger.warning("connection lost while reading: %r", e)
            return b""

    async def _reconnect(self):
        delay = self._retry_ms / 1000
        logger.info("stream ended, retry after %.3fs", delay)
        await self._interruptible(self._sleep(delay))
        self._reconnects += 1
        await self.connect()
        # 断连前不完整的消息直接丢弃
        self._buffer.clear()

    async def _sleep(self, seconds: float):
        await asyncio.sleep(seconds)

    async def _interruptible(self, aw: Awaitable[T]) -> T:
        if self._cancelled.is_set():
            if asyncio.iscoroutine(aw):
                aw.close()
            raise _Cancelled
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            await asyncio.wait((task, waiter), return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
        if self._cancelled.is_set():
            raise _Cancelled
        return task.result()

    def _close_response(self):
        if self._response is not None:
            self._response.close()
            self._response = None

    async def _close_transport(self):
        self._close_response()
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def close(self):
        """写回 last id（若配置了文件），关闭连接和自建的 session"""
        self._finished = True
        try:
            if self._store is not None:
                self._store.save(self._last_id)
        finally:
            await self._close_transport()

    async def __aenter__(self) -> Self:
        return await self.open()

    async def __aexit__(self, *_):
        await self.close()
