from .core import SSEClient
from .errors import EventFormatError, ServerRefusedRetry, SSEError
from .event import Event, parse_sse_message
from .models import AppConfig, ClientConfig
from .storage import LastIdStore

__all__ = [
    "SSEClient",
    "Event",
    "parse_sse_message",
    "ClientConfig",
    "AppConfig",
    "LastIdStore",
    "SSEError",
    "ServerRefusedRetry",
    "EventFormatError",
]
