"""Chat endpoint client modules for cody_cli."""
from .client import ChatClient
from .model_cache import ModelCache
from .request_handle import CancelReason, RequestHandle
from .sse import LineBuffer, SSEEvent, parse_line

__all__ = [
    'ChatClient', 'ModelCache',
    'CancelReason', 'RequestHandle',
    'LineBuffer', 'SSEEvent', 'parse_line',
]
