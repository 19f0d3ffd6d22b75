from .async_session_client import AsyncIntentClient, connect_async
from .session_client import IntentClient, connect, detect_intent

__all__ = [
    "IntentClient",
    "AsyncIntentClient",
    "connect",
    "connect_async",
    "detect_intent",
]
