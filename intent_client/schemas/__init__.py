from .session import DetectIntentRequest, DetectIntentResponse, session_path

__all__ = [
    "DetectIntentRequest",
    "DetectIntentResponse",
    "session_path",
]
