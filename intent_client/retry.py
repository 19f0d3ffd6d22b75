"""
Caller-side retry policy.

The client never retries on its own. Callers that want retries opt in:

    for attempt in retrying(attempts=3):
        with attempt:
            response = client.detect_intent(request)

Only TransportError is retried. RemoteError, InvalidRequestError and
DecodeError describe a request or reply that will not change on resend.
"""
import logging

from tenacity import (
    AsyncRetrying,
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .errors import TransportError

logger = logging.getLogger(__name__)


def _policy(attempts: int, max_wait: float) -> dict:
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    return {
        "stop": stop_after_attempt(attempts),
        "wait": wait_exponential(multiplier=0.5, max=max_wait),
        "retry": retry_if_exception_type(TransportError),
        "before_sleep": before_sleep_log(logger, logging.WARNING),
        "reraise": True,
    }


def retrying(attempts: int = 3, max_wait: float = 10.0) -> Retrying:
    """Blocking retry policy for TransportError."""
    return Retrying(**_policy(attempts, max_wait))


def async_retrying(attempts: int = 3, max_wait: float = 10.0) -> AsyncRetrying:
    """asyncio retry policy for TransportError."""
    return AsyncRetrying(**_policy(attempts, max_wait))
