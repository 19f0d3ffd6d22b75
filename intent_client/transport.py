"""
RPC transports.

A transport moves opaque request bytes to a remote procedure and returns the
reply bytes. Failures come back as TransportError (the call never produced a
service answer) or RemoteError (the service answered with an error status).
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import grpc

from .errors import CallError, RemoteError, TransportError

logger = logging.getLogger(__name__)

TIMEOUT_DETAIL = "timeout"

# Status codes meaning the call never reached a service answer
_TRANSPORT_CODES = frozenset({grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.CANCELLED})


@dataclass(frozen=True)
class CallOptions:
    """Per-call options."""
    timeout: Optional[float] = None
    metadata: Tuple[Tuple[str, str], ...] = ()


class Transport(Protocol):
    """
    Blocking transport.

    Implementations must give up once options.timeout seconds have passed
    and raise TransportError("timeout"). The client cannot interrupt a
    blocked call; it only reports a late reply as a timeout. Failures
    should be raised as TransportError or RemoteError; any other exception
    is wrapped in TransportError by the client.
    """

    def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        ...


class AsyncTransport(Protocol):
    """asyncio transport. The client cancels a call still pending at options.timeout."""

    async def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        ...


def map_rpc_error(error: grpc.RpcError) -> CallError:
    """Translate a grpc.RpcError into the client's error taxonomy."""
    code_fn = getattr(error, "code", None)
    if not callable(code_fn):
        return TransportError(str(error) or type(error).__name__)

    code = code_fn()
    details_fn = getattr(error, "details", None)
    details = (details_fn() if callable(details_fn) else None) or ""
    if code == grpc.StatusCode.DEADLINE_EXCEEDED:
        return TransportError(TIMEOUT_DETAIL)
    if code in _TRANSPORT_CODES:
        return TransportError(details or code.name.lower())
    return RemoteError(code.name, details)


class GrpcTransport:
    """
    Blocking transport over a grpc.Channel.

    The channel is not owned: closing it is the job of whoever created it.
    grpc channels are thread-safe, so one transport can serve concurrent
    callers without external locking.
    """

    def __init__(self, channel: grpc.Channel):
        self.channel = channel

    def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        # No serializers: request and reply travel as raw bytes
        method = self.channel.unary_unary(procedure)
        try:
            return method(
                payload,
                timeout=options.timeout,
                metadata=list(options.metadata) or None,
            )
        except grpc.RpcError as e:
            error = map_rpc_error(e)
            logger.warning(f"{procedure} failed: {error}")
            raise error from e


class AsyncGrpcTransport:
    """asyncio transport over a grpc.aio.Channel."""

    def __init__(self, channel: grpc.aio.Channel):
        self.channel = channel

    async def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        method = self.channel.unary_unary(procedure)
        try:
            return await method(
                payload,
                timeout=options.timeout,
                metadata=list(options.metadata) or None,
            )
        except grpc.RpcError as e:
            error = map_rpc_error(e)
            logger.warning(f"{procedure} failed: {error}")
            raise error from e
