"""
Intent-detection client for the Sessions service.

Usage:
    config = ClientConfig(endpoint="localhost:50051")
    with connect(config) as client:
        response = client.detect_intent(DetectIntentRequest(
            project_id="p1", session_id="s1", text="Hi", language_code="en",
        ))
        print(response.intent_name, response.confidence)

Every failure is raised as exactly one CallError subclass. Nothing is retried;
see intent_client.retry for an opt-in caller-side policy.
"""
import logging
import time
from typing import Any, Dict, Optional

import grpc

from ..codec import JsonCodec, PayloadCodec
from ..config import ClientConfig
from ..errors import CallError, DecodeError, InvalidRequestError, TransportError
from ..observability import create_span, record_exception
from ..schemas import DetectIntentRequest, DetectIntentResponse
from ..transport import TIMEOUT_DETAIL, CallOptions, GrpcTransport, Transport
from .base_client import open_channel, validate_config

logger = logging.getLogger(__name__)


class SessionClientBase:
    """Request encoding and reply decoding shared by the sync and async clients."""

    def __init__(self, config: ClientConfig, codec: Optional[PayloadCodec] = None):
        self.config = config
        self.codec = codec or JsonCodec()

    def _encode(self, request: DetectIntentRequest) -> bytes:
        payload = request.to_payload()
        return self.codec.encode(payload)

    def _call_options(self, timeout: Optional[float]) -> CallOptions:
        if timeout is None:
            timeout = self.config.timeout
        elif timeout <= 0:
            raise InvalidRequestError("timeout", f"must be positive, got {timeout}")
        return CallOptions(timeout=timeout, metadata=self.config.metadata)

    def _decode(self, reply: Any) -> DetectIntentResponse:
        if not isinstance(reply, (bytes, bytearray)):
            raise DecodeError(f"transport returned {type(reply).__name__}, expected bytes")
        return DetectIntentResponse.from_reply(self.codec.decode(bytes(reply)))

    def _transport_failure(self, error: Exception) -> TransportError:
        logger.warning(f"{self.config.procedure} transport raised {type(error).__name__}: {error}")
        return TransportError(str(error) or type(error).__name__)

    def _span_attributes(self, request: DetectIntentRequest) -> Dict[str, Any]:
        return {
            "rpc.system": "grpc",
            "rpc.method": self.config.procedure,
            "intent.project_id": request.project_id,
            "intent.session_id": request.session_id,
            "intent.language_code": request.language_code,
        }

    def _log_start(self, request: DetectIntentRequest) -> None:
        # Query text may be personal data: log only its size
        logger.debug(
            f"DetectIntent project={request.project_id} session={request.session_id} "
            f"language={request.language_code} text_len={len(request.text)}"
        )

    def _log_result(self, response: DetectIntentResponse) -> None:
        logger.info(
            f"DetectIntent matched intent={response.intent_name!r} "
            f"confidence={response.confidence:.2f}"
        )


class IntentClient(SessionClientBase):
    """
    Blocking detect-intent client.

    A client built by connect() owns its channel and closes it on close().
    A client given an external transport never closes it. The config is
    frozen and grpc channels are thread-safe, so one client may be shared
    across threads without locking.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Transport,
        codec: Optional[PayloadCodec] = None,
        channel: Optional[grpc.Channel] = None,
    ):
        super().__init__(config, codec)
        self.transport = transport
        self._channel = channel

    def detect_intent(
        self, request: DetectIntentRequest, timeout: Optional[float] = None
    ) -> DetectIntentResponse:
        """
        Detect the intent of one text query.

        Args:
            request: Query to classify
            timeout: Deadline in seconds (default: config.timeout)

        Returns:
            DetectIntentResponse decoded from the service reply

        Raises:
            InvalidRequestError: Request failed validation; nothing was sent
            TransportError: Host unreachable, TLS failure, or "timeout"
            RemoteError: Service answered with an error status
            DecodeError: Reply did not match the expected schema
        """
        payload = self._encode(request)
        options = self._call_options(timeout)
        self._log_start(request)

        with create_span("DetectIntent", attributes=self._span_attributes(request)):
            try:
                started = time.monotonic()
                try:
                    reply = self.transport.call(self.config.procedure, payload, options)
                except CallError:
                    raise
                except Exception as e:
                    raise self._transport_failure(e) from e
                # A transport that ignored the deadline still counts as timed out
                if time.monotonic() - started > options.timeout:
                    raise TransportError(TIMEOUT_DETAIL)
                response = self._decode(reply)
            except CallError as e:
                record_exception(e)
                logger.debug(f"DetectIntent failed: {type(e).__name__}: {e}")
                raise

        self._log_result(response)
        return response

    def close(self) -> None:
        """Close the owned channel, if any."""
        if self._channel is not None:
            self._channel.close()
            self._channel = None
            logger.info(f"Closed channel to {self.config.endpoint}")

    def __enter__(self) -> "IntentClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def connect(
    config: ClientConfig,
    transport: Optional[Transport] = None,
    codec: Optional[PayloadCodec] = None,
) -> IntentClient:
    """
    Build a client from a validated configuration.

    No network I/O happens here; the grpc channel connects on first call.

    Args:
        config: Connection configuration
        transport: Externally owned transport; a grpc channel is opened
            (and owned by the client) when omitted
        codec: Payload codec (default: JsonCodec)

    Raises:
        InvalidEndpointError: If the endpoint is malformed
        MissingCredentialsError: If secure=True without credential material
        InsecureChannelError: If secure=False in a production environment
    """
    endpoint = validate_config(config)
    if transport is not None:
        return IntentClient(config, transport, codec)

    channel = open_channel(config, endpoint)
    return IntentClient(config, GrpcTransport(channel), codec, channel=channel)


def detect_intent(
    client: IntentClient, request: DetectIntentRequest, timeout: Optional[float] = None
) -> DetectIntentResponse:
    """Module-level form of IntentClient.detect_intent."""
    return client.detect_intent(request, timeout=timeout)
