import asyncio
import logging
from typing import Optional

import grpc

from ..codec import PayloadCodec
from ..config import ClientConfig
from ..errors import CallError, TransportError
from ..observability import create_span, record_exception
from ..schemas import DetectIntentRequest, DetectIntentResponse
from ..transport import TIMEOUT_DETAIL, AsyncGrpcTransport, AsyncTransport
from .base_client import open_aio_channel, validate_config
from .session_client import SessionClientBase

logger = logging.getLogger(__name__)


class AsyncIntentClient(SessionClientBase):
    """
    asyncio detect-intent client.

    Shares validation, encoding and decoding with IntentClient. The awaited
    transport call is the only suspension point. Share an instance only
    between tasks of the event loop it was created on.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: AsyncTransport,
        codec: Optional[PayloadCodec] = None,
        channel: Optional[grpc.aio.Channel] = None,
    ):
        super().__init__(config, codec)
        self.transport = transport
        self._channel = channel

    async def detect_intent(
        self, request: DetectIntentRequest, timeout: Optional[float] = None
    ) -> DetectIntentResponse:
        """
        Async form of IntentClient.detect_intent; raises the same errors.

        A transport call still pending when the timeout expires is cancelled.
        """
        payload = self._encode(request)
        options = self._call_options(timeout)
        self._log_start(request)

        with create_span("DetectIntent", attributes=self._span_attributes(request)):
            try:
                try:
                    reply = await asyncio.wait_for(
                        self.transport.call(self.config.procedure, payload, options),
                        options.timeout,
                    )
                except asyncio.TimeoutError:
                    raise TransportError(TIMEOUT_DETAIL) from None
                except CallError:
                    raise
                except Exception as e:
                    raise self._transport_failure(e) from e
                response = self._decode(reply)
            except CallError as e:
                record_exception(e)
                logger.debug(f"DetectIntent failed: {type(e).__name__}: {e}")
                raise

        self._log_result(response)
        return response

    async def close(self) -> None:
        if self._channel is not None:
            await self._channel.close()
            self._channel = None
            logger.info(f"Closed aio channel to {self.config.endpoint}")

    async def __aenter__(self) -> "AsyncIntentClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False


def connect_async(
    config: ClientConfig,
    transport: Optional[AsyncTransport] = None,
    codec: Optional[PayloadCodec] = None,
) -> AsyncIntentClient:
    """
    Build an asyncio client. Validation and errors match connect().

    Call from within a running event loop when no transport is given.
    """
    endpoint = validate_config(config)
    if transport is not None:
        return AsyncIntentClient(config, transport, codec)

    channel = open_aio_channel(config, endpoint)
    return AsyncIntentClient(config, AsyncGrpcTransport(channel), codec, channel=channel)
