"""
Test doubles for the Sessions service.

- StubTransport / AsyncStubTransport: deterministic in-memory transports
- SessionsServicer: generic-handler servicer for an in-process grpc.server
"""
import asyncio
import json
import threading
import time
from concurrent import futures
from typing import Any, Dict, List, Optional, Tuple

import grpc

from intent_client.transport import CallOptions

SERVICE_NAME = "ondewo.nlu.Sessions"


def make_reply(
    intent: str = "greeting",
    confidence: float = 0.95,
    fulfillment_text: str = "Hello!",
) -> Dict[str, Any]:
    """Wire-format DetectIntent reply."""
    return {
        "response_id": "resp-1",
        "query_result": {
            "query_text": "Hi",
            "language_code": "en",
            "intent": {
                "name": f"projects/p1/agent/intents/{intent}",
                "display_name": intent,
            },
            "intent_detection_confidence": confidence,
            "fulfillment_text": fulfillment_text,
        },
    }


def encode(reply: Dict[str, Any]) -> bytes:
    return json.dumps(reply).encode("utf-8")


class StubTransport:
    """
    Deterministic transport that records every call.

    hang sleeps for the full duration regardless of options.timeout, so
    deadline handling is left to the client.
    """

    def __init__(
        self,
        reply: Any = None,
        error: Optional[Exception] = None,
        hang: float = 0.0,
    ):
        self.reply = encode(make_reply()) if reply is None else reply
        self.error = error
        self.hang = hang
        self.calls: List[Tuple[str, bytes, CallOptions]] = []

    def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        self.calls.append((procedure, payload, options))
        if self.hang:
            time.sleep(self.hang)
        if self.error is not None:
            raise self.error
        return self.reply


class AsyncStubTransport(StubTransport):
    async def call(self, procedure: str, payload: bytes, options: CallOptions) -> bytes:
        self.calls.append((procedure, payload, options))
        if self.hang:
            await asyncio.sleep(self.hang)
        if self.error is not None:
            raise self.error
        return self.reply


class SessionsServicer:
    """
    Raw-bytes DetectIntent handler. Behaviour is chosen by the query text:

    - "hang": block until released (or 3 seconds), then reply
    - "unknown": abort with NOT_FOUND
    - "garbage": reply with a non-JSON body
    - anything else: greeting reply
    """

    def __init__(self):
        self.release = threading.Event()
        self.requests: List[Dict[str, Any]] = []
        self.metadata: List[Dict[str, str]] = []

    def detect_intent(self, request: bytes, context: grpc.ServicerContext) -> bytes:
        payload = json.loads(request.decode("utf-8"))
        self.requests.append(payload)
        self.metadata.append(dict(context.invocation_metadata()))

        text = payload["query_input"]["text"]["text"]
        if text == "hang":
            self.release.wait(3.0)
        elif text == "unknown":
            session_id = payload["session"].rsplit("/", 1)[-1]
            context.abort(grpc.StatusCode.NOT_FOUND, f"session {session_id} unknown")
        elif text == "garbage":
            return b"<html>bad gateway</html>"
        return encode(make_reply())

    def handler(self) -> grpc.GenericRpcHandler:
        return grpc.method_handlers_generic_handler(
            SERVICE_NAME,
            {"DetectIntent": grpc.unary_unary_rpc_method_handler(self.detect_intent)},
        )


def start_server(servicer: SessionsServicer) -> Tuple[grpc.Server, int]:
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=4))
    server.add_generic_rpc_handlers((servicer.handler(),))
    port = server.add_insecure_port("127.0.0.1:0")
    server.start()
    return server, port
