"""
Intent Client - typed gRPC client for NLU detect-intent services.

Usage:
    from intent_client import ClientConfig, DetectIntentRequest, connect

    with connect(ClientConfig(endpoint="localhost:50051")) as client:
        response = client.detect_intent(DetectIntentRequest(
            project_id="p1", session_id="s1", text="Hi", language_code="en",
        ))
"""
from .clients import AsyncIntentClient, IntentClient, connect, connect_async, detect_intent
from .codec import JsonCodec, PayloadCodec, ProtobufCodec
from .config import ChannelCredentials, ClientConfig, ConfigLoader, parse_endpoint
from .errors import (
    CallError,
    ClientConnectionError,
    ConfigurationError,
    DecodeError,
    InsecureChannelError,
    IntentClientError,
    InvalidEndpointError,
    InvalidRequestError,
    MissingCredentialsError,
    RemoteError,
    TransportError,
)
from .schemas import DetectIntentRequest, DetectIntentResponse
from .transport import AsyncGrpcTransport, CallOptions, GrpcTransport, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "connect",
    "connect_async",
    "detect_intent",
    "IntentClient",
    "AsyncIntentClient",
    # Config
    "ClientConfig",
    "ChannelCredentials",
    "ConfigLoader",
    "parse_endpoint",
    # Schemas
    "DetectIntentRequest",
    "DetectIntentResponse",
    # Transport and codecs
    "Transport",
    "CallOptions",
    "GrpcTransport",
    "AsyncGrpcTransport",
    "PayloadCodec",
    "JsonCodec",
    "ProtobufCodec",
    # Errors
    "IntentClientError",
    "ConfigurationError",
    "ClientConnectionError",
    "InvalidEndpointError",
    "MissingCredentialsError",
    "InsecureChannelError",
    "CallError",
    "InvalidRequestError",
    "TransportError",
    "RemoteError",
    "DecodeError",
]
