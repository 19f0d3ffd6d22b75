"""
Payload codecs.

The service definition is supplied from outside this package. A codec turns
the request mapping into the bytes the service expects and a reply body back
into a mapping. JsonCodec serves JSON-over-gRPC gateways; ProtobufCodec wraps
message classes compiled from the service's .proto files.
"""
import json
from typing import Any, Dict, Mapping, Protocol, Type

from google.protobuf import json_format
from google.protobuf.message import DecodeError as ProtobufDecodeError
from google.protobuf.message import Message

from .errors import DecodeError, InvalidRequestError


class PayloadCodec(Protocol):
    def encode(self, payload: Mapping[str, Any]) -> bytes:
        ...

    def decode(self, data: bytes) -> Dict[str, Any]:
        ...


class JsonCodec:
    """UTF-8 JSON bodies."""

    def encode(self, payload: Mapping[str, Any]) -> bytes:
        try:
            return json.dumps(payload, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise InvalidRequestError("payload", f"not JSON serializable: {e}") from e

    def decode(self, data: bytes) -> Dict[str, Any]:
        try:
            reply = json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise DecodeError(f"reply is not UTF-8: {e.reason}") from e
        except json.JSONDecodeError as e:
            raise DecodeError(f"reply is not JSON: {e.msg} at position {e.pos}") from e
        if not isinstance(reply, dict):
            raise DecodeError(f"reply is a JSON {type(reply).__name__}, expected an object")
        return reply


class ProtobufCodec:
    """
    Compiled protobuf message classes.

    Usage:
        from ondewo.nlu import session_pb2
        codec = ProtobufCodec(session_pb2.DetectIntentRequest,
                              session_pb2.DetectIntentResponse)
    """

    def __init__(self, request_type: Type[Message], response_type: Type[Message]):
        self.request_type = request_type
        self.response_type = response_type

    def encode(self, payload: Mapping[str, Any]) -> bytes:
        try:
            message = json_format.ParseDict(payload, self.request_type())
        except json_format.ParseError as e:
            raise InvalidRequestError(
                "payload", f"does not fit {self.request_type.DESCRIPTOR.full_name}: {e}"
            ) from e
        return message.SerializeToString()

    def decode(self, data: bytes) -> Dict[str, Any]:
        try:
            message = self.response_type.FromString(data)
        except ProtobufDecodeError as e:
            raise DecodeError(
                f"reply is not a {self.response_type.DESCRIPTOR.full_name}: {e}"
            ) from e
        return json_format.MessageToDict(
            message,
            preserving_proto_field_name=True,
            always_print_fields_with_no_presence=True,
        )
