"""
Session Schemas - Detect-intent request and response value objects.

The request knows how to validate itself and render the wire payload of the
Sessions service; the response knows how to decode a reply mapping. Both are
frozen pydantic models created per call.

Wire payloads use proto field names. Replies produced by JSON gateways use
camelCase, so both spellings are accepted when decoding.
"""
import re
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import DecodeError, InvalidRequestError

# Primary language subtag followed by optional region/script/variant subtags.
_LANGUAGE_TAG = re.compile(r"^[A-Za-z]{2,8}(-[A-Za-z0-9]{1,8})*$")


def session_path(project_id: str, session_id: str) -> str:
    """Return the fully-qualified session resource name."""
    return f"projects/{project_id}/agent/sessions/{session_id}"


class DetectIntentRequest(BaseModel):
    """
    A single text query for intent detection.

    Attributes:
        project_id: Agent project the session belongs to
        session_id: Caller-chosen conversation id, scoped to the project
        text: Free text to classify
        language_code: BCP-47 language tag of the text (e.g. "en", "de-AT")

    Missing fields are accepted at construction and rejected by
    validate_fields() before anything is sent. Values of the wrong type
    fail at construction with a pydantic ValidationError.
    """

    project_id: Optional[str] = None
    session_id: Optional[str] = None
    text: Optional[str] = None
    language_code: Optional[str] = None

    class Config:
        frozen = True

    def validate_fields(self) -> None:
        """
        Check every required field.

        Raises:
            InvalidRequestError: On the first field that fails
        """
        for name in ("project_id", "session_id", "text", "language_code"):
            value = getattr(self, name)
            if value is None or not value.strip():
                raise InvalidRequestError(name, "must not be empty")

        for name in ("project_id", "session_id"):
            if "/" in getattr(self, name):
                raise InvalidRequestError(name, "must not contain '/'")

        try:
            self.text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidRequestError("text", f"not valid UTF-8: {e.reason}") from e

        if not _LANGUAGE_TAG.match(self.language_code):
            raise InvalidRequestError(
                "language_code", f"{self.language_code!r} is not a BCP-47 tag"
            )

    def to_payload(self) -> Dict[str, Any]:
        """Validate and render the DetectIntent wire payload."""
        self.validate_fields()
        return {
            "session": session_path(self.project_id, self.session_id),
            "query_input": {
                "text": {
                    "text": self.text,
                    "language_code": self.language_code,
                }
            },
        }


def _lookup(mapping: Mapping[str, Any], snake: str, camel: str) -> Optional[Any]:
    if snake in mapping:
        return mapping[snake]
    return mapping.get(camel)


class DetectIntentResponse(BaseModel):
    """
    Decoded detect-intent reply.

    Attributes:
        intent_name: Display name of the matched intent ("" if none matched)
        confidence: Intent detection confidence in [0, 1]
        fulfillment_text: Text the agent answers with
        raw: Full decoded reply, passed through untouched
    """

    intent_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    fulfillment_text: str
    raw: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True

    @classmethod
    def from_reply(cls, reply: Any) -> "DetectIntentResponse":
        """
        Decode a reply mapping.

        Raises:
            DecodeError: If the reply does not match the Sessions schema
        """
        if not isinstance(reply, Mapping):
            raise DecodeError(f"reply is {type(reply).__name__}, expected a mapping")

        result = _lookup(reply, "query_result", "queryResult")
        if not isinstance(result, Mapping):
            raise DecodeError("reply has no query_result")

        intent = result.get("intent") or {}
        if not isinstance(intent, Mapping):
            raise DecodeError("query_result.intent is not a mapping")
        intent_name = (
            _lookup(intent, "display_name", "displayName")
            or intent.get("name")
            or ""
        )

        confidence = _lookup(
            result, "intent_detection_confidence", "intentDetectionConfidence"
        )
        if confidence is None:
            confidence = 0.0
        # bool is an int subclass; a flag is not a score
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise DecodeError(
                f"intent_detection_confidence is {type(confidence).__name__}, expected a number"
            )

        fulfillment_text = _lookup(result, "fulfillment_text", "fulfillmentText")
        if fulfillment_text is None:
            fulfillment_text = ""

        try:
            return cls(
                intent_name=intent_name,
                confidence=confidence,
                fulfillment_text=fulfillment_text,
                raw=dict(reply),
            )
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise DecodeError(errors) from e
