"""Unit tests for detect-intent request validation and reply decoding."""

import pytest

from intent_client.errors import DecodeError, InvalidRequestError
from intent_client.schemas import DetectIntentRequest, DetectIntentResponse, session_path
from tests.stubs import make_reply


def _request(**overrides) -> DetectIntentRequest:
    fields = dict(project_id="p1", session_id="s1", text="Hi", language_code="en")
    fields.update(overrides)
    return DetectIntentRequest(**fields)


class TestDetectIntentRequest:

    def test_payload_shape(self):
        assert _request().to_payload() == {
            "session": "projects/p1/agent/sessions/s1",
            "query_input": {"text": {"text": "Hi", "language_code": "en"}},
        }

    def test_session_path(self):
        assert session_path("proj", "abc-123") == "projects/proj/agent/sessions/abc-123"

    @pytest.mark.parametrize("field", ["project_id", "session_id", "text", "language_code"])
    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_field_rejected(self, field, value):
        with pytest.raises(InvalidRequestError) as exc_info:
            _request(**{field: value}).to_payload()
        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", ["project_id", "session_id", "text", "language_code"])
    def test_missing_field_rejected(self, field):
        fields = dict(project_id="p1", session_id="s1", text="Hi", language_code="en")
        fields[field] = None
        request = DetectIntentRequest(**fields)

        with pytest.raises(InvalidRequestError) as exc_info:
            request.to_payload()
        assert exc_info.value.field == field

    def test_omitted_fields_rejected(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            DetectIntentRequest(text="Hi").validate_fields()
        assert exc_info.value.field == "project_id"

    @pytest.mark.parametrize("field", ["project_id", "session_id"])
    def test_slash_in_identifier_rejected(self, field):
        with pytest.raises(InvalidRequestError) as exc_info:
            _request(**{field: "a/b"}).validate_fields()
        assert exc_info.value.field == field

    def test_lone_surrogate_rejected(self):
        request = DetectIntentRequest.model_construct(
            project_id="p1", session_id="s1", text="hi \ud800", language_code="en"
        )
        with pytest.raises(InvalidRequestError) as exc_info:
            request.validate_fields()
        assert exc_info.value.field == "text"

    def test_non_ascii_text_accepted(self):
        payload = _request(text="Grüß Gott 👋", language_code="de-AT").to_payload()
        assert payload["query_input"]["text"]["text"] == "Grüß Gott 👋"

    @pytest.mark.parametrize("tag", ["en", "de-AT", "zh-Hant-TW", "es-419", "sr-Latn"])
    def test_language_tags_accepted(self, tag):
        _request(language_code=tag).validate_fields()

    @pytest.mark.parametrize("tag", ["e", "en_US", "en-", "english language", "123"])
    def test_language_tags_rejected(self, tag):
        with pytest.raises(InvalidRequestError) as exc_info:
            _request(language_code=tag).validate_fields()
        assert exc_info.value.field == "language_code"


class TestDetectIntentResponse:

    def test_decodes_reply(self):
        reply = make_reply()

        response = DetectIntentResponse.from_reply(reply)

        assert response.intent_name == "greeting"
        assert response.confidence == 0.95
        assert response.fulfillment_text == "Hello!"
        assert response.raw == reply

    def test_camel_case_reply(self):
        reply = {
            "responseId": "r",
            "queryResult": {
                "intent": {"displayName": "order_pizza"},
                "intentDetectionConfidence": 0.5,
                "fulfillmentText": "Which size?",
            },
        }

        response = DetectIntentResponse.from_reply(reply)

        assert response.intent_name == "order_pizza"
        assert response.confidence == 0.5
        assert response.fulfillment_text == "Which size?"

    def test_proto3_defaults(self):
        """No intent matched and default-valued fields omitted."""
        response = DetectIntentResponse.from_reply({"query_result": {}})

        assert response.intent_name == ""
        assert response.confidence == 0.0
        assert response.fulfillment_text == ""

    def test_falls_back_to_intent_resource_name(self):
        reply = {"query_result": {"intent": {"name": "projects/p1/agent/intents/42"}}}
        assert DetectIntentResponse.from_reply(reply).intent_name == "projects/p1/agent/intents/42"

    def test_integer_confidence(self):
        reply = {"query_result": {"intent_detection_confidence": 1}}
        assert DetectIntentResponse.from_reply(reply).confidence == 1.0

    @pytest.mark.parametrize(
        "reply",
        [
            None,
            ["query_result"],
            {},
            {"query_result": "greeting"},
            {"query_result": {"intent": "greeting"}},
            {"query_result": {"intent_detection_confidence": "0.9"}},
            {"query_result": {"intent_detection_confidence": True}},
            {"query_result": {"intent_detection_confidence": 1.5}},
            {"query_result": {"intent_detection_confidence": -0.1}},
            {"query_result": {"fulfillment_text": 42}},
            {"query_result": {"intent": {"display_name": 7}}},
        ],
    )
    def test_malformed_reply(self, reply):
        with pytest.raises(DecodeError):
            DetectIntentResponse.from_reply(reply)

    def test_value_equality(self):
        assert DetectIntentResponse.from_reply(make_reply()) == DetectIntentResponse.from_reply(make_reply())
