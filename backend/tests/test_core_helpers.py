"""
Tally Backend - Core Helper Unit Tests
=======================================

What:  Tests for the envelope, required-field validation and the
       three-state partial update structure.
How:   Pure functions and pydantic models; no database.

What we test:
    ✅ Success/failure envelope shape
    ✅ Missing vs empty vs falsy-but-present values
    ✅ ABSENT / NULL / VALUE detection from a parsed body
"""

from tally.core.partial import FieldState, FieldValue, PartialUpdate
from tally.core.responses import get_failure, get_success
from tally.core.validation import get_validation_error, missing_fields
from tally.exceptions import ValidationError
from tally.schemas.resources import RecordPayload


class TestResponses:

    def test_success_wraps_payload(self):
        assert get_success({"id": 1}) == {"ok": True, "data": {"id": 1}}

    def test_success_with_list(self):
        assert get_success([1, 2]) == {"ok": True, "data": [1, 2]}

    def test_failure_has_message(self):
        assert get_failure("/records VariableId") == {
            "ok": False,
            "message": "/records VariableId",
        }

    def test_failure_drops_none_extras(self):
        body = get_failure("boom", error="server_error", details=None, request_id="abc")
        assert body == {
            "ok": False,
            "message": "boom",
            "error": "server_error",
            "request_id": "abc",
        }


class TestValidation:

    def test_all_present_returns_none(self):
        params = {"record": 5, "VariableId": 1, "DateRecordId": 2}
        assert get_validation_error(params) is None

    def test_missing_field_reported(self):
        params = {"record": 5, "VariableId": None, "DateRecordId": 2}
        error = get_validation_error(params, path="/records")

        assert isinstance(error, ValidationError)
        assert error.fields == ["VariableId"]
        assert error.reason == "missing_fields"
        assert error.message.startswith("/records ")
        assert "VariableId" in error.message

    def test_every_missing_field_listed_in_order(self):
        params = {"record": None, "VariableId": None, "DateRecordId": None}
        error = get_validation_error(params)
        assert error.context["fields"] == ["record", "VariableId", "DateRecordId"]

    def test_blank_string_is_empty(self):
        assert missing_fields({"name": "   ", "other": "x"}) == ["name"]

    def test_zero_and_false_are_values(self):
        assert get_validation_error({"record": 0, "flag": False}) is None


class TestPartialUpdate:

    def test_absent_null_and_value(self):
        payload = RecordPayload.model_validate({"record": 9, "VariableId": None})
        update = PartialUpdate.from_model(payload)

        assert update.get("record") == FieldValue(FieldState.VALUE, 9)
        assert update.get("VariableId").is_null
        assert update.get("DateRecordId").is_absent

    def test_empty_body_is_empty(self):
        update = PartialUpdate.from_model(RecordPayload.model_validate({}))
        assert update.is_empty()
        assert update.values() == {}

    def test_explicit_null_is_not_empty(self):
        update = PartialUpdate.from_model(RecordPayload.model_validate({"DateRecordId": None}))
        assert not update.is_empty()
        assert update.null_fields() == ["DateRecordId"]

    def test_null_fields_restricted_to_names(self):
        update = PartialUpdate.from_mapping({"record": None, "VariableId": None})
        assert update.null_fields(["VariableId", "DateRecordId"]) == ["VariableId"]

    def test_values_only_contains_sent_fields(self):
        payload = RecordPayload.model_validate({"record": 1.5, "DateRecordId": 3})
        update = PartialUpdate.from_model(payload)
        assert update.values() == {"record": 1.5, "DateRecordId": 3}

    def test_unknown_name_is_absent(self):
        assert PartialUpdate().get("anything").is_absent
