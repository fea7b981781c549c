"""
Tally Backend - Middleware and Model Wiring Tests
==================================================

What:  Request id resolution, the access log line, list filter parsing and
       foreign key definitions.

What we test:
    ✅ Client request ids are kept only when they are safe tokens
    ✅ Access log carries the session user and request id
    ✅ Blank filter values parse as "no filter"
    ✅ Foreign keys do not cascade deletes
"""

import logging

import pytest

from tally.middleware.logging import ANONYMOUS, level_for_status
from tally.middleware.request_id import resolve_request_id
from tally.models import ElementInt, Record
from tally.resources import ELEMENT_INTS, RECORDS
from tally.routes.crud import build_filter_model


class TestRequestId:

    def test_safe_client_id_is_kept(self):
        assert resolve_request_id("frontend-42.a_b") == "frontend-42.a_b"

    def test_missing_id_is_generated(self):
        rid = resolve_request_id(None)
        assert len(rid) == 12
        assert resolve_request_id(None) != rid

    @pytest.mark.parametrize("value", ["", "bad id", "x" * 65, "abc\r\nInjected: 1"])
    def test_unsafe_client_id_is_replaced(self, value):
        rid = resolve_request_id(value)
        assert rid != value
        assert len(rid) == 12

    @pytest.mark.asyncio
    async def test_unsafe_header_not_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "a b c"})
        assert response.headers["X-Request-ID"] != "a b c"


class TestAccessLog:

    def test_level_follows_status_class(self):
        assert level_for_status(200) == logging.INFO
        assert level_for_status(204) == logging.INFO
        assert level_for_status(404) == logging.WARNING
        assert level_for_status(500) == logging.ERROR

    @pytest.mark.asyncio
    async def test_line_names_session_user(self, auth_client, caplog):
        me = await auth_client.get("/auth/me")
        user_id = str(me.json()["data"]["id"])

        with caplog.at_level(logging.INFO, logger="tally.access"):
            caplog.clear()
            response = await auth_client.get("/records", headers={"X-Request-ID": "trace-1"})

        lines = [r for r in caplog.records if r.name == "tally.access"]
        assert len(lines) == 1
        assert lines[0].user_id == user_id
        assert lines[0].request_id == "trace-1"
        assert lines[0].status == response.status_code

    @pytest.mark.asyncio
    async def test_anonymous_request_is_logged_as_warning(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="tally.access"):
            caplog.clear()
            await test_client.get("/records")

        lines = [r for r in caplog.records if r.name == "tally.access"]
        assert lines[0].user_id == ANONYMOUS
        assert lines[0].levelno == logging.WARNING

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="tally.access"):
            caplog.clear()
            await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "tally.access"]


class TestFilterModel:

    def test_blank_values_mean_no_filter(self):
        filters = build_filter_model(RECORDS).model_validate(
            {"VariableId": "", "DateRecordId": "  "}
        )
        assert filters.model_dump() == {"VariableId": None, "DateRecordId": None}

    def test_numeric_strings_are_ids(self):
        filters = build_filter_model(ELEMENT_INTS).model_validate({"ElementId": "7"})
        assert filters.ElementId == 7

    def test_non_numeric_value_is_rejected(self):
        with pytest.raises(ValueError):
            build_filter_model(RECORDS).model_validate({"VariableId": "abc"})


class TestForeignKeys:

    @pytest.mark.parametrize(
        "column",
        [
            Record.__table__.c.VariableId,
            Record.__table__.c.DateRecordId,
            ElementInt.__table__.c.ElementId,
        ],
    )
    def test_deletes_are_not_cascaded(self, column):
        (foreign_key,) = column.foreign_keys
        assert foreign_key.ondelete is None
