"""
Tally Backend - Diff-and-Update Unit Tests
===========================================

What:  Tests for update_for_each and diff_fields.
How:   A SimpleNamespace stands in for the ORM row; the session is an AsyncMock.

What we test:
    ✅ Same values re-sent → no-op, no flush
    ✅ One differing field → only that field written, single flush
    ✅ Absent fields never touched
"""

from types import SimpleNamespace

import pytest

from tally.core.partial import PartialUpdate
from tally.core.updates import diff_fields, update_for_each


def make_record(**overrides):
    values = {"id": 1, "record": 5.0, "VariableId": 1, "DateRecordId": 2}
    values.update(overrides)
    return SimpleNamespace(**values)


class TestDiffFields:

    def test_equal_values_produce_no_changes(self):
        target = make_record()
        update = PartialUpdate.from_mapping({"record": 5, "VariableId": 1})
        assert diff_fields(target, update) == {}

    def test_changed_values_are_reported(self):
        target = make_record()
        update = PartialUpdate.from_mapping({"record": 9, "VariableId": 1})
        assert diff_fields(target, update) == {"record": 9}


class TestUpdateForEach:

    @pytest.mark.asyncio
    async def test_same_values_is_noop(self, mock_db_session):
        target = make_record()
        update = PartialUpdate.from_mapping({"record": 5.0})

        is_same = await update_for_each(mock_db_session, target, update)

        assert is_same is True
        assert target.record == 5.0
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_changed_field_is_written(self, mock_db_session):
        target = make_record()
        update = PartialUpdate.from_mapping({"record": 9.0, "DateRecordId": 2})

        is_same = await update_for_each(mock_db_session, target, update)

        assert is_same is False
        assert target.record == 9.0
        assert target.DateRecordId == 2
        assert target.VariableId == 1
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_several_changes_flush_once(self, mock_db_session):
        target = make_record()
        update = PartialUpdate.from_mapping({"record": 1.0, "VariableId": 7, "DateRecordId": 8})

        is_same = await update_for_each(mock_db_session, target, update)

        assert is_same is False
        assert (target.record, target.VariableId, target.DateRecordId) == (1.0, 7, 8)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_update_is_noop(self, mock_db_session):
        target = make_record()
        is_same = await update_for_each(mock_db_session, target, PartialUpdate())
        assert is_same is True
        mock_db_session.flush.assert_not_awaited()
