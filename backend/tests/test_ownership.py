"""
Clinic Tracker Backend — Ownership Check Unit Tests
====================================================

What:  Tests for the record ownership predicate shared by update and delete.
How:   Records are plain namespaces; the session is the mock_db_session fixture.

What we test:
    ✅ classify(): missing → NOT_FOUND, other owner → FORBIDDEN, owner → OK
    ✅ require_ownership() raises NotFoundError / ForbiddenError accordingly
    ✅ The owned record is returned unchanged
"""

from types import SimpleNamespace

import pytest

from clinic_api.exceptions import ForbiddenError, NotFoundError
from clinic_api.models import WeightRecord
from clinic_api.services.ownership import (
    Ownership,
    check_ownership,
    classify,
    require_ownership,
)


class TestClassify:

    def test_missing_record(self):
        assert classify(None, 1) is Ownership.NOT_FOUND

    def test_foreign_record(self):
        assert classify(SimpleNamespace(user_id=2), 1) is Ownership.FORBIDDEN

    def test_owned_record(self):
        assert classify(SimpleNamespace(user_id=1), 1) is Ownership.OK


class TestRequireOwnership:

    @pytest.mark.asyncio
    async def test_returns_owned_record(self, mock_db_session):
        record = SimpleNamespace(id=5, user_id=1)
        mock_db_session.get.return_value = record

        result = await require_ownership(
            mock_db_session, WeightRecord, 5, 1, resource="weight record", action="update"
        )

        assert result is record
        mock_db_session.get.assert_awaited_once_with(WeightRecord, 5)

    @pytest.mark.asyncio
    async def test_missing_record_raises_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await require_ownership(
                mock_db_session, WeightRecord, 99, 1, resource="weight record", action="update"
            )
        assert exc_info.value.context["resource_id"] == "99"

    @pytest.mark.asyncio
    async def test_foreign_record_raises_forbidden(self, mock_db_session):
        mock_db_session.get.return_value = SimpleNamespace(id=5, user_id=2)

        with pytest.raises(ForbiddenError) as exc_info:
            await require_ownership(
                mock_db_session, WeightRecord, 5, 1, resource="weight record", action="delete"
            )
        assert "delete this weight record" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_check_ownership_returns_record(self, mock_db_session):
        record = SimpleNamespace(id=5, user_id=2)
        mock_db_session.get.return_value = record

        outcome, loaded = await check_ownership(mock_db_session, WeightRecord, 5, 1)

        assert outcome is Ownership.FORBIDDEN
        assert loaded is record
