"""Commit handling shared by every repository."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from travel_crm.core.exceptions import InvalidLeadDataError, StoreError
from travel_crm.repositories.base import BaseRepository


def _session(error):
    db = AsyncMock()
    db.commit = AsyncMock(side_effect=error)
    return db


class TestCommit:
    @pytest.mark.asyncio
    async def test_success_does_not_roll_back(self):
        db = AsyncMock()
        await BaseRepository(db).commit()
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_listener_error_rolls_back_and_propagates(self):
        error = InvalidLeadDataError("no_of_pax must be greater than zero")
        db = _session(error)

        with pytest.raises(InvalidLeadDataError) as info:
            await BaseRepository(db).commit()

        assert info.value is error
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_append_only_violation_rolls_back(self):
        db = _session(StoreError("Follow-up history is append-only"))

        with pytest.raises(StoreError, match="append-only"):
            await BaseRepository(db).commit()

        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_error_becomes_store_error(self):
        db = _session(IntegrityError("INSERT", {}, Exception("check violated")))

        with pytest.raises(StoreError, match="IntegrityError"):
            await BaseRepository(db).commit()

        db.rollback.assert_awaited_once()
