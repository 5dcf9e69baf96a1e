"""Tests for sf_common.transaction — commit, rollback, retry and error mapping."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError

from src.sf_common.errors import (
    ConcurrentModificationError,
    StoreError,
    ValidationError,
)
from src.sf_common.transaction import is_retryable, run_in_transaction, store_errors


def _pg_error(sqlstate: str) -> DBAPIError:
    orig = Exception("pg failure")
    orig.sqlstate = sqlstate  # type: ignore[attr-defined]
    return DBAPIError("UPDATE ...", {}, orig)


class TestIsRetryable:
    def test_concurrent_modification(self) -> None:
        assert is_retryable(ConcurrentModificationError("loan LN-1"))

    def test_serialization_failure(self) -> None:
        assert is_retryable(_pg_error("40001"))

    def test_deadlock(self) -> None:
        assert is_retryable(_pg_error("40P01"))

    def test_check_violation_not_retryable(self) -> None:
        assert not is_retryable(_pg_error("23514"))

    def test_validation_not_retryable(self) -> None:
        assert not is_retryable(ValidationError("bad"))


class TestRunInTransaction:
    async def test_commits_on_success(self) -> None:
        db = AsyncMock()
        work = AsyncMock(return_value="done")

        result = await run_in_transaction(db, work, label="t")

        assert result == "done"
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_app_error_rolls_back_and_propagates(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=ValidationError("nope"))

        with pytest.raises(ValidationError):
            await run_in_transaction(db, work, label="t")

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        assert work.await_count == 1

    async def test_retries_conflict_then_succeeds(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=[ConcurrentModificationError("x"), "ok"])

        with patch("src.sf_common.transaction.asyncio.sleep") as sleep:
            result = await run_in_transaction(db, work, label="t", max_retries=2)

        assert result == "ok"
        assert work.await_count == 2
        db.rollback.assert_awaited_once()
        sleep.assert_awaited_once()

    async def test_retries_deadlock(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=[_pg_error("40P01"), "ok"])

        with patch("src.sf_common.transaction.asyncio.sleep"):
            result = await run_in_transaction(db, work, label="t", max_retries=1)

        assert result == "ok"

    async def test_gives_up_after_max_retries(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=ConcurrentModificationError("x"))

        with (
            patch("src.sf_common.transaction.asyncio.sleep"),
            pytest.raises(ConcurrentModificationError),
        ):
            await run_in_transaction(db, work, label="t", max_retries=2)

        assert work.await_count == 3
        assert db.rollback.await_count == 3

    async def test_non_retryable_db_error_becomes_store_error(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=_pg_error("23514"))

        with pytest.raises(StoreError) as exc_info:
            await run_in_transaction(db, work, label="settle")

        assert exc_info.value.code == 9001
        assert "settle" in exc_info.value.message
        db.rollback.assert_awaited_once()

    async def test_unexpected_error_rolls_back(self) -> None:
        db = AsyncMock()
        work = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await run_in_transaction(db, work, label="t")

        db.rollback.assert_awaited_once()


class TestStoreErrors:
    async def test_maps_sqlalchemy_error(self) -> None:
        with pytest.raises(StoreError):
            async with store_errors("read"):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def test_passes_app_errors_through(self) -> None:
        with pytest.raises(ValidationError):
            async with store_errors("read"):
                raise ValidationError("bad")

    async def test_no_error(self) -> None:
        marker = MagicMock()
        async with store_errors("read"):
            marker()
        marker.assert_called_once()
