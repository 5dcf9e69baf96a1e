"""Transaction runner for multi-record ledger updates.

Every mutating ledger operation (wallet pair + loan + settlement record, or
payment + allocations + wallets) runs as ONE unit of work:

  - success            → COMMIT
  - AppError           → ROLLBACK, re-raised unchanged (validation, not found)
  - lost update        → ROLLBACK, retried (ConcurrentModificationError)
  - PG 40001 / 40P01   → ROLLBACK, retried (serialization failure / deadlock)
  - other DB failure   → ROLLBACK, raised as StoreError

Nothing is ever partially committed.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.sf_common.errors import AppError, ConcurrentModificationError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # asyncpg exposes .sqlstate, psycopg exposes .pgcode
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ConcurrentModificationError):
        return True
    if isinstance(exc, DBAPIError):
        return _sqlstate(exc) in _RETRYABLE_SQLSTATES
    return False


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_retries: int | None = None,
) -> T:
    """Run `work` in a transaction on `db`, retrying on write conflicts.

    `work` must be safe to re-run from scratch: it re-reads everything it
    needs, because a retry starts from a rolled-back session.
    """
    retries = settings.TX_MAX_RETRIES if max_retries is None else max_retries
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await work()
            await db.commit()
            return result
        except AppError as exc:
            await db.rollback()
            if is_retryable(exc) and attempt <= retries:
                logger.warning("%s: retry %d after conflict: %s", label, attempt, exc.message)
                await asyncio.sleep(settings.TX_RETRY_BACKOFF_MS * attempt / 1000)
                continue
            raise
        except DBAPIError as exc:
            await db.rollback()
            if is_retryable(exc) and attempt <= retries:
                logger.warning(
                    "%s: retry %d after sqlstate %s", label, attempt, _sqlstate(exc)
                )
                await asyncio.sleep(settings.TX_RETRY_BACKOFF_MS * attempt / 1000)
                continue
            logger.error("%s: store rejected write: %s", label, exc)
            raise StoreError(f"{label} failed: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("%s: store error: %s", label, exc)
            raise StoreError(f"{label} failed: {exc}") from exc
        except Exception:
            await db.rollback()
            raise


@asynccontextmanager
async def store_errors(label: str) -> AsyncIterator[None]:
    """Read-only counterpart: surface DB failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("%s: store error: %s", label, exc)
        raise StoreError(f"{label} failed: {exc}") from exc
