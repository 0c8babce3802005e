"""
Preference Store

Durable per-user preference storage behind a small protocol so the
preference engine only depends on two operations:

    find_unique(user_id)    — fetch the record for a user, or None
    upsert(user_id, data)   — create the record, or replace its payload

``SQLAlchemyPreferenceStore`` is the database-backed implementation. On
PostgreSQL and SQLite the upsert is a single INSERT .. ON CONFLICT statement
keyed on the unique ``user_id``, so concurrent first writes for one user
resolve as last-write-wins instead of a constraint violation. Other backends
select, write, and re-apply the write once if a concurrent insert wins the
race. Any other SQLAlchemy failure is rolled back and re-raised as
PreferenceStorageError.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002

from preference_api.database import get_db
from preference_api.exceptions import PreferenceStorageError
from preference_api.models.preference import UserPreference

logger = logging.getLogger(__name__)

# Dialects with a native INSERT .. ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PreferenceRecord(Protocol):
    user_id: Any
    data: Any


class PreferenceStore(Protocol):
    async def find_unique(self, user_id: int) -> PreferenceRecord | None: ...

    async def upsert(self, user_id: int, data: dict[str, Any]) -> PreferenceRecord: ...


class SQLAlchemyPreferenceStore:
    """PreferenceStore backed by the ``user_preferences`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_unique(self, user_id: int) -> UserPreference | None:
        try:
            result = await self.db.execute(select(UserPreference).where(UserPreference.user_id == user_id))
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Preference lookup failed for user_id=%s: %s", user_id, e)
            raise PreferenceStorageError(operation="find_unique") from e

    async def upsert(self, user_id: int, data: dict[str, Any]) -> UserPreference:
        """Create the user's record, or replace its payload wholesale."""
        insert = UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
        try:
            if insert is not None:
                record = await self._insert_on_conflict(insert, user_id, data)
            else:
                try:
                    record = await self._select_and_write(user_id, data)
                except IntegrityError:
                    # Another session inserted the row first; it now exists
                    await self.db.rollback()
                    record = await self._select_and_write(user_id, data)
            await self.db.commit()
            await self.db.refresh(record)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Preference upsert failed for user_id=%s: %s", user_id, e)
            raise PreferenceStorageError(operation="upsert") from e

        logger.info("Preference stored: user_id=%s", user_id)
        return record

    async def _insert_on_conflict(self, insert, user_id: int, data: dict[str, Any]) -> UserPreference:
        stmt = insert(UserPreference).values(user_id=user_id, data=data)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserPreference.user_id],
            set_={"data": stmt.excluded.data, "updated_at": datetime.now(timezone.utc)},
        )
        result = await self.db.execute(
            stmt.returning(UserPreference),
            execution_options={"populate_existing": True},
        )
        return result.scalars().one()

    async def _select_and_write(self, user_id: int, data: dict[str, Any]) -> UserPreference:
        result = await self.db.execute(select(UserPreference).where(UserPreference.user_id == user_id))
        record = result.scalars().first()
        if record is None:
            record = UserPreference(user_id=user_id, data=data)
            self.db.add(record)
        else:
            record.data = data
        await self.db.flush()
        return record


async def get_preference_store(db: AsyncSession = Depends(get_db)) -> PreferenceStore:
    """FastAPI dependency providing the database-backed store."""
    return SQLAlchemyPreferenceStore(db)
