"""
Option Store

PostgreSQL-backed key/value store implementing the option-store contract
used by the indexer for its progress state:

- get(key) -> value | None
- set(key, value)

No caching: every read goes to the database, every write is committed.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects.postgresql import insert as pg_insert

from .models import Option


class SqlOptionStore:
    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize with an async database session.

        Parameters
        ----------
        session : AsyncSession
            SQLAlchemy async session for database operations.
        """
        self._session = session

    async def get(self, key: str) -> Optional[Any]:
        result = await self._session.execute(
            select(Option.value).where(Option.key == key)
        )
        return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        """
        Insert or overwrite `key`, committing immediately so progress
        survives a crash between steps.
        """
        stmt = pg_insert(Option).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Option.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        await self._session.execute(stmt)
        await self._session.commit()
