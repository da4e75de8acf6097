"""
Database Tests

Simple tests for the option table and option store:
- Model construction
- Upsert statement shape
- Commit after every write
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql

from search_sync_server.db.models import Option
from search_sync_server.db.option_store import SqlOptionStore


class TestOptionModel:
    """Tests for the Option model."""

    def test_option_creation(self):
        option = Option(key="search_sync_index_status", value={"page": 1})

        assert option.key == "search_sync_index_status"
        assert option.value == {"page": 1}

    def test_table_name(self):
        assert Option.__tablename__ == "option"


class TestSqlOptionStore:

    @pytest.mark.asyncio
    async def test_get_returns_scalar(self):
        session = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = {"page": 3}
        session.execute.return_value = result

        assert await SqlOptionStore(session).get("progress") == {"page": 3}

    @pytest.mark.asyncio
    async def test_set_upserts_and_commits(self):
        session = AsyncMock()

        await SqlOptionStore(session).set("progress", {"page": 2})

        stmt = session.execute.await_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (key) DO UPDATE" in sql
        session.commit.assert_awaited_once()
