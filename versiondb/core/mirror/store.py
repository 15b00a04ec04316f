# versiondb/core/mirror/store.py
"""
MIRROR STORE - Own the mirrored tables in SQLite

Purpose:
    1. Create the tables once at startup
    2. Replace both tables wholesale inside one transaction
    3. Run caller SQL on a fresh read-only connection

Data Flow:
    fetch() -> replace_all() -> versions / versionTypes
    caller SQL -> execute_query() -> codec.decode_row() -> [{...}, ...]
"""

import logging
import re
from typing import Any, Dict, List, Sequence

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError

from versiondb.core import models
from versiondb.core.database import Base, create_reader_engine, create_writer_engine
from versiondb.core.exceptions import (
    QueryExecutionError,
    QuerySyntaxError,
    StoreError,
)
from versiondb.core.mirror import codec
from versiondb.core.schemas import VersionEntry, VersionTypeEntry

logger = logging.getLogger(__name__)


def _driver_message(error: Exception) -> str:
    # Prefer the sqlite message over SQLAlchemy's wrapped text with SQL and link
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)


LEADING_COMMENTS = re.compile(r"(?:\s+|--[^\n]*(?:\n|$)|/\*.*?\*/)*", re.DOTALL)


def _explain(sql: str) -> str:
    # EXPLAIN cannot be nested
    body = sql[LEADING_COMMENTS.match(sql).end() :]
    if body[:7].upper() == "EXPLAIN":
        return sql
    return f"EXPLAIN {sql}"


class MirrorStore:
    """SQLite file holding the `versions` and `versionTypes` tables."""

    def __init__(self, path: str, echo: bool = False):
        self.path = path
        self.writer = create_writer_engine(path, echo=echo)
        self.reader = create_reader_engine(path, echo=echo)

    async def ensure_schema(self) -> None:
        """Create both tables if they are missing. Safe to call again."""
        try:
            async with self.writer.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not create schema: {_driver_message(e)}") from e

    async def replace_all(
        self,
        versions: Sequence[VersionEntry],
        version_types: Sequence[VersionTypeEntry],
    ) -> None:
        """
        Swap both tables for the given snapshot.

        Every delete and insert runs in one transaction. If any statement
        fails the transaction rolls back and readers keep the old snapshot.

        Raises:
            StoreError: the transaction did not commit
        """
        version_rows = [entry.model_dump() for entry in versions]
        type_rows = [entry.model_dump() for entry in version_types]

        try:
            async with self.writer.begin() as conn:
                await conn.execute(delete(models.Version))
                if version_rows:
                    await conn.execute(insert(models.Version), version_rows)

                await conn.execute(delete(models.VersionType))
                if type_rows:
                    await conn.execute(insert(models.VersionType), type_rows)
        # OverflowError comes straight from sqlite3 for ints past 64 bits
        except (SQLAlchemyError, OverflowError) as e:
            logger.error(f"Mirror replace rolled back: {_driver_message(e)}")
            raise StoreError(
                f"Failed to replace mirror: {_driver_message(e)}"
            ) from e

        logger.info(
            f"Mirror replaced: {len(version_rows)} versions, "
            f"{len(type_rows)} version types"
        )

    async def execute_query(
        self, sql: str, params: Sequence[Any] = ()
    ) -> List[Dict[str, Any]]:
        """
        Run caller SQL read-only and return decoded rows.

        The statement is compiled first with EXPLAIN, which prepares it
        without running it, so prepare failures and run failures can be told
        apart.

        Raises:
            StoreError: the database file could not be opened
            QuerySyntaxError: the statement did not prepare
            QueryExecutionError: the statement failed while producing rows
        """
        params = tuple(params)

        try:
            conn = await self.reader.connect()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not open mirror database: {_driver_message(e)}"
            ) from e

        try:
            try:
                await conn.exec_driver_sql(_explain(sql), params)
            except SQLAlchemyError as e:
                logger.debug(f"Query failed to prepare: {_driver_message(e)}")
                raise QuerySyntaxError(_driver_message(e)) from e

            try:
                result = await conn.exec_driver_sql(sql, params)
                columns = list(result.keys()) if result.returns_rows else []
                rows = result.fetchall() if result.returns_rows else []
            except SQLAlchemyError as e:
                logger.debug(f"Query failed to execute: {_driver_message(e)}")
                raise QueryExecutionError(_driver_message(e)) from e
        finally:
            await conn.close()

        return [codec.decode_row(columns, row) for row in rows]

    async def counts(self) -> Dict[str, int]:
        """Row count per mirrored table."""
        try:
            async with self.reader.connect() as conn:
                versions = await conn.scalar(
                    select(func.count()).select_from(models.Version)
                )
                version_types = await conn.scalar(
                    select(func.count()).select_from(models.VersionType)
                )
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not read mirror counts: {_driver_message(e)}"
            ) from e

        return {"versions": versions, "versionTypes": version_types}

    async def dispose(self) -> None:
        await self.writer.dispose()
        await self.reader.dispose()
