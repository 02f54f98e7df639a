from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from pydantic import BaseModel
from sqlalchemy import Column, Integer, MetaData, Table, Text, insert, select
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from hedge.core.errors import AlreadyExistsError, MigrationConflictError, MigrationGapError
from hedge.db.base import epoch_now
from hedge.db.session import EXCLUSIVE_LOCK_OPTION
from hedge.migrations.registry import Migration, load_migrations, order_migrations

logger = logging.getLogger(__name__)

tracking_metadata = MetaData()

# Append-only log of applied versions
schema_migrations = Table(
    "schema_migrations",
    tracking_metadata,
    Column("version", Text, primary_key=True),
    Column("description", Text, nullable=False),
    Column("applied_at", Integer, nullable=False),
)


class MigrationStatus(BaseModel):
    version: str
    description: str
    applied_at: int | None = None

    @property
    def applied(self) -> bool:
        return self.applied_at is not None


def _ensure_tracking_table(connection: Connection) -> None:
    tracking_metadata.create_all(connection, checkfirst=True)


class SchemaStore:
    """Creates and evolves the store schema through versioned migrations.

    Every migration runs in its own transaction holding the database write
    lock; the DDL and the version record commit together or not at all.
    """

    def __init__(self, engine: AsyncEngine, migrations: Sequence[Migration] | None = None) -> None:
        self._engine = engine
        self._migrations = order_migrations(
            migrations if migrations is not None else load_migrations()
        )
        if not self._migrations:
            raise ValueError("SchemaStore needs at least one migration")

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    @asynccontextmanager
    async def _locked_transaction(self) -> AsyncIterator[AsyncConnection]:
        async with self._engine.connect() as conn:
            await conn.execution_options(**{EXCLUSIVE_LOCK_OPTION: True})
            async with conn.begin():
                await conn.run_sync(_ensure_tracking_table)
                yield conn

    async def _applied(self, conn: AsyncConnection) -> dict[str, int]:
        result = await conn.execute(
            select(schema_migrations.c.version, schema_migrations.c.applied_at).order_by(
                schema_migrations.c.version
            )
        )
        return {row.version: row.applied_at for row in result}

    async def _apply(self, conn: AsyncConnection, migration: Migration) -> None:
        await conn.run_sync(migration.apply)
        await conn.execute(
            insert(schema_migrations).values(
                version=migration.version,
                description=migration.description,
                applied_at=epoch_now(),
            )
        )
        logger.info(
            "Applied migration",
            extra={"version": migration.version, "description": migration.description},
        )

    async def create(self) -> str:
        """Create all tables from the base migration.

        Raises:
            AlreadyExistsError: If the schema was already created or any of its
                tables or indexes exist.
        """
        base = self._migrations[0]
        async with self._locked_transaction() as conn:
            applied = await self._applied(conn)
            if applied:
                raise AlreadyExistsError(f"Schema already created (at version {max(applied)})")
            await self._apply(conn, base)
        return base.version

    async def migrate(self, migration: Migration) -> bool:
        """Apply a single migration.

        Returns:
            True if the migration was applied, False if it was already recorded.

        Raises:
            MigrationGapError: If the store is not at the migration's predecessor.
            MigrationConflictError: If a table, column or index the migration
                creates already exists.
        """
        async with self._locked_transaction() as conn:
            applied = await self._applied(conn)
            if migration.version in applied:
                logger.info("Migration already applied", extra={"version": migration.version})
                return False
            head = max(applied) if applied else None
            if migration.down_version != head:
                raise MigrationGapError(migration.version, migration.down_version, head)
            try:
                await self._apply(conn, migration)
            except AlreadyExistsError as exc:
                raise MigrationConflictError(migration.version, str(exc)) from exc
        return True

    async def upgrade(self, target: str | None = None) -> list[str]:
        """Apply every pending migration up to and including ``target``."""
        known = [migration.version for migration in self._migrations]
        if target is not None and target not in known:
            raise ValueError(f"Unknown migration version {target}")

        applied_now: list[str] = []
        for migration in self._migrations:
            if target is not None and migration.version > target:
                break
            if await self.migrate(migration):
                applied_now.append(migration.version)
        return applied_now

    async def status(self) -> list[MigrationStatus]:
        async with self._engine.begin() as conn:
            await conn.run_sync(_ensure_tracking_table)
            applied = await self._applied(conn)
        return [
            MigrationStatus(
                version=migration.version,
                description=migration.description,
                applied_at=applied.get(migration.version),
            )
            for migration in self._migrations
        ]

    async def current_version(self) -> str | None:
        applied = [entry.version for entry in await self.status() if entry.applied]
        return applied[-1] if applied else None
