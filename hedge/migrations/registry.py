"""Discovery and ordering of migration modules.

Migration modules follow the alembic revision-file layout: a docstring whose
first line describes the change, module-level ``revision`` and
``down_revision`` strings, and an ``upgrade(op)`` function receiving a
``SchemaOperations``.
"""

from __future__ import annotations

import importlib
import pkgutil
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import ModuleType

from sqlalchemy.engine import Connection

from hedge.core.errors import MigrationGapError
from hedge.migrations.operations import SchemaOperations

DEFAULT_PACKAGE = "hedge.migrations.versions"


@dataclass(frozen=True)
class Migration:
    version: str
    description: str
    down_version: str | None
    upgrade: Callable[[SchemaOperations], None]

    def __post_init__(self) -> None:
        if self.down_version is not None and self.version <= self.down_version:
            raise ValueError(
                f"Migration {self.version} must sort after its predecessor {self.down_version}"
            )

    @classmethod
    def from_module(cls, module: ModuleType) -> Migration:
        doc = (module.__doc__ or "").strip()
        return cls(
            version=module.revision,
            description=doc.splitlines()[0] if doc else module.__name__.rsplit(".", 1)[-1],
            down_version=module.down_revision,
            upgrade=module.upgrade,
        )

    def apply(self, connection: Connection) -> None:
        self.upgrade(SchemaOperations(connection))


def order_migrations(migrations: Iterable[Migration]) -> list[Migration]:
    """Sort migrations by version and check that each one follows its predecessor."""
    ordered = sorted(migrations, key=lambda migration: migration.version)
    seen: set[str] = set()
    previous: str | None = None
    for migration in ordered:
        if migration.version in seen:
            raise ValueError(f"Duplicate migration version {migration.version}")
        if migration.down_version != previous:
            raise MigrationGapError(migration.version, migration.down_version, previous)
        seen.add(migration.version)
        previous = migration.version
    return ordered


def load_migrations(package: str = DEFAULT_PACKAGE) -> list[Migration]:
    root = importlib.import_module(package)
    migrations = [
        Migration.from_module(importlib.import_module(f"{package}.{info.name}"))
        for info in pkgutil.iter_modules(root.__path__)
        if not info.ispkg
    ]
    return order_migrations(migrations)
