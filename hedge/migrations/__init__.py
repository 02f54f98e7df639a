"""Versioned, forward-only schema migrations for the Hedge store.

Example:
    from hedge.migrations import SchemaStore

    store = SchemaStore(engine)
    applied = await store.upgrade()
"""

from hedge.migrations.operations import SchemaOperations
from hedge.migrations.registry import Migration, load_migrations, order_migrations
from hedge.migrations.store import MigrationStatus, SchemaStore, schema_migrations

__all__ = [
    "Migration",
    "MigrationStatus",
    "SchemaOperations",
    "SchemaStore",
    "load_migrations",
    "order_migrations",
    "schema_migrations",
]
