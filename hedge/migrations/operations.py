from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Column, inspect
from sqlalchemy.engine import Connection
from sqlalchemy.sql.elements import TextClause

from hedge.core.errors import AlreadyExistsError


class SchemaOperations:
    """Additive DDL operations that refuse to touch existing schema objects.

    Thin wrapper over alembic's ``Operations``: each call inspects the live
    schema first and raises ``AlreadyExistsError`` instead of emitting DDL
    that would fail (or silently succeed) against an existing object.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._op = Operations(MigrationContext.configure(connection=connection))

    def _table_names(self) -> set[str]:
        return set(inspect(self._connection).get_table_names())

    def create_table(self, table_name: str, *columns: Any, **kw: Any) -> None:
        if table_name in self._table_names():
            raise AlreadyExistsError(f"Table {table_name} already exists")
        self._op.create_table(table_name, *columns, **kw)

    def add_column(self, table_name: str, column: Column[Any]) -> None:
        existing = {col["name"] for col in inspect(self._connection).get_columns(table_name)}
        if column.name in existing:
            raise AlreadyExistsError(f"Column {table_name}.{column.name} already exists")
        if not column.nullable and column.server_default is None:
            raise ValueError(
                f"Column {table_name}.{column.name} must be nullable or carry a server default "
                "so existing rows stay valid"
            )
        self._op.add_column(table_name, column)

    def create_index(
        self,
        index_name: str,
        table_name: str,
        columns: Sequence[str | TextClause],
        **kw: Any,
    ) -> None:
        existing = {index["name"] for index in inspect(self._connection).get_indexes(table_name)}
        if index_name in existing:
            raise AlreadyExistsError(f"Index {index_name} already exists")
        self._op.create_index(index_name, table_name, list(columns), **kw)
