"""Error taxonomy shared by the schema store, the runner and the data-access services.

Every error carries a stable ``error_code`` so callers (the CLI, an external
application) can report failures without matching on message text.
"""

from __future__ import annotations


class SchemaStoreError(Exception):
    """Base error for schema store failures."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class AlreadyExistsError(SchemaStoreError):
    """Raised when creating a table, column or index that already exists."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "already_exists")


class MigrationConflictError(SchemaStoreError):
    """Raised when a migration's target schema object is already present."""

    def __init__(self, version: str, message: str) -> None:
        super().__init__(
            f"Migration {version} conflicts with existing schema: {message}",
            "migration_conflict",
        )
        self.version = version


class MigrationGapError(SchemaStoreError):
    """Raised when a migration is applied without its predecessor."""

    def __init__(self, version: str, expected: str | None, found: str | None) -> None:
        super().__init__(
            f"Migration {version} requires {expected or 'an empty store'} "
            f"but the store is at {found or 'no version'}",
            "migration_gap",
        )
        self.version = version
        self.expected = expected
        self.found = found


class ConstraintViolationError(SchemaStoreError):
    """Raised when a write violates a constraint the engine enforces (uniqueness)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "constraint_violation")


class DanglingReferenceError(SchemaStoreError):
    """Raised by the validation layer when a soft foreign key resolves to no row."""

    def __init__(self, table: str, column: str, value: str) -> None:
        super().__init__(f"{table}.{column} references missing row {value!r}", "dangling_reference")
        self.table = table
        self.column = column
        self.value = value


class InvalidThreadError(SchemaStoreError):
    """Raised when a reply's parent comment belongs to a different item."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "invalid_thread")


class RecordNotFoundError(SchemaStoreError):
    """Raised when a write targets a row that does not exist."""

    def __init__(self, table: str, key: str) -> None:
        super().__init__(f"No row in {table} with key {key!r}", "not_found")
        self.table = table
        self.key = key
