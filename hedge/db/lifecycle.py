"""Tagged lifecycle state for soft-deletable rows.

The ``deleted_at`` column is a nullable timestamp; application code sees it as
either ``Active()`` or ``Deleted(at=...)`` so every call site spells out which
state it handles.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Active:
    is_deleted = False


@dataclass(frozen=True)
class Deleted:
    at: int
    is_deleted = True


Lifecycle = Active | Deleted


def lifecycle_from_column(deleted_at: int | None) -> Lifecycle:
    if deleted_at is None:
        return Active()
    return Deleted(at=deleted_at)


def lifecycle_to_column(state: Lifecycle) -> int | None:
    if isinstance(state, Deleted):
        return state.at
    return None
