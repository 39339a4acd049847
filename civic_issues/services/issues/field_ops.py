"""
Atomic field operations understood by the issue store.

A partial update is a mapping of field name to either a plain value (set the
field) or one of the operations below, which the store applies server side
so concurrent writers never overwrite each other's unrelated changes.
"""

# Standard library imports
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


class _ServerTimestamp:
    """Placeholder resolved to the write time when the store applies an update."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    amount: int = 1


@dataclass(frozen=True, init=False)
class ArrayUnion:
    values: tuple[Any, ...]

    def __init__(self, *values: Any):
        object.__setattr__(self, "values", values)


FieldOp = Increment | ArrayUnion


def resolve_server_timestamps(value: Any, now: datetime | None = None) -> Any:
    """Replace every SERVER_TIMESTAMP in value (recursively) with now, as ISO text."""
    now = now or datetime.now(UTC)
    if value is SERVER_TIMESTAMP:
        return now.isoformat()
    if isinstance(value, Mapping):
        return {key: resolve_server_timestamps(item, now) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [resolve_server_timestamps(item, now) for item in value]
    return value


def array_union(current: list[Any] | None, additions: tuple[Any, ...]) -> list[Any]:
    """Append each addition that is not already present, keeping existing order."""
    result = list(current or [])
    for item in additions:
        if item not in result:
            result.append(item)
    return result
