"""Query description passed from models to sources."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .models import FieldType


@dataclass(frozen=True)
class Query:
    """What to read, count, update or delete.

    Conditions map field names to a value (equality), None (field is null
    or absent) or a list/tuple/set (membership). ``order`` is a sequence of
    ``(field, "ASC" | "DESC")`` pairs.
    """

    source: str
    key: str = "id"
    schema: Mapping[str, FieldType] = field(default_factory=dict)
    conditions: Mapping[str, Any] = field(default_factory=dict)
    fields: tuple[str, ...] = ()
    order: tuple[tuple[str, str], ...] = ()
    limit: int | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        """Validate paging and ordering on creation."""
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        for _, direction in self.order:
            if direction not in ("ASC", "DESC"):
                raise ValueError(f"Invalid order direction: {direction}")

    @property
    def generates_key(self) -> bool:
        """True when sources assign the key of records created without one."""
        return self.schema.get(self.key, FieldType.ID) in (FieldType.ID, FieldType.INTEGER)

    def matches(self, record: Mapping[str, Any]) -> bool:
        """Return True if ``record`` satisfies every condition."""
        for name, expected in self.conditions.items():
            actual = record.get(name)
            if expected is None:
                if actual is not None:
                    return False
            elif _is_membership(expected):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False
        return True

    def project(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Restrict ``record`` to the requested fields, if any."""
        if not self.fields:
            return dict(record)
        return {name: record[name] for name in self.fields if name in record}

    def page(self, records: list[Any]) -> list[Any]:
        """Apply offset and limit to an already ordered list."""
        end = None if self.limit is None else self.offset + self.limit
        return records[self.offset:end]


def _is_membership(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def normalize_order(order: Any) -> tuple[tuple[str, str], ...]:
    """Accept ``"name"``, ``"name DESC"``, ``{"name": "desc"}`` or a list of those."""
    if not order:
        return ()
    if isinstance(order, str):
        parts = order.split()
        direction = parts[1].upper() if len(parts) > 1 else "ASC"
        return ((parts[0], direction),)
    if isinstance(order, Mapping):
        return tuple((name, str(direction).upper()) for name, direction in order.items())
    if isinstance(order, Sequence):
        result: list[tuple[str, str]] = []
        for item in order:
            if isinstance(item, tuple) and len(item) == 2:
                result.append((item[0], str(item[1]).upper()))
            else:
                result.extend(normalize_order(item))
        return tuple(result)
    raise ValueError(f"Unsupported order specification: {order!r}")


__all__ = ["Query", "normalize_order"]
