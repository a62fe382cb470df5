"""Value types shared by the model layer and the sources.

All types in this module use only the Python standard library,
keeping the core free of external dependencies.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class FieldType(Enum):
    """Field types a model schema can declare."""

    ID = "id"
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"

    def cast(self, value: Any) -> Any:
        """Convert a value read from a source to this type.

        None passes through untouched. Raises ValueError when the value
        cannot be represented as this type.
        """
        if value is None:
            return None
        if self is FieldType.BOOLEAN:
            if isinstance(value, str):
                if value.lower() in ("1", "true", "t", "yes"):
                    return True
                if value.lower() in ("0", "false", "f", "no", ""):
                    return False
                raise ValueError(f"Invalid boolean value: {value!r}")
            return bool(value)
        if self is FieldType.INTEGER:
            return int(value)
        if self is FieldType.FLOAT:
            return float(value)
        if self in (FieldType.STRING, FieldType.TEXT):
            return str(value)
        if self is FieldType.DATETIME:
            if isinstance(value, datetime):
                return value
            return datetime.fromisoformat(str(value))
        return value


class RelationType(str, Enum):
    """Cardinality of a declared relationship.

    Members compare equal to their snake_case value and to the camelCase
    spelling: ``RelationType.HAS_MANY == "hasMany" == "has_many"``.
    """

    HAS_MANY = "has_many"
    BELONGS_TO = "belongs_to"
    HAS_ONE = "has_one"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str) and not isinstance(other, RelationType):
            return RelationType.parse(other) is self
        return str.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = str.__hash__

    @classmethod
    def parse(cls, value: "str | RelationType") -> "RelationType | None":
        """Accept ``has_many``, ``hasMany`` or a RelationType.

        Returns None when the value does not name a relationship type.
        """
        if isinstance(value, RelationType):
            return value
        normalized = {
            "hasMany": "has_many",
            "belongsTo": "belongs_to",
            "hasOne": "has_one",
        }.get(value, value)
        try:
            return cls(normalized)
        except ValueError:
            return None


@dataclass(frozen=True)
class Rule:
    """A validation rule attached to a model field.

    ``check`` receives the field value and returns True when it is valid.
    Rules are skipped for absent fields unless ``required`` is set.
    """

    check: Callable[[Any], bool]
    message: str = "is invalid"
    required: bool = False

    def __call__(self, value: Any) -> bool:
        return bool(self.check(value))


def not_empty(message: str = "cannot be empty") -> Rule:
    """Rule rejecting None, empty strings and empty containers."""
    return Rule(
        check=lambda value: value is not None and value != "" and value != [],
        message=message,
        required=True,
    )


@dataclass
class ModelMeta:
    """Per-model settings.

    ``source`` is derived from the class name when left empty.
    ``locked`` restricts writes to the fields declared in the schema.
    """

    connection: str = "default"
    key: str = "id"
    source: str = ""
    name: str = ""
    locked: bool = True


__all__ = [
    "FieldType",
    "ModelMeta",
    "RelationType",
    "Rule",
    "not_empty",
]
