"""strata: an asynchronous data-mapper with pluggable storage backends."""

from strata.connections import Connections
from strata.core import (
    ConfigurationError,
    Entity,
    FieldType,
    Model,
    RecordSet,
    Relationship,
    RelationshipError,
    Rule,
    SourceError,
    StrataError,
    not_empty,
)

__all__ = [
    "ConfigurationError",
    "Connections",
    "Entity",
    "FieldType",
    "Model",
    "RecordSet",
    "Relationship",
    "RelationshipError",
    "Rule",
    "SourceError",
    "StrataError",
    "not_empty",
]
