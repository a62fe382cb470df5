"""Core data-mapper logic for strata.

This package contains zero external dependencies: models, entities,
record sets, relationships, queries and the source port. Storage
backends live in the adapters package.
"""

from .collection import RecordSet
from .entity import Entity
from .errors import ConfigurationError, RelationshipError, SourceError, StrataError
from .model import Model
from .models import FieldType, ModelMeta, RelationType, Rule, not_empty
from .ports import SourcePort
from .query import Query
from .relationship import Relationship

__all__ = [
    "ConfigurationError",
    "Entity",
    "FieldType",
    "Model",
    "ModelMeta",
    "Query",
    "RecordSet",
    "RelationType",
    "Relationship",
    "RelationshipError",
    "Rule",
    "SourceError",
    "SourcePort",
    "StrataError",
    "not_empty",
]
