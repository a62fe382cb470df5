"""Declared relationships between model classes."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from .errors import RelationshipError
from .inflector import camelize, foreign_key, singularize, underscore
from .models import RelationType

if TYPE_CHECKING:
    from .model import Model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relationship:
    """A relationship from one model class to another.

    ``key`` maps fields of the declaring model to fields of the target:
    ``{"id": "company_id"}`` for ``Company`` has many ``Employees``,
    ``{"company_id": "id"}`` for ``Employee`` belongs to ``Company``.
    """

    name: str
    type: RelationType
    from_model: "type[Model]"
    to: "type[Model]"
    key: Mapping[str, str]
    field_name: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze the key mapping and validate it."""
        if not self.key:
            raise RelationshipError(f"Relationship {self.name} has no key mapping")
        if isinstance(self.key, dict):
            object.__setattr__(self, "key", MappingProxyType(self.key))

    @property
    def many(self) -> bool:
        return self.type is RelationType.HAS_MANY

    def conditions(self, values: Mapping[str, Any]) -> dict[str, Any] | None:
        """Conditions selecting the related records of ``values``.

        Returns None when a local key field is missing, meaning nothing
        can be related yet.
        """
        conditions = {}
        for local, foreign in self.key.items():
            value = values.get(local)
            if value is None:
                return None
            conditions[foreign] = value
        return conditions


def _target_name(name: str, rel_type: RelationType) -> str:
    if rel_type is RelationType.HAS_MANY:
        return camelize(singularize(name))
    return camelize(name)


def resolve_model(
    name: str,
    registry: Mapping[str, list["type[Model]"]],
    module: str | None = None,
) -> "type[Model]":
    """Find a model class by class name.

    A class from ``module`` wins when several classes share the name.

    Raises:
        RelationshipError: If no class or more than one candidate matches.
    """
    candidates = registry.get(name, [])
    if module is not None:
        local = [c for c in candidates if c.__module__ == module]
        if local:
            candidates = local
    if not candidates:
        raise RelationshipError(f"Model class {name} not found")
    if len(candidates) > 1:
        modules = ", ".join(c.__module__ for c in candidates)
        raise RelationshipError(f"Model class {name} is ambiguous ({modules})")
    return candidates[-1]


def build(
    model: "type[Model]",
    rel_type: RelationType,
    name: str,
    options: Mapping[str, Any],
    registry: Mapping[str, list["type[Model]"]],
) -> Relationship:
    """Build a Relationship from a declaration on ``model``."""
    target = options.get("to", _target_name(name, rel_type))
    if isinstance(target, str):
        target = resolve_model(target, registry, model.__module__)

    key = options.get("key")
    if rel_type is RelationType.BELONGS_TO:
        target_key = target.meta("key")
        if key is None:
            key = {foreign_key(target.__name__, target_key): target_key}
        elif isinstance(key, str):
            key = {key: target_key}
    else:
        local_key = model.meta("key")
        if key is None:
            key = {local_key: foreign_key(model.__name__, local_key)}
        elif isinstance(key, str):
            key = {local_key: key}

    extra = {
        k: v for k, v in options.items() if k not in ("to", "key", "field_name")
    }
    relationship = Relationship(
        name=name,
        type=rel_type,
        from_model=model,
        to=target,
        key=dict(key),
        field_name=options.get("field_name") or underscore(name),
        options=extra,
    )
    logger.debug(
        f"{model.__name__} {rel_type.value} {name} -> {target.__name__} "
        f"on {dict(relationship.key)}"
    )
    return relationship


__all__ = ["Relationship", "build", "resolve_model"]
