"""Model base class: the data-mapper API application code talks to.

Subclasses declare their schema, relationships and validation rules as
class attributes and pass meta options as class keyword arguments:

    class Company(Model, connection="test", locked=False):
        schema = {"id": "id", "name": "string", "active": "boolean"}
        has_many = ["Employees"]

    class Employee(Model, connection="test"):
        schema = {"id": "id", "name": "string", "company_id": "integer"}
        belongs_to = ["Company"]

Reads and writes are coroutines; creating records and introspecting
relationships are not, since they never touch the source.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict, fields as dataclass_fields, replace
from typing import Any, ClassVar, Literal

from .collection import RecordSet
from .entity import Entity
from .errors import ConfigurationError, RelationshipError
from .inflector import tableize
from .models import FieldType, ModelMeta, RelationType, Rule
from .ports import SourcePort
from .query import Query, normalize_order
from .relationship import Relationship, build

logger = logging.getLogger(__name__)

_META_FIELDS = frozenset(f.name for f in dataclass_fields(ModelMeta))

# Field names that Entity attribute access would resolve to a method.
_RESERVED_FIELDS = frozenset(name for name in dir(Entity) if not name.startswith("_"))

# Model subclasses by class name, used to resolve relationship targets.
_registry: dict[str, list[type["Model"]]] = {}

RelationDeclaration = Sequence[str] | Mapping[str, Mapping[str, Any]]


class Model:
    """Base class for every model.

    Class attributes:
        schema: Field name -> field type name or FieldType.
        has_many, belongs_to, has_one: Relationship names, or a mapping
            of relationship name -> options (``to``, ``key``, ``field_name``,
            ``order``).
        validates: Field name -> list of Rule.
    """

    schema: ClassVar[Mapping[str, str | FieldType]] = {}
    has_many: ClassVar[RelationDeclaration] = ()
    belongs_to: ClassVar[RelationDeclaration] = ()
    has_one: ClassVar[RelationDeclaration] = ()
    validates: ClassVar[Mapping[str, list[Rule]]] = {}

    _config: ClassVar[ModelMeta] = ModelMeta()
    _declared_meta: ClassVar[dict[str, Any]] = {}
    _relations: ClassVar[dict[str, Relationship] | None] = None

    def __init_subclass__(cls, **meta: Any) -> None:
        super().__init_subclass__()
        unknown = set(meta) - _META_FIELDS
        if unknown:
            raise ConfigurationError(
                f"Unknown meta options for {cls.__name__}: {sorted(unknown)}"
            )
        inherited = {k: v for k, v in cls._declared_meta.items() if k not in ("source", "name")}
        cls._declared_meta = {**inherited, **meta}
        cls._relations = None
        cls._config = cls._build_meta(cls._declared_meta)
        cls._check_field_names(cls._config)
        _registry.setdefault(cls.__name__, []).append(cls)

    @classmethod
    def _check_field_names(cls, meta: ModelMeta) -> None:
        clashes = sorted((set(cls.schema) | {meta.key}) & _RESERVED_FIELDS)
        if clashes:
            raise ConfigurationError(
                f"{cls.__name__} fields clash with Entity methods: {clashes}"
            )

    @classmethod
    def _build_meta(cls, options: Mapping[str, Any]) -> ModelMeta:
        meta = ModelMeta(**options)
        return replace(
            meta,
            name=meta.name or cls.__name__,
            source=meta.source or tableize(cls.__name__),
        )

    # ------------------------------------------------------------------
    # Configuration and introspection
    # ------------------------------------------------------------------

    @classmethod
    def config(cls, **meta: Any) -> None:
        """Merge meta options and drop cached relationship metadata.

        Called without arguments, restores the options declared on the
        class.
        """
        unknown = set(meta) - _META_FIELDS
        if unknown:
            raise ConfigurationError(
                f"Unknown meta options for {cls.__name__}: {sorted(unknown)}"
            )
        if meta:
            updated = replace(cls._config, **meta)
            cls._check_field_names(updated)
            cls._config = updated
        else:
            cls._config = cls._build_meta(cls._declared_meta)
        cls._relations = None

    @classmethod
    def meta(cls, name: str | None = None) -> Any:
        """Return one meta option, or all of them as a dict."""
        if name is None:
            return asdict(cls._config)
        if name not in _META_FIELDS:
            raise KeyError(f"Unknown meta option: {name}")
        return getattr(cls._config, name)

    @classmethod
    def fields(cls) -> dict[str, FieldType]:
        """Schema with field types resolved; the key field is always present."""
        resolved = {
            name: kind if isinstance(kind, FieldType) else FieldType(kind)
            for name, kind in cls.schema.items()
        }
        resolved.setdefault(cls._config.key, FieldType.ID)
        return resolved

    @classmethod
    def relations(
        cls, name: str | None = None
    ) -> dict[str, Relationship] | list[str] | Relationship | Literal[False] | None:
        """Introspect declared relationships.

        Args:
            name: None for all relationships, a relationship type
                (``has_many``/``hasMany``, ``belongs_to``, ``has_one``) for the
                names of that type, or a relationship name.

        Returns:
            - name is None: dict of relationship name -> Relationship
            - a type: list of names, or False when there are none
            - a relationship name: the Relationship, or None

        Raises:
            RelationshipError: If a relationship target cannot be resolved.
        """
        if cls._relations is None:
            cls._relations = cls._build_relations()
        if name is None:
            return dict(cls._relations)
        if name in cls._relations:
            return cls._relations[name]
        rel_type = RelationType.parse(name)
        if rel_type is None:
            return None
        names = [n for n, r in cls._relations.items() if r.type is rel_type]
        return names or False

    @classmethod
    def _build_relations(cls) -> dict[str, Relationship]:
        relations: dict[str, Relationship] = {}
        declarations = (
            (RelationType.BELONGS_TO, cls.belongs_to),
            (RelationType.HAS_ONE, cls.has_one),
            (RelationType.HAS_MANY, cls.has_many),
        )
        for rel_type, declared in declarations:
            if isinstance(declared, str):
                declared = [declared]
            items = declared.items() if isinstance(declared, Mapping) else (
                (name, {}) for name in declared
            )
            for name, options in items:
                relations[name] = build(cls, rel_type, name, options, _registry)
        return relations

    @classmethod
    def source(cls) -> SourcePort:
        """Return the source registered under this model's connection name.

        Raises:
            ConfigurationError: If no such connection is registered.
        """
        from strata.connections import Connections

        connection = cls._config.connection
        source = Connections.get(connection)
        if source is None:
            raise ConfigurationError(
                f"No connection {connection!r} configured for {cls.__name__}"
            )
        return source

    @classmethod
    def key(cls, values: "Entity | Mapping[str, Any]") -> Any:
        """Primary key value of an entity or a row."""
        if isinstance(values, Entity):
            return values.key()
        return values.get(cls._config.key)

    # ------------------------------------------------------------------
    # Creating and reading
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, data: Mapping[str, Any] | None = None, **values: Any) -> Entity:
        """Build a new, unsaved entity."""
        return Entity(cls, {**(data or {}), **values}, exists=False)

    @classmethod
    def query(
        cls,
        conditions: Any = None,
        fields: Sequence[str] | None = None,
        order: Any = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Query:
        """Build the Query a source receives for this model.

        A non-mapping ``conditions`` value is taken as a primary key value.
        """
        if conditions is None:
            conditions = {}
        elif not isinstance(conditions, Mapping):
            conditions = {cls._config.key: conditions}
        return Query(
            source=cls._config.source,
            key=cls._config.key,
            schema=cls.fields(),
            conditions=dict(conditions),
            fields=tuple(fields or ()),
            order=normalize_order(order),
            limit=limit,
            offset=offset,
        )

    @classmethod
    async def find(cls, kind: Any, **options: Any) -> "Entity | RecordSet | int | None":
        """Find records.

        ``kind`` is ``"first"``, ``"all"`` or ``"count"``; anything else is a
        primary key value and returns that entity or None. Options are the
        keyword arguments of ``query()``.
        """
        if kind == "all":
            return await cls.all(**options)
        if kind == "first":
            return await cls.first(**options)
        if kind == "count":
            return await cls.count(options.get("conditions"))
        conditions = {**(options.pop("conditions", None) or {}), cls._config.key: kind}
        return await cls.first(conditions, **options)

    @classmethod
    async def all(cls, conditions: Any = None, **options: Any) -> RecordSet:
        query = cls.query(conditions, **options)
        rows = await cls.source().read(query)
        return RecordSet(cls, [cls._instance(row) for row in rows])

    @classmethod
    async def first(cls, conditions: Any = None, **options: Any) -> Entity | None:
        options["limit"] = 1
        records = await cls.all(conditions, **options)
        return records.first()

    @classmethod
    async def count(cls, conditions: Any = None) -> int:
        return await cls.source().count(cls.query(conditions))

    @classmethod
    async def remove(cls, conditions: Any = None) -> int:
        """Delete every record matching ``conditions`` and return how many."""
        removed = await cls.source().delete(cls.query(conditions))
        logger.debug(f"Removed {removed} {cls.__name__} record(s)")
        return removed

    @classmethod
    def _instance(cls, row: Mapping[str, Any]) -> Entity:
        """Convert a source row to a persisted entity.

        Raises:
            ValueError: If a value does not match its declared type.
        """
        schema = cls.fields()
        data = {}
        for name, value in row.items():
            field_type = schema.get(name)
            if field_type is None:
                data[name] = value
                continue
            try:
                data[name] = field_type.cast(value)
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to parse {cls.__name__}.{name}: {e}")
                raise ValueError(f"Row parsing failed: {e}") from e
        return Entity(cls, data, exists=True)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    @classmethod
    def _writable(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        if not cls._config.locked:
            return dict(data)
        schema = cls.fields()
        return {name: value for name, value in data.items() if name in schema}

    @classmethod
    async def save_entity(cls, entity: Entity, validate: bool = True) -> bool:
        """Write ``entity`` through the source; see ``Entity.save``."""
        if validate and not entity.validates():
            logger.debug(f"{cls.__name__} failed validation: {entity.errors()}")
            return False

        source = cls.source()
        key_name = cls._config.key
        values = cls._writable(entity.data())

        if entity.exists():
            key = values.pop(key_name, None)
            if key is None:
                raise ValueError(f"Persisted {cls.__name__} has no {key_name}")
            if values:
                await source.update(cls.query({key_name: key}), values)
            entity._sync()
            return True

        if values.get(key_name) is None:
            values.pop(key_name, None)
        key = await source.create(cls.query(), values)
        entity._sync(key)
        logger.debug(f"Created {cls.__name__} {key}")
        return True

    @classmethod
    async def delete_entity(cls, entity: Entity) -> bool:
        """Delete ``entity`` from the source; see ``Entity.delete``."""
        if not entity.exists():
            return False
        deleted = await cls.source().delete(cls.query({cls._config.key: entity.key()}))
        entity._detach()
        return deleted > 0

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    @classmethod
    async def related(cls, entity: Entity, name: str) -> "RecordSet | Entity | None":
        """Load relationship ``name`` of ``entity``.

        Raises:
            RelationshipError: If ``name`` is not a declared relationship.
        """
        relationship = cls.relations(name)
        if not isinstance(relationship, Relationship):
            raise RelationshipError(f"{cls.__name__} has no relationship {name!r}")

        target = relationship.to
        conditions = relationship.conditions(entity.data())
        if conditions is None:
            return RecordSet(target) if relationship.many else None

        order = relationship.options.get("order")
        if relationship.many:
            return await target.all(conditions, order=order)
        return await target.first(conditions, order=order)


__all__ = ["Model"]
