"""A single model record, persisted or not."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .collection import RecordSet
    from .model import Model


class Entity:
    """One record of a model class.

    Field values are reachable both as attributes (``company.name``) and
    as items (``company["name"]``). Item access returns None for unknown
    fields; attribute access raises AttributeError.

    Lifecycle:
        - created by ``Model.create()``: ``exists()`` is False
        - after a successful ``save()`` or when read from a source:
          ``exists()`` is True
        - after ``delete()``: ``exists()`` is False again
    """

    def __init__(
        self,
        model: "type[Model]",
        data: Mapping[str, Any] | None = None,
        exists: bool = False,
    ):
        object.__setattr__(self, "_model", model)
        object.__setattr__(self, "_data", dict(data or {}))
        object.__setattr__(self, "_exists", exists)
        object.__setattr__(self, "_original", dict(data or {}) if exists else {})
        object.__setattr__(self, "_errors", {})
        object.__setattr__(self, "_relationships", {})

    def __getattr__(self, name: str) -> Any:
        data = object.__getattribute__(self, "_data")
        if name in data:
            return data[name]
        relationships = object.__getattribute__(self, "_relationships")
        if name in relationships:
            return relationships[name]
        raise AttributeError(
            f"{object.__getattribute__(self, '_model').__name__} has no field {name!r}"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._data[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._data.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __delitem__(self, name: str) -> None:
        self._data.pop(name, None)

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __repr__(self) -> str:
        state = "persisted" if self._exists else "new"
        return f"<{self._model.__name__} {state} {self._data!r}>"

    def model(self) -> "type[Model]":
        return self._model

    def data(self, field: str | None = None) -> Any:
        """Return a copy of all field values, or the value of ``field``."""
        if field is not None:
            return self._data.get(field)
        return dict(self._data)

    def set(self, data: Mapping[str, Any]) -> None:
        """Assign several fields at once."""
        self._data.update(data)

    def key(self) -> Any:
        """Primary key value, or None before the first save."""
        return self._data.get(self._model.meta("key"))

    def exists(self) -> bool:
        return self._exists

    def modified(self) -> dict[str, bool]:
        """Map each field to whether it changed since the last load or save."""
        return {
            name: name not in self._original or self._original[name] != value
            for name, value in self._data.items()
        }

    def errors(self) -> dict[str, list[str]]:
        """Validation messages from the last ``validates()`` call."""
        return {name: list(messages) for name, messages in self._errors.items()}

    def validates(self) -> bool:
        """Run the model's validation rules and record failures."""
        errors: dict[str, list[str]] = {}
        for name, rules in self._model.validates.items():
            for rule in rules:
                if name not in self._data and not rule.required:
                    continue
                if not rule(self._data.get(name)):
                    errors.setdefault(name, []).append(rule.message)
        self._errors = errors
        return not errors

    async def save(
        self, data: Mapping[str, Any] | None = None, validate: bool = True
    ) -> bool:
        """Persist this record.

        Args:
            data: Extra field values to assign before saving.
            validate: Run validation rules first.

        Returns:
            True when written, False when validation failed.

        Raises:
            SourceError: If the backend rejects the write.
        """
        if data:
            self.set(data)
        return await self._model.save_entity(self, validate=validate)

    async def delete(self) -> bool:
        """Remove this record from its source.

        Returns:
            True if a stored record was removed, False if the record was
            never persisted or was already gone.
        """
        return await self._model.delete_entity(self)

    async def related(self, name: str) -> "RecordSet | Entity | None":
        """Load the records of relationship ``name``.

        Returns a RecordSet for has-many relationships, otherwise the
        related entity or None. The result is also reachable afterwards
        as an attribute named after the relationship field.
        """
        result = await self._model.related(self, name)
        relationship = self._model.relations(name)
        self._relationships[relationship.field_name] = result
        return result

    def _sync(self, key: Any = None) -> None:
        """Mark the record as persisted, recording a generated key."""
        if key is not None:
            self._data[self._model.meta("key")] = key
        self._exists = True
        self._original = dict(self._data)

    def _detach(self) -> None:
        self._exists = False
        self._original = {}


__all__ = ["Entity"]
