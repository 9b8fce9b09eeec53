"""Field configuration for indexed documents."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import ConfigError


class FieldType(Enum):
    """Types of indexed fields."""

    TEXT = "text"
    KEYWORD = "keyword"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"


@dataclass
class FieldDefinition:
    """Definition of an indexed field."""

    name: str
    field_type: FieldType
    stored: bool = False
    sortable: bool = True


class FieldConfiguration:
    """Field definitions for one index."""

    def __init__(self, fields: list[FieldDefinition] | None = None):
        self.fields: dict[str, FieldDefinition] = {
            field.name: field for field in fields or []
        }

    @classmethod
    def from_mapping(cls, config: dict[str, Any]) -> "FieldConfiguration":
        """Build a configuration from ``{field: {"type": ..., ...}}``.

        A bare string value is shorthand for ``{"type": value}``.

        Raises:
            ConfigError: If a field type is not recognized
        """
        fields = []
        for name, settings in (config or {}).items():
            if isinstance(settings, str):
                settings = {"type": settings}

            type_name = settings.get("type", "text")
            try:
                field_type = FieldType(type_name)
            except ValueError:
                raise ConfigError(f"Invalid field type for {name}: {type_name}")

            fields.append(
                FieldDefinition(
                    name=name,
                    field_type=field_type,
                    stored=settings.get("stored", False),
                    sortable=settings.get("sortable", field_type != FieldType.TEXT),
                )
            )
        return cls(fields)

    def get(self, name: str) -> FieldDefinition | None:
        """Get the definition of a field, if configured."""
        return self.fields.get(name)

    def get_sortable_fields(self) -> list[str]:
        """Names of fields that can be used for sorting."""
        return [name for name, field in self.fields.items() if field.sortable]

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    @classmethod
    def infer(
        cls, documents: Iterable[dict[str, Any]], exclude: Iterable[str] = ()
    ) -> "FieldConfiguration":
        """Guess field types from the first non-null value of each field.

        Booleans become BOOLEAN, numbers NUMERIC, lists KEYWORD and
        everything else TEXT. Every inferred field is sortable.
        """
        excluded = set(exclude)
        types: dict[str, FieldType] = {}

        for document in documents:
            for name, value in document.items():
                if name in types or name in excluded or value is None:
                    continue
                if isinstance(value, bool):
                    types[name] = FieldType.BOOLEAN
                elif isinstance(value, int | float):
                    types[name] = FieldType.NUMERIC
                elif isinstance(value, list | tuple | set):
                    types[name] = FieldType.KEYWORD
                else:
                    types[name] = FieldType.TEXT

        return cls(
            [
                FieldDefinition(name=name, field_type=field_type, sortable=True)
                for name, field_type in types.items()
            ]
        )
