# =============================================================================
# capture_core/schema/builder.py
# Admin-side Schema Editing
# =============================================================================
"""
SchemaBuilder - edits a list of field definitions before it is published
with POST /schema. Mirrors what the admin form editor lets a user do: add,
edit, reorder and delete fields.
"""

from __future__ import annotations
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from capture_core.errors import SchemaFormatError
from .fields import Conditional, FieldDefinition, FieldType, Schema


def _split_options(options: Union[str, Sequence[str], None]) -> tuple:
    if options is None:
        return ()
    if isinstance(options, str):
        return tuple(part.strip() for part in options.split(",") if part.strip())
    return tuple(str(o).strip() for o in options)


def _field_type(value: Union[FieldType, str], field: Optional[str] = None) -> FieldType:
    try:
        return FieldType(value)
    except ValueError:
        raise SchemaFormatError(f"Unknown field type: {value!r}", field=field)


class SchemaBuilder:
    """
    Mutable working copy of a schema's fields.

    Usage:
        builder = SchemaBuilder.from_schema(resolved.schema)
        builder.add_field("Baptism Date", FieldType.DATE)
        builder.move_field(3, "up")
        admin_service.save_schema(builder.elements())
    """

    def __init__(
        self,
        fields: Iterable[FieldDefinition] = (),
        clock: Callable[[], float] = time.time,
    ):
        self._fields: List[FieldDefinition] = list(fields)
        self._clock = clock

    @classmethod
    def from_schema(cls, schema: Schema) -> SchemaBuilder:
        return cls(schema.fields)

    @property
    def fields(self) -> List[FieldDefinition]:
        return list(self._fields)

    def _index_of(self, name: str) -> int:
        for index, field in enumerate(self._fields):
            if field.name == name:
                return index
        raise KeyError(name)

    def _generate_name(self) -> str:
        name = f"field_{int(self._clock() * 1000)}"
        taken = {f.name for f in self._fields}
        suffix = 1
        candidate = name
        while candidate in taken:
            candidate = f"{name}_{suffix}"
            suffix += 1
        return candidate

    def add_field(
        self,
        label: str,
        type: Union[FieldType, str] = FieldType.TEXT,
        required: bool = False,
        options: Union[str, Sequence[str], None] = None,
        conditional: Optional[Conditional] = None,
        name: Optional[str] = None,
    ) -> FieldDefinition:
        """Append a new field; the name defaults to field_<epoch-ms>."""
        if not label or not label.strip():
            raise SchemaFormatError("Label is required")

        field_type = _field_type(type, name)
        name = name or self._generate_name()
        if any(f.name == name for f in self._fields):
            raise SchemaFormatError(f"Duplicate field name: {name}", field=name)

        field = FieldDefinition(
            name=name,
            label=label.strip(),
            type=field_type,
            required=required,
            options=_split_options(options) if field_type is FieldType.SELECT else (),
            conditional=conditional,
        )
        self._fields.append(field)
        return field

    def update_field(self, name: str, **changes: Any) -> FieldDefinition:
        """Replace attributes of an existing field, keeping its position."""
        index = self._index_of(name)
        current = self._fields[index]

        if "label" in changes and not (changes["label"] or "").strip():
            raise SchemaFormatError("Label is required", field=name)
        if "type" in changes:
            changes["type"] = _field_type(changes["type"], name)
        field_type = changes.get("type", current.type)
        if field_type is FieldType.SELECT:
            changes["options"] = _split_options(changes.get("options", current.options))
        else:
            changes["options"] = ()

        updated = replace(current, **changes)
        self._fields[index] = updated
        return updated

    def move_field(self, index: int, direction: str) -> None:
        """Swap a field with its neighbour; a no-op at either edge or out of range."""
        if not 0 <= index < len(self._fields):
            return
        if direction == "up" and index > 0:
            target = index - 1
        elif direction == "down" and index < len(self._fields) - 1:
            target = index + 1
        else:
            return
        self._fields[index], self._fields[target] = self._fields[target], self._fields[index]

    def remove_field(self, name: str) -> None:
        del self._fields[self._index_of(name)]

    def elements(self) -> List[Dict[str, Any]]:
        """Wire-shaped list for POST /schema."""
        return [field.to_dict() for field in self._fields]
