# =============================================================================
# capture_core/schema/fields.py
# Field Definitions and Schemas
# =============================================================================
"""
Typed model of a remotely defined form.

A Schema is an ordered, versioned list of FieldDefinitions. Order is render
order and survives every to_dict/from_dict round trip. Per-type behaviour
(emptiness, value coercion) is looked up in FIELD_TYPE_RULES rather than
switched on a type string at each call site.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from capture_core.errors import SchemaFormatError


class FieldType(str, Enum):
    """Closed set of field types a schema may use."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    SELECT = "select"
    TEXTAREA = "textarea"


# =============================================================================
# PER-TYPE RULES
# =============================================================================

@dataclass(frozen=True)
class FieldTypeRule:
    """Behaviour attached to one FieldType."""
    is_empty: Callable[[Any], bool]
    coerce: Callable[[Any], Any]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_text(value: Any) -> Any:
    return None if value is None else str(value)


def _coerce_number(value: Any) -> Any:
    if _blank(value):
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return value


def _coerce_boolean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


FIELD_TYPE_RULES: Dict[FieldType, FieldTypeRule] = {
    FieldType.TEXT: FieldTypeRule(is_empty=_blank, coerce=_coerce_text),
    FieldType.TEXTAREA: FieldTypeRule(is_empty=_blank, coerce=_coerce_text),
    FieldType.SELECT: FieldTypeRule(is_empty=_blank, coerce=_coerce_text),
    FieldType.DATE: FieldTypeRule(is_empty=_blank, coerce=_coerce_text),
    # 0 is an answer for a count
    FieldType.NUMBER: FieldTypeRule(is_empty=_blank, coerce=_coerce_number),
    # A required checkbox must be ticked
    FieldType.BOOLEAN: FieldTypeRule(
        is_empty=lambda value: value is None or value is False,
        coerce=_coerce_boolean,
    ),
}

_unhandled = set(FieldType) - set(FIELD_TYPE_RULES)
if _unhandled:
    raise RuntimeError(f"No rule registered for field types: {sorted(t.value for t in _unhandled)}")


# =============================================================================
# SCHEMA ELEMENTS
# =============================================================================

@dataclass(frozen=True)
class Conditional:
    """Visibility rule: show the owning field depending on another field's raw value."""
    field: str
    value: Any
    negate: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Conditional:
        if not isinstance(data, dict) or not data.get("field"):
            raise SchemaFormatError("Conditional rule needs a 'field'", details={"conditional": data})
        return cls(field=data["field"], value=data.get("value"), negate=bool(data.get("negate", False)))

    def to_dict(self) -> Dict[str, Any]:
        result = {"field": self.field, "value": self.value}
        if self.negate:
            result["negate"] = True
        return result


@dataclass(frozen=True)
class FieldDefinition:
    """One field of a schema."""
    name: str
    label: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: Tuple[str, ...] = ()
    conditional: Optional[Conditional] = None

    @property
    def rule(self) -> FieldTypeRule:
        return FIELD_TYPE_RULES[self.type]

    def is_empty(self, value: Any) -> bool:
        return self.rule.is_empty(value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FieldDefinition:
        if not isinstance(data, dict):
            raise SchemaFormatError(f"Field definition must be an object, got {type(data).__name__}")

        name = data.get("name")
        label = data.get("label")
        if not name or not label:
            raise SchemaFormatError("Field definition needs 'name' and 'label'", field=name)

        try:
            field_type = FieldType(data.get("type", FieldType.TEXT.value))
        except ValueError:
            raise SchemaFormatError(f"Unknown field type: {data.get('type')!r}", field=name)

        options: Tuple[str, ...] = ()
        if field_type is FieldType.SELECT:
            options = tuple(str(o) for o in (data.get("options") or []))

        conditional = None
        if data.get("conditional"):
            conditional = Conditional.from_dict(data["conditional"])

        return cls(
            name=name,
            label=label,
            type=field_type,
            required=bool(data.get("required", False)),
            options=options,
            conditional=conditional,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
        }
        if self.type is FieldType.SELECT:
            result["options"] = list(self.options)
        if self.conditional is not None:
            result["conditional"] = self.conditional.to_dict()
        return result


@dataclass(frozen=True)
class Schema:
    """Ordered, versioned field list. version is None for the built-in default."""
    version: Optional[int]
    fields: Tuple[FieldDefinition, ...] = field(default_factory=tuple)

    def get_field(self, name: str) -> Optional[FieldDefinition]:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None

    def __iter__(self):
        return iter(self.fields)

    def elements(self) -> List[Dict[str, Any]]:
        return [definition.to_dict() for definition in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "elements": self.elements()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Schema:
        """Parse a GET /schema body: {version, elements}."""
        if not isinstance(data, dict):
            raise SchemaFormatError(f"Schema payload must be an object, got {type(data).__name__}")
        version = data.get("version")
        if version is not None:
            try:
                version = int(version)
            except (TypeError, ValueError):
                raise SchemaFormatError(f"Schema version must be an integer, got {version!r}")
        return cls(version=version, fields=parse_elements(data.get("elements")))


def parse_elements(raw: Any) -> Tuple[FieldDefinition, ...]:
    """
    Parse a list of wire-shaped field definitions.

    Raises:
        SchemaFormatError: non-list input, bad element, or duplicate names
    """
    if not isinstance(raw, (list, tuple)):
        raise SchemaFormatError(f"Schema elements must be a list, got {type(raw).__name__}")

    definitions = [FieldDefinition.from_dict(item) for item in raw]

    seen = set()
    for definition in definitions:
        if definition.name in seen:
            raise SchemaFormatError(f"Duplicate field name: {definition.name}", field=definition.name)
        seen.add(definition.name)

    return tuple(definitions)
