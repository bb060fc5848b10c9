# =============================================================================
# capture_core/schema/__init__.py
# Dynamic Form Schemas
# =============================================================================

from .fields import (
    FieldType,
    FieldTypeRule,
    FIELD_TYPE_RULES,
    Conditional,
    FieldDefinition,
    Schema,
    parse_elements,
)

from .defaults import default_schema

from .visibility import (
    is_visible,
    visible_fields,
    find_missing_required,
    validate_submission,
    calculate_age,
    prepare_submission,
)

from .resolver import SchemaResolver, ResolvedSchema, SchemaSource
from .builder import SchemaBuilder

__all__ = [
    "FieldType",
    "FieldTypeRule",
    "FIELD_TYPE_RULES",
    "Conditional",
    "FieldDefinition",
    "Schema",
    "parse_elements",
    "default_schema",
    "is_visible",
    "visible_fields",
    "find_missing_required",
    "validate_submission",
    "calculate_age",
    "prepare_submission",
    "SchemaResolver",
    "ResolvedSchema",
    "SchemaSource",
    "SchemaBuilder",
]
