# =============================================================================
# capture_core/schema/visibility.py
# Conditional Visibility, Required-Field Validation and Derived Values
# =============================================================================
"""
Pure functions over (schema, current form values).

Visibility looks at the raw value of the dependee only. If the dependee is
itself hidden, its stale value still decides; e.g. with baptized=True then
hidden by some other rule, waterBaptized stays visible. This is the observed
behaviour of the deployed forms and is kept as-is.
"""

from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from capture_core.errors import ValidationError
from .fields import FieldDefinition, FieldType, Schema

logger = logging.getLogger(__name__)

# Field names treated as date of birth for age derivation
DOB_FIELD_NAMES = ("dob", "dateOfBirth", "date_of_birth")
AGE_FIELD_NAME = "age"


def _strict_equal(left: Any, right: Any) -> bool:
    """Equality without bool/int or str/number crossover (1 is not True)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    numbers = (int, float)
    if isinstance(left, numbers) and isinstance(right, numbers):
        return left == right
    return type(left) is type(right) and left == right


def is_visible(field: FieldDefinition, values: Mapping[str, Any]) -> bool:
    """
    Decide whether a field is shown for the current form values.

    No conditional -> always visible. Otherwise compare the dependee's raw
    value with the rule value; negate flips the comparison.
    """
    rule = field.conditional
    if rule is None:
        return True

    actual = values.get(rule.field)
    if rule.negate:
        return not _strict_equal(actual, rule.value)
    return _strict_equal(actual, rule.value)


def visible_fields(schema: Schema, values: Mapping[str, Any]) -> List[FieldDefinition]:
    """Fields to render, in schema order."""
    return [f for f in schema.fields if is_visible(f, values)]


def find_missing_required(schema: Schema, values: Mapping[str, Any]) -> List[str]:
    """
    Labels of required, currently visible fields that have no value.

    Every field is checked; labels come back in schema order.
    """
    missing = []
    for field in schema.fields:
        if not field.required or not is_visible(field, values):
            continue
        if field.is_empty(values.get(field.name)):
            missing.append(field.label)
    return missing


def validate_submission(schema: Schema, values: Mapping[str, Any]) -> None:
    """Raise ValidationError listing every missing required field."""
    missing = find_missing_required(schema, values)
    if missing:
        raise ValidationError(missing)


def _to_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def calculate_age(dob: Union[date, datetime, str], today: Optional[date] = None) -> int:
    """
    Whole years between dob and today.

    >>> calculate_age("2000-06-15", date(2024, 6, 14))
    23
    >>> calculate_age("2000-06-15", date(2024, 6, 15))
    24
    """
    birth = _to_date(dob)
    today = today or date.today()

    age = today.year - birth.year
    if today.month < birth.month or (today.month == birth.month and today.day < birth.day):
        age -= 1
    return age


def _dob_field(schema: Schema) -> Optional[FieldDefinition]:
    for name in DOB_FIELD_NAMES:
        field = schema.get_field(name)
        if field is not None and field.type is FieldType.DATE:
            return field
    return None


def prepare_submission(
    schema: Schema,
    values: Mapping[str, Any],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Validate form values and return the dict to persist.

    Raises:
        ValidationError: before anything is derived or stored
    """
    validate_submission(schema, values)

    final: Dict[str, Any] = dict(values)
    for field in schema.fields:
        if field.name in final:
            final[field.name] = field.rule.coerce(final[field.name])

    dob_field = _dob_field(schema)
    if dob_field is not None:
        dob = final.get(dob_field.name)
        if not dob_field.is_empty(dob) and final.get(AGE_FIELD_NAME) in (None, ""):
            try:
                final[AGE_FIELD_NAME] = calculate_age(dob, today)
            except ValueError:
                logger.warning(f"Cannot derive age from {dob_field.name}={dob!r}")

    return final
