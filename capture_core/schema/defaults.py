# =============================================================================
# capture_core/schema/defaults.py
# Built-in Member Registration Form
# =============================================================================
"""
Static schema used when neither the remote service nor the local cache can
provide one. It is versionless and never written to the cache.
"""

from __future__ import annotations
from typing import Any, Dict, List

from .fields import Schema, parse_elements


DEFAULT_ELEMENTS: List[Dict[str, Any]] = [
    {"name": "firstName", "label": "First Name", "type": "text", "required": True},
    {"name": "lastName", "label": "Last Name", "type": "text", "required": True},
    {"name": "dob", "label": "Date of Birth", "type": "date", "required": False},
    {"name": "gender", "label": "Gender", "type": "select", "options": ["Male", "Female"], "required": False},
    {"name": "phone", "label": "Phone Number", "type": "text", "required": False},
    {"name": "address", "label": "Address", "type": "textarea", "required": False},
    {"name": "baptized", "label": "Baptized?", "type": "boolean", "required": False},
    {
        "name": "waterBaptized",
        "label": "Water Baptism?",
        "type": "boolean",
        "required": False,
        "conditional": {"field": "baptized", "value": True},
    },
    {
        "name": "holyGhostBaptized",
        "label": "Holy Ghost Baptism?",
        "type": "boolean",
        "required": False,
        "conditional": {"field": "baptized", "value": True},
    },
    {"name": "presidingElder", "label": "Presiding Elder Name", "type": "text", "required": False},
    {"name": "working", "label": "Working?", "type": "boolean", "required": False},
    {
        "name": "occupation",
        "label": "Occupation Category",
        "type": "text",
        "required": False,
        "conditional": {"field": "working", "value": True},
    },
    {
        "name": "maritalStatus",
        "label": "Marital Status",
        "type": "select",
        "options": ["Single", "Married", "Divorced", "Widowed"],
        "required": False,
    },
    {
        "name": "childrenCount",
        "label": "Number of Children",
        "type": "number",
        "required": False,
        "conditional": {"field": "maritalStatus", "value": "Single", "negate": True},
    },
    {
        "name": "ministry",
        "label": "Ministry/Department",
        "type": "select",
        "options": ["Choir", "Ushering", "Youth", "Prayer", "Other"],
        "required": False,
    },
    {"name": "joinedDate", "label": "Date Joined Church", "type": "date", "required": False},
    {"name": "prayerRequests", "label": "Prayer Requests", "type": "textarea", "required": False},
]

_DEFAULT_SCHEMA = Schema(version=None, fields=parse_elements(DEFAULT_ELEMENTS))


def default_schema() -> Schema:
    """Return the embedded fallback schema."""
    return _DEFAULT_SCHEMA
