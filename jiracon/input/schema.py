"""
Field schema resolver — turns Jira field edit metadata into an input schema.

Edit metadata (``GET /issue/{id}/editmeta``) looks like::

    {"name": "Fix Version/s", "operations": ["set", "add", "remove"],
     "schema": {"type": "array", "items": "version", "system": "fixVersions"},
     "allowedValues": [{"id": "10001", "name": "1.2"}, ...]}

All functions are pure (no side effects, no I/O).
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

from jiracon.types import AllowedValuesInput, AutoCompleteInput, FieldType, PrimitiveInput

# Custom fields are only understood when they are Jira's own field types
CUSTOM_FIELD_NAMESPACE = re.compile(r"^com\.atlassian\.jira")

SUPPORTED_TYPES = frozenset(t.value for t in FieldType)

ResolvedInput = Union[PrimitiveInput, AllowedValuesInput, AutoCompleteInput]


def generate_input_schema(field_edit_meta: Any) -> Optional[ResolvedInput]:
    """
    Resolve edit metadata into one of the InputSchema variants.

    Returns None when the field cannot be edited through a prompt:
      - metadata (or its ``schema``) is not a mapping
      - no ``operations`` can be performed on the field
      - the value type is not one of FieldType
      - a multi-value field gives no way to enumerate its choices
      - a custom field outside the com.atlassian.jira namespace
    """
    if not isinstance(field_edit_meta, Mapping):
        return None

    if not field_edit_meta.get("operations"):
        return None

    schema = field_edit_meta.get("schema")
    if not isinstance(schema, Mapping):
        return None

    multiple = schema.get("type") == "array"
    value_type = schema.get("items") if multiple else schema.get("type")
    if not isinstance(value_type, str) or value_type not in SUPPORTED_TYPES:
        return None

    has_allowed = field_edit_meta.get("allowedValues") is not None
    has_auto_complete = bool(field_edit_meta.get("autoCompleteUrl"))
    if multiple and not has_allowed and not has_auto_complete:
        return None

    custom = schema.get("custom")
    if custom is not None and not (isinstance(custom, str) and CUSTOM_FIELD_NAMESPACE.match(custom)):
        return None

    common = {
        "name": field_edit_meta.get("name") or "",
        "type": FieldType(value_type),
        "multiple": multiple,
        "allowed_values": field_edit_meta.get("allowedValues") if has_allowed else None,
    }
    if has_auto_complete:
        return AutoCompleteInput(auto_complete_url=field_edit_meta["autoCompleteUrl"], **common)
    if has_allowed:
        return AllowedValuesInput(**common)
    return PrimitiveInput(**common)


def is_supported_field(field_edit_meta: Any) -> bool:
    return generate_input_schema(field_edit_meta) is not None
