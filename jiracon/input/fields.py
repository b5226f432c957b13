"""
FieldValueResolver — asks the user for one Jira field value.

Combines the schema resolver with the prompt provider:

  PrimitiveInput      → date / number / text prompt
  AllowedValuesInput  → select from the metadata's list
  AutoCompleteInput   → select from a remote search, queried as the user searches

Selections from record lists are reduced to scalars when the field's type
is primitive (number, string, date, datetime).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import parse_qsl, quote, urlsplit

from jiracon.exceptions import FieldValidationError, NoAvailableValuesError, UnsupportedFieldError
from jiracon.input.listing import detect_title_keys, matches, record_value, title_case
from jiracon.input.schema import ResolvedInput, generate_input_schema
from jiracon.types import PRIMITIVE_TYPES, AutoCompleteInput, FieldType

logger = logging.getLogger(__name__)

NUMBER_MESSAGE = "The value must be a valid number"


def coerce_number(value: Any) -> Union[int, float]:
    """``"5"`` → 5, ``"2.5"`` → 2.5.

    Raises:
        FieldValidationError: not a finite number.
    """
    if isinstance(value, bool):
        raise FieldValidationError(NUMBER_MESSAGE)
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise FieldValidationError(NUMBER_MESSAGE) from exc
    if not math.isfinite(number):
        raise FieldValidationError(NUMBER_MESSAGE)
    return int(number) if number.is_integer() else number


def validate_number(text: str) -> Union[bool, str]:
    """Prompt validator: True, or the message shown under the input."""
    try:
        coerce_number(text)
    except FieldValidationError as exc:
        return str(exc)
    return True


def extract_items(response: Any) -> list:
    """Autocomplete responses are either a list, or an object holding one.

    ``/user/picker`` answers ``{"users": [...], "total": 3}``; the first
    list-valued entry is taken.
    """
    if isinstance(response, list):
        return list(response)
    if isinstance(response, Mapping):
        for value in response.values():
            if isinstance(value, list):
                return list(value)
    return []


class FieldValueResolver:
    """
    Resolves one field value through the user.

    Args:
        gateway: RequestGateway used for autocomplete searches.
        prompts: Prompts implementation.
    """

    def __init__(self, gateway, prompts) -> None:
        self._gateway = gateway
        self._prompts = prompts

    async def resolve(self, field_edit_meta: Any, default: Any = None) -> Any:
        """Prompt for the field described by ``field_edit_meta``.

        Args:
            field_edit_meta: One entry of an issue's editmeta ``fields``.
            default:         Pre-filled / pre-selected value, e.g. the value
                             entered for the previous issue.

        Raises:
            UnsupportedFieldError:  the metadata resolves to no schema.
            NoAvailableValuesError: the field's allowed-values list is empty.
            PromptCancelledError:   the user aborted.
        """
        schema = generate_input_schema(field_edit_meta)
        if schema is None:
            name = field_edit_meta.get("name", "") if isinstance(field_edit_meta, Mapping) else ""
            raise UnsupportedFieldError(f"The field {name} is not supported", field_name=name)

        if schema.source == "primitive":
            return await self.enter_primitive_value(schema.name, schema.type, default)

        if schema.allowed_values is not None and not schema.allowed_values:
            raise NoAvailableValuesError("No available values", field_name=schema.name)

        if isinstance(schema, AutoCompleteInput):
            source: Any = self.search_source(schema.auto_complete_url, default)
        else:
            source = schema.allowed_values

        value = await self._prompts.select_item(
            source,
            schema.name,
            title_keys=detect_title_keys,
            summary_keys=[],
            multiple=schema.multiple,
            default=default,
        )
        return self.format_value(schema, value)

    async def enter_primitive_value(self, key: str, field_type: FieldType, default: Any = None) -> Any:
        """Free entry for string / number / date / datetime fields."""
        message = title_case(key)
        if field_type in (FieldType.DATE, FieldType.DATETIME):
            return await self._prompts.select_date(message, default)
        if field_type == FieldType.NUMBER:
            return await self._prompts.enter_text(
                message, default, validate=validate_number, convert=coerce_number,
            )
        return await self._prompts.enter_text(message, default)

    def search_source(self, auto_complete_url: str, default: Any = None):
        """Search function for an autocomplete URL.

        The user's text is appended to the URL (Jira hands out URLs ending
        in ``query=``). The default value(s) are prepended to the results of
        the first empty search, once, unless a result already stands for them.
        """
        pending = {"default": default}

        async def source(query: str) -> list:
            parts = urlsplit(auto_complete_url + quote(query or ""))
            params = dict(parse_qsl(parts.query, keep_blank_values=True))
            response = await self._gateway.get(self._local_path(parts.path), params, show_spinner=False)
            items = extract_items(response)

            injected = pending["default"]
            if not query and injected is not None:
                pending["default"] = None
                head = list(injected) if isinstance(injected, (list, tuple)) else [injected]
                items = [d for d in head if not any(matches(item, d) for item in items)] + items
            return items

        return source

    def _local_path(self, path: str) -> str:
        """Drop the site's context path, which the gateway's base URL already has."""
        base_path = urlsplit(getattr(self._gateway, "base_url", "") or "").path.rstrip("/")
        if base_path and path.startswith(base_path + "/"):
            return path[len(base_path):]
        return path

    @staticmethod
    def format_value(schema: ResolvedInput, value: Any) -> Any:
        """Reduce selected records to scalars for primitive-typed fields.

        A record stands for its ``value``, ``name``, ... property, so an
        option's ``self`` URL is never taken for the value.

        Raises:
            FieldValidationError: a number field's record holds no number.
        """
        if schema.type not in PRIMITIVE_TYPES:
            return value

        def _format(item: Any) -> Any:
            scalar = record_value(item)
            if schema.type == FieldType.NUMBER and scalar is not item:
                return coerce_number(scalar)
            return scalar

        if schema.multiple:
            return [_format(item) for item in value or []]
        return _format(value)


__all__ = [
    "FieldValueResolver",
    "coerce_number",
    "validate_number",
    "extract_items",
    "NUMBER_MESSAGE",
]
