"""jiracon.input — field schemas, prompts, and field value resolution."""

from .fields import FieldValueResolver, coerce_number, validate_number
from .prompts import Prompts, QuestionaryPrompts
from .schema import generate_input_schema, is_supported_field

__all__ = [
    "FieldValueResolver",
    "Prompts",
    "QuestionaryPrompts",
    "coerce_number",
    "generate_input_schema",
    "is_supported_field",
    "validate_number",
]
