"""
Validation support for listings and florists.

The rules themselves live on the pydantic models in ``schemas``. This
module holds their limits and turns pydantic's error list into
``FieldError`` records, so clients and tests get a stable ``kind`` per
failing field instead of pydantic's internal error types.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")
CONTACT_METHODS = ("whatsapp", "instagram", "facebook")
MIN_USERNAME_LENGTH = 8
MIN_CONTACT_LENGTH = 8
# Largest integer BSON can store
MAX_QUANTITY = 2 ** 63 - 1

# pydantic error type -> our error kind
KINDS = {
    "missing": "required",
    "string_type": "not_a_string",
    "float_type": "not_a_number",
    "float_parsing": "not_a_number",
    "finite_number": "not_a_number",
    "int_type": "not_an_integer",
    "int_parsing": "not_an_integer",
    "int_parsing_size": "not_an_integer",
    "int_from_float": "not_an_integer",
    "greater_than": "not_positive",
    "less_than_equal": "too_large",
    "string_too_short": "too_short",
    "date_type": "bad_date",
    "date_parsing": "bad_date",
    "date_from_datetime_parsing": "bad_date",
    "date_from_datetime_inexact": "bad_date",
    "list_type": "not_a_list",
    "model_type": "not_an_object",
    "model_attributes_type": "not_an_object",
    "dict_type": "not_an_object",
    "json_invalid": "bad_json",
}

MESSAGES = {
    "required": "{label} is required.",
    "not_a_string": "{label} must be text.",
    "not_a_number": "{label} must be a number.",
    "not_an_integer": "{label} must be a whole number.",
    "not_positive": "{label} must be greater than 0.",
    "too_large": "{label} is too large.",
    "too_short": "{label} is too short.",
    "bad_date": "{label} must be a date (YYYY-MM-DD).",
    "not_a_list": "{label} must be a list.",
    "not_an_object": "{label} must be an object.",
    "bad_json": "Request body is not valid JSON.",
}

# Wording for built-in failures that the florist and listing forms show
FIELD_MESSAGES = {
    ("name", "required"): "Name cannot be empty.",
    ("flower_type", "required"): "Please select at least one flower type.",
    ("occasion", "required"): "Please select at least one occasion.",
    ("image", "required"): "Image must be a .jpg, .jpeg or .png file.",
    ("username", "required"): f"Username must be at least {MIN_USERNAME_LENGTH} characters long.",
    ("username", "too_short"): f"Username must be at least {MIN_USERNAME_LENGTH} characters long.",
    ("login_email", "required"): "Please enter a valid email address.",
    ("contact_method", "required"): "Please select at least one contact method.",
}

LOCATION_PREFIXES = ("body", "query", "path")


@dataclass(frozen=True)
class FieldError:
    field: str
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def split_values(value: Any) -> List[str]:
    """Normalise a list or a comma separated string into stripped, non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


def _field_name(loc: Iterable[Any], kind: str) -> str:
    parts = list(loc)
    if parts and parts[0] in LOCATION_PREFIXES:
        parts = parts[1:]
    if kind == "bad_json" or not parts:
        # Invalid JSON is reported at a character offset, not a field
        return "body"
    return ".".join(str(p) for p in parts)


def _label(field: str) -> str:
    if field == "body":
        return "Request body"
    return field.rsplit(".", 1)[-1].replace("_", " ").capitalize()


def field_errors(errors: Iterable[Mapping[str, Any]]) -> List[FieldError]:
    """Translate pydantic / FastAPI error dicts into ``FieldError`` records."""
    result = []
    for error in errors:
        error_type = error.get("type", "")
        if error_type in KINDS:
            kind = KINDS[error_type]
            field = _field_name(error.get("loc", ()), kind)
            message = FIELD_MESSAGES.get((field, kind)) or MESSAGES[kind].format(label=_label(field))
        else:
            # Raised by our own validators: the type is already the kind
            kind = error_type
            field = _field_name(error.get("loc", ()), kind)
            message = error.get("msg", "")
        result.append(FieldError(field, kind, message))
    return result


def join_messages(errors: Iterable[FieldError]) -> str:
    return " ".join(e.message for e in errors)
