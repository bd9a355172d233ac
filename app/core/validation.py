"""
Request validation helpers and the client-facing validation messages.

Request bodies are validated by the SQLModel request schemas in
``app.models``; a ``RequestValidationError`` is rendered by
``validation_message`` as one ``{"message": ...}`` naming the first
offending field.
"""

from datetime import datetime
from typing import Any, Sequence

DATE_OF_BIRTH_FORMAT = "%m/%d/%Y"
DATE_OF_BIRTH_MESSAGE = "Bad Request: Invalid format for 'dateOfBirth'. Please use MM/DD/YYYY."

EMPTY_BODY_MESSAGE = "Request body is missing or empty."
INVALID_JSON_MESSAGE = "Invalid JSON in request body."


def is_valid_date(value: Any) -> bool:
    """Whether ``value`` is a real calendar date written as MM/DD/YYYY."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        datetime.strptime(value, DATE_OF_BIRTH_FORMAT)
    except ValueError:
        return False
    return True


def is_missing(value: Any) -> bool:
    return value is None or value == ""


def validation_message(errors: Sequence[dict[str, Any]]) -> str:
    """Client message for the first error of a failed request body."""
    if not errors:
        return INVALID_JSON_MESSAGE
    error = errors[0]
    error_type = error.get("type")
    loc = [str(part) for part in error.get("loc", ())]
    if loc and loc[0] == "body":
        loc = loc[1:]

    if error_type == "json_invalid":
        return INVALID_JSON_MESSAGE
    if not loc:
        return EMPTY_BODY_MESSAGE if error_type == "missing" else INVALID_JSON_MESSAGE
    if error_type == "date_format":
        return error["msg"]

    field = ".".join(loc)
    if error_type == "missing" or is_missing(error.get("input")):
        return f"Bad Request: Missing or empty required field '{field}'."
    return f"Bad Request: Invalid value for '{field}'."
