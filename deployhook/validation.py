# deployhook/validation.py
import json
import logging
from dataclasses import dataclass
from typing import Any

import pydantic

from .errors import MalformedJSON, ValidationError
from .schemas.build_request import BuildPayload
from .utils import jsontext

logger = logging.getLogger(__name__)

# pydantic error types reported as a missing value rather than a bad one
_REQUIRED_TYPES = ("missing", "string_type")


@dataclass(frozen=True)
class ValidatedPayload:
    """A request body that passed validation."""

    compact: str
    payload: Any
    ticket: str


def _reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")


def compact_json(body: bytes):
    """Parse ``body`` and return ``(compact_text, parsed)``.

    The compact text is the body with insignificant whitespace removed and is
    otherwise unchanged. Raises MalformedJSON if the body is not valid UTF-8
    JSON.
    """
    try:
        text = body.decode("utf-8")
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError) as exc:
        logger.info("Rejected body that is not JSON: %s", exc)
        raise MalformedJSON() from exc
    return jsontext.compact(text), parsed


def _message(error: dict) -> str:
    field = ".".join(str(part) for part in error["loc"]) or "payload"
    value = error.get("input")
    if error["type"] in _REQUIRED_TYPES or value == "":
        return f"Value for {field} is required."
    return f"Value for {field} ({value}) needs to be alphanum."


def ticket_errors(payload: Any) -> list:
    """Return one message per problem with the ``ticket`` field."""
    # a non-object body has no fields at all
    fields = payload if isinstance(payload, dict) else {}
    try:
        BuildPayload.model_validate(fields)
    except pydantic.ValidationError as exc:
        return [_message(error) for error in exc.errors()]
    return []


def validate_payload(body: bytes) -> ValidatedPayload:
    compact, payload = compact_json(body)
    errors = ticket_errors(payload)
    if errors:
        for message in errors:
            logger.info("Validation error: %s", message)
        raise ValidationError(errors)
    return ValidatedPayload(compact=compact, payload=payload, ticket=payload["ticket"])
