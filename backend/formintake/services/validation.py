"""Presence checks for required fields."""

import json
import logging
from typing import Any, Mapping, Optional

from formintake.errors import SchemaParseError
from formintake.schemas.answers import encode_answers, is_blank
from formintake.schemas.structure import FormSchema, parse_schema
from formintake.schemas.validation import FieldError, ValidationResult

logger = logging.getLogger(__name__)


def validate(schema: FormSchema, answers: Mapping[str, Optional[str]]) -> ValidationResult:
    """
    Check that every required field on every page has an answer.

    Only presence is checked; email patterns, lengths and option membership
    are left to the client.
    """
    errors = []
    for page, field in schema.iter_fields():
        if not field.required:
            continue
        if is_blank(answers.get(field.id), field.is_multi_select):
            label = field.label or field.id
            errors.append(FieldError(
                field_id=field.id,
                label=label,
                page_number=page.page_number,
                message=f"{label} is required",
            ))
    return ValidationResult(errors=errors)


def validate_form_data(structure_json: str, data: Any) -> ValidationResult:
    """
    Validate stored answers against a stored structure.

    Fails closed: a broken structure or answer payload is reported as a
    form-level error instead of being raised.
    """
    try:
        schema = parse_schema(structure_json)
    except SchemaParseError as e:
        logger.warning(f"Validation against unparseable structure: {e.message}")
        return ValidationResult(errors=[FieldError(message=f"Invalid form structure: {e.message}")])

    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            return ValidationResult(errors=[FieldError(message="Invalid form data: not valid JSON")])
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ValidationResult(errors=[FieldError(message="Invalid form data: expected a JSON object")])

    return validate(schema, encode_answers(data))
