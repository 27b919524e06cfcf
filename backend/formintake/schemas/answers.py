"""Answer map values.

Stored answers are a flat JSON object of field id -> string. Multi-select
checkbox answers are stored as a JSON array encoded into that string, so in
memory a value is either a scalar string or a list of strings.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Union

AnswerValue = Union[str, List[str]]
AnswerMap = Dict[str, Optional[str]]


def encode_answer(value: Any) -> Optional[str]:
    """Convert an incoming value to its stored string form."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set)):
        return json.dumps([str(v) for v in value])
    return str(value)


def encode_answers(values: Mapping[str, Any]) -> AnswerMap:
    """Encode a whole incoming answer payload."""
    return {str(key): encode_answer(value) for key, value in values.items()}


def decode_string_array(raw: Optional[str]) -> Optional[List[str]]:
    """Parse a stored JSON string array; None when it is not one."""
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, list) and all(isinstance(v, str) for v in parsed):
        return parsed
    return None


def decode_answer(raw: Optional[str]) -> Optional[AnswerValue]:
    """Stored string back to a scalar or a list of selected options."""
    if raw is None:
        return None
    values = decode_string_array(raw)
    return values if values is not None else raw


def coerce_answer_map(data: Any) -> AnswerMap:
    """
    Normalize whatever is stored on a submission into an answer map.

    Accepts a dict or a JSON object string; anything else yields an empty map.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            return {}
    if not isinstance(data, dict):
        return {}
    return encode_answers(data)


def is_blank(raw: Any, multi_select: bool = False) -> bool:
    """
    True for missing or whitespace-only answers.

    For multi-select checkboxes an empty JSON array is blank too; any other
    field answered "[]" has a value.
    """
    if raw is None:
        return True
    if isinstance(raw, (list, tuple)):
        return len(raw) == 0
    text = str(raw).strip()
    if not text:
        return True
    return multi_select and decode_string_array(text) == []
