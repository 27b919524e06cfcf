import json

import pytest

from formintake.schemas.answers import decode_answer, encode_answers
from formintake.schemas.structure import parse_schema
from formintake.services.validation import validate, validate_form_data

from conftest import COMPLETE_ANSWERS


def test_complete_answers_pass(structure_json):
    result = validate(parse_schema(structure_json), encode_answers(COMPLETE_ANSWERS))

    assert result.is_valid
    assert result.errors == []


def test_missing_required_fields_across_pages(structure_json):
    result = validate(parse_schema(structure_json), {"fullName": "Ada"})

    assert not result.is_valid
    assert result.failed_field_ids == ["email", "coverage", "agreement"]
    email_error = result.errors[0]
    assert email_error.page_number == 1
    assert email_error.label == "Email Address"
    assert email_error.message == "Email Address is required"
    assert result.errors[1].page_number == 2


@pytest.mark.parametrize("blank", [None, "", "   ", "\t\n"])
def test_blank_values_fail_required_fields(structure_json, blank):
    answers = encode_answers(COMPLETE_ANSWERS)
    answers["fullName"] = blank

    result = validate(parse_schema(structure_json), answers)

    assert result.failed_field_ids == ["fullName"]


def test_empty_selection_fails_required_multi_checkbox(structure_json):
    answers = dict(COMPLETE_ANSWERS, coverage=[])

    result = validate(parse_schema(structure_json), encode_answers(answers))

    assert result.failed_field_ids == ["coverage"]


@pytest.mark.parametrize("field_id", ["fullName", "email"])
def test_empty_array_text_is_an_answer_for_single_value_fields(structure_json, field_id):
    answers = encode_answers(COMPLETE_ANSWERS)
    answers[field_id] = "[]"

    assert validate(parse_schema(structure_json), answers).is_valid


def test_empty_array_text_answers_required_radio():
    schema = parse_schema(json.dumps({
        "pages": [{
            "pageNumber": 1,
            "fields": [{
                "id": "plan",
                "type": "radio",
                "label": "Plan",
                "required": True,
                "validation": {"options": ["[]", "Gold"]},
            }],
        }],
    }))

    assert validate(schema, {"plan": "[]"}).is_valid


def test_formats_are_not_checked(structure_json):
    answers = dict(COMPLETE_ANSWERS, email="not-an-email", department="Marketing")

    assert validate(parse_schema(structure_json), encode_answers(answers)).is_valid


def test_unchecked_single_checkbox_still_counts_as_answered(structure_json):
    answers = dict(COMPLETE_ANSWERS, agreement=False)

    assert validate(parse_schema(structure_json), encode_answers(answers)).is_valid


def test_validate_form_data_accepts_json_text(structure_json):
    result = validate_form_data(structure_json, json.dumps(COMPLETE_ANSWERS))

    assert result.is_valid


@pytest.mark.parametrize("structure", ["{broken", '{"pages": []}', "null"])
def test_validate_form_data_fails_closed_on_bad_structure(structure):
    result = validate_form_data(structure, COMPLETE_ANSWERS)

    assert not result.is_valid
    assert result.errors[0].field_id is None
    assert result.errors[0].message.startswith("Invalid form structure")


@pytest.mark.parametrize("data", ["{broken", "[1, 2]", 42])
def test_validate_form_data_fails_closed_on_bad_answers(structure_json, data):
    result = validate_form_data(structure_json, data)

    assert not result.is_valid
    assert result.errors[0].field_id is None
    assert result.errors[0].message.startswith("Invalid form data")


def test_validate_form_data_treats_missing_answers_as_empty(structure_json):
    result = validate_form_data(structure_json, None)

    assert result.failed_field_ids == ["fullName", "email", "coverage", "agreement"]


def test_answer_encoding():
    encoded = encode_answers({"n": 3, "flag": False, "picks": ["A", "B"], "none": None})

    assert encoded == {"n": "3", "flag": "false", "picks": '["A", "B"]', "none": None}
    assert decode_answer(encoded["picks"]) == ["A", "B"]
    assert decode_answer("plain text") == "plain text"
    assert decode_answer("[1, 2]") == "[1, 2]"
    assert decode_answer(None) is None
