import json

import pytest
from pydantic import ValidationError

from formintake.errors import NotFoundError, PageOutOfRangeError, SchemaParseError
from formintake.schemas.structure import (
    FieldType,
    get_page,
    parse_schema,
    serialize_schema,
)

from conftest import TWO_PAGE_STRUCTURE


def _structure(**overrides):
    structure = json.loads(json.dumps(TWO_PAGE_STRUCTURE))
    structure.update(overrides)
    return structure


def test_parse_two_page_structure(structure_json):
    schema = parse_schema(structure_json)

    assert schema.form_name == "Benefits Enrollment"
    assert schema.total_pages == 2
    assert [p.title for p in schema.pages] == ["Personal Details", "Coverage"]
    department = schema.pages[0].fields[2]
    assert department.field_type == FieldType.SELECT
    assert department.options == ["Finance", "IT", "Other"]


def test_iter_fields_follows_page_then_field_order(structure_json):
    schema = parse_schema(structure_json)

    ids = [(page.page_number, field.id) for page, field in schema.iter_fields()]

    assert ids == [
        (1, "fullName"), (1, "email"), (1, "department"),
        (2, "coverage"), (2, "agreement"), (2, "comments"),
    ]


@pytest.mark.parametrize("text", ["{not json", "[]", "42", '"pages"'])
def test_malformed_or_non_object_json_is_rejected(text):
    with pytest.raises(SchemaParseError):
        parse_schema(text)


@pytest.mark.parametrize("pages", [None, []])
def test_structure_without_pages_is_rejected(pages):
    structure = {"formName": "Empty"}
    if pages is not None:
        structure["pages"] = pages

    with pytest.raises(SchemaParseError, match="no pages"):
        parse_schema(json.dumps(structure))


def test_page_numbers_must_run_from_one():
    structure = _structure()
    structure["pages"][1]["pageNumber"] = 3

    with pytest.raises(SchemaParseError, match="numbered"):
        parse_schema(json.dumps(structure))


def test_duplicate_field_ids_are_rejected():
    structure = _structure()
    structure["pages"][1]["fields"][0]["id"] = "fullName"

    with pytest.raises(SchemaParseError, match="Duplicate field id"):
        parse_schema(json.dumps(structure))


def test_select_without_options_is_rejected():
    structure = _structure()
    structure["pages"][0]["fields"][2]["validation"] = {}

    with pytest.raises(SchemaParseError, match="options"):
        parse_schema(json.dumps(structure))


def test_unknown_keys_and_types_are_kept(structure_json):
    structure = _structure()
    structure["pages"][0]["fields"].append(
        {"id": "signature", "type": "signature-pad", "label": "Sign", "hint": "draw here"}
    )

    schema = parse_schema(json.dumps(structure))
    field = schema.find_field("signature")

    assert field.field_type is None
    assert field.type == "signature-pad"
    assert "hint" in serialize_schema(schema)


def test_serialize_then_parse_gives_equal_schema(structure_json):
    schema = parse_schema(structure_json)

    assert parse_schema(serialize_schema(schema)) == schema
    assert '"pageNumber": 1' in serialize_schema(schema)


def test_explicit_nulls_survive_serialization():
    structure = {
        "formName": "Nulls",
        "pages": [{
            "pageNumber": 1,
            "fields": [{"id": "a", "type": "text", "hint": None, "placeholder": None}],
        }],
    }

    schema = parse_schema(json.dumps(structure))
    document = json.loads(serialize_schema(schema))

    field = document["pages"][0]["fields"][0]
    assert field == {"id": "a", "type": "text", "hint": None, "placeholder": None}
    assert "required" not in field
    assert parse_schema(serialize_schema(schema)) == schema


def test_get_page_bounds(structure_json):
    schema = parse_schema(structure_json)

    assert get_page(schema, 2).title == "Coverage"
    for page_number in (0, 3, -1):
        with pytest.raises(PageOutOfRangeError) as exc_info:
            get_page(schema, page_number)
        assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.message == "Invalid page number -1. Form has 2 pages."


def test_schema_is_frozen(structure_json):
    schema = parse_schema(structure_json)

    with pytest.raises(ValidationError):
        schema.pages[0].title = "Changed"
