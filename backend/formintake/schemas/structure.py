"""Form structure model: the JSON document describing pages and fields.

The structure is stored verbatim on ``FormTemplate.structure_json``. It is
parsed into frozen Pydantic models for rendering and validation and never
re-serialized unless the template is edited.
"""

import json
from enum import Enum as PyEnum
from typing import Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formintake.errors import PageOutOfRangeError, SchemaParseError


class FieldType(str, PyEnum):
    """Field types the renderer knows how to draw."""
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    PHONE = "phone"
    DATE = "date"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"


# Types whose options list must be non-empty
OPTION_TYPES = {FieldType.SELECT, FieldType.RADIO}


class _StructureModel(BaseModel):
    """Shared config: camelCase aliases, unknown keys kept, frozen."""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class FieldPosition(_StructureModel):
    """Layout hint from the source document. Cosmetic only."""
    x: Union[int, float] = 0
    y: Union[int, float] = 0
    width: Union[int, float] = 0
    height: Union[int, float] = 0


class FieldValidation(_StructureModel):
    """Declared validation rules and choice options."""
    min_length: Optional[int] = Field(None, alias="minLength")
    max_length: Optional[int] = Field(None, alias="maxLength")
    pattern: Optional[str] = None
    options: Optional[List[str]] = None


class FormField(_StructureModel):
    """A single input on a page."""
    id: str
    type: str = FieldType.TEXT.value
    label: str = ""
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[FieldValidation] = None
    position: Optional[FieldPosition] = None

    @property
    def field_type(self) -> Optional[FieldType]:
        """Known type for this field, or None when the type is unsupported."""
        try:
            return FieldType((self.type or "").lower())
        except ValueError:
            return None

    @property
    def options(self) -> List[str]:
        if self.validation and self.validation.options:
            return list(self.validation.options)
        return []

    @property
    def is_multi_select(self) -> bool:
        """Checkbox with options stores a JSON array of chosen options."""
        return self.field_type == FieldType.CHECKBOX and bool(self.options)


class FormPage(_StructureModel):
    """One page of the form."""
    page_number: int = Field(..., alias="pageNumber", ge=1)
    title: Optional[str] = None
    fields: List[FormField] = []


class FormSchema(_StructureModel):
    """Complete form structure."""
    form_name: Optional[str] = Field(None, alias="formName")
    description: Optional[str] = None
    pages: List[FormPage] = []

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    def iter_fields(self) -> Iterator[Tuple[FormPage, FormField]]:
        """Yield every field with its page, in declared order."""
        for page in self.pages:
            for field in page.fields:
                yield page, field

    def find_field(self, field_id: str) -> Optional[FormField]:
        for _, field in self.iter_fields():
            if field.id == field_id:
                return field
        return None


def parse_schema(json_text: Union[str, bytes]) -> FormSchema:
    """
    Parse and check a stored form structure.

    Raises SchemaParseError when the JSON is malformed, ``pages`` is absent or
    empty, page numbers are not 1..N in listed order, a field id is empty or
    repeated, or a select/radio field declares no options.
    """
    try:
        raw = json.loads(json_text)
    except (TypeError, ValueError) as e:
        raise SchemaParseError(f"Form structure is not valid JSON: {e}")

    if not isinstance(raw, dict):
        raise SchemaParseError("Form structure must be a JSON object")

    pages = raw.get("pages")
    if not isinstance(pages, list) or not pages:
        raise SchemaParseError("Form structure has no pages")

    try:
        schema = FormSchema.model_validate(raw)
    except ValidationError as e:
        raise SchemaParseError(f"Form structure is invalid: {e.errors()[0]['msg']}")

    _check_structure(schema)
    return schema


def _check_structure(schema: FormSchema) -> None:
    seen_ids = set()
    for index, page in enumerate(schema.pages, start=1):
        if page.page_number != index:
            raise SchemaParseError(
                f"Pages must be numbered 1..{schema.total_pages} in order; "
                f"found pageNumber {page.page_number} at position {index}"
            )
        for field in page.fields:
            if not field.id or not field.id.strip():
                raise SchemaParseError(f"Field on page {index} has an empty id")
            if field.id in seen_ids:
                raise SchemaParseError(f"Duplicate field id: {field.id}")
            seen_ids.add(field.id)
            if field.field_type in OPTION_TYPES and not field.options:
                raise SchemaParseError(
                    f"Field '{field.id}' of type {field.type} must declare options"
                )


def serialize_schema(schema: FormSchema, indent: Optional[int] = None) -> str:
    """Serialize back to the stored camelCase JSON shape."""
    return json.dumps(to_document(schema), indent=indent)


def to_document(schema: FormSchema) -> dict:
    """Plain dict form of the schema with stored key names."""
    return schema.model_dump(by_alias=True, exclude_unset=True, mode="json")


def get_page(schema: FormSchema, page_number: int) -> FormPage:
    """Return the page with the given 1-based number."""
    if page_number < 1 or page_number > schema.total_pages:
        raise PageOutOfRangeError(page_number, schema.total_pages)
    return schema.pages[page_number - 1]
