import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from formintake.config import Settings
from formintake.errors import ExternalServiceError, SchemaParseError
from formintake.services.document import DocumentProcessingService
from formintake.services.generation import (
    FormGenerationService,
    FormStructureGenerator,
    OpenAIFormStructureGenerator,
    extract_json_object,
    fallback_structure,
    get_generator,
    strip_code_fence,
)

from conftest import TWO_PAGE_STRUCTURE


class FakeGenerator(FormStructureGenerator):
    """Returns canned output and records what it was asked."""

    def __init__(self, output="", error=None):
        self.output = output
        self.error = error
        self.calls = []

    def _answer(self, call):
        self.calls.append(call)
        if self.error:
            raise self.error
        return self.output

    def structure_from_image(self, image_data, filename):
        return self._answer(("image", filename))

    def structure_from_text(self, document_text):
        return self._answer(("text", document_text))

    def html_from_structure(self, structure_json):
        return self._answer(("html", structure_json))


def _fake_client(content=None, error=None):
    def create(**kwargs):
        if error:
            raise error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(total_tokens=42),
        )

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_extract_json_object_trims_prose():
    text = 'Here is the form:\n```json\n{"formName": "X", "pages": [{"a": {}}]}\n```\nDone.'

    assert extract_json_object(text) == '{"formName": "X", "pages": [{"a": {}}]}'
    assert extract_json_object("no braces") == "no braces"
    assert extract_json_object("") == ""


def test_strip_code_fence():
    assert strip_code_fence("```html\n<form></form>\n```") == "<form></form>"
    assert strip_code_fence("<form></form>") == "<form></form>"


def test_fallback_structure_is_a_valid_two_page_form():
    schema = json.loads(fallback_structure("uploads/benefits.pdf"))

    assert schema["formName"] == "benefits"
    assert [p["pageNumber"] for p in schema["pages"]] == [1, 2]
    ids = [f["id"] for p in schema["pages"] for f in p["fields"]]
    assert ids == ["firstName", "lastName", "email", "phone", "department", "comments", "agreement"]


def test_generated_structure_is_accepted():
    output = "Sure! " + json.dumps(TWO_PAGE_STRUCTURE) + " Let me know."
    generator = FakeGenerator(output)

    result = FormGenerationService(generator).generate_structure(b"\x89PNG", "scan.png")

    assert result.used_fallback is False
    assert result.schema.form_name == "Benefits Enrollment"
    assert result.schema.total_pages == 2
    assert generator.calls == [("image", "scan.png")]


def test_documents_go_through_text_extraction(monkeypatch):
    monkeypatch.setattr(
        DocumentProcessingService, "extract_text",
        staticmethod(lambda data, filename: "Name: ____")
    )
    generator = FakeGenerator(json.dumps(TWO_PAGE_STRUCTURE))

    result = FormGenerationService(generator).generate_structure(b"%PDF", "form.pdf")

    assert result.used_fallback is False
    assert generator.calls == [("text", "Name: ____")]


@pytest.mark.parametrize(
    "generator",
    [
        None,
        FakeGenerator("I could not read this form."),
        FakeGenerator('{"formName": "Empty", "pages": []}'),
        FakeGenerator(error=ExternalServiceError("OpenAI API call failed")),
        FakeGenerator(error=RuntimeError("unexpected")),
    ],
    ids=["no-generator", "not-json", "no-pages", "service-error", "crash"],
)
def test_generation_falls_back_to_demo_structure(generator):
    result = FormGenerationService(generator).generate_structure(b"\x89PNG", "intake.png")

    assert result.used_fallback is True
    assert result.schema.form_name == "intake"
    assert result.schema.total_pages == 2


def test_unsupported_upload_falls_back():
    generator = FakeGenerator(json.dumps(TWO_PAGE_STRUCTURE))

    result = FormGenerationService(generator).generate_structure(b"data", "notes.txt")

    assert result.used_fallback is True
    assert generator.calls == []


def test_html_generation_strips_fence(structure_json):
    generator = FakeGenerator("```html\n<form id=\"f\"></form>\n```")

    html = FormGenerationService(generator).generate_form_html(structure_json)

    assert html == '<form id="f"></form>'


def test_html_generation_requires_generator(structure_json):
    with pytest.raises(ExternalServiceError):
        FormGenerationService(None).generate_form_html(structure_json)


def test_html_generation_rejects_bad_structure():
    with pytest.raises(SchemaParseError):
        FormGenerationService(FakeGenerator("<form/>")).generate_form_html("{not json")


def test_html_generation_propagates_generator_errors(structure_json):
    generator = FakeGenerator(error=ExternalServiceError("OpenAI API call failed: timeout"))

    with pytest.raises(ExternalServiceError):
        FormGenerationService(generator).generate_form_html(structure_json)


def test_get_generator_needs_api_key():
    assert get_generator(Settings(openai_api_key=None)) is None
    assert isinstance(get_generator(Settings(openai_api_key="sk-test")), OpenAIFormStructureGenerator)


def test_openai_generator_returns_message_content():
    settings = Settings(openai_api_key="sk-test", openai_text_model="text-model")
    generator = OpenAIFormStructureGenerator(settings, client=_fake_client("  {\"pages\": []}  "))

    assert generator.structure_from_text("Name: ____") == '{"pages": []}'


def test_openai_errors_become_external_service_errors():
    settings = Settings(openai_api_key="sk-test")
    generator = OpenAIFormStructureGenerator(settings, client=_fake_client(error=OpenAIError("rate limited")))

    with pytest.raises(ExternalServiceError, match="rate limited"):
        generator.structure_from_image(b"\x89PNG", "scan.png")
