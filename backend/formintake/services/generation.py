"""AI-assisted form generation from uploaded images and documents."""

import base64
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI, OpenAIError

from formintake.config import Settings, get_settings
from formintake.errors import ExternalServiceError, SchemaParseError
from formintake.schemas.structure import FormSchema, parse_schema
from formintake.services.document import (
    DocumentProcessingService,
    file_extension,
    is_document,
    is_image,
)

logger = logging.getLogger(__name__)


STRUCTURE_FORMAT = """{
  "formName": "string",
  "description": "string",
  "pages": [
    {
      "pageNumber": 1,
      "title": "string",
      "fields": [
        {
          "id": "string",
          "type": "text|email|tel|date|number|select|radio|checkbox|textarea",
          "label": "string",
          "placeholder": "string",
          "required": true,
          "validation": {
            "minLength": 0,
            "maxLength": 0,
            "pattern": "regex",
            "options": ["option1", "option2"]
          },
          "position": {"x": 0, "y": 0, "width": 0, "height": 0}
        }
      ]
    }
  ]
}"""

IMAGE_PROMPT = f"""You are an expert at analyzing form images and converting them to structured JSON.
Analyze the provided form image and describe its fields, layout and validation rules using this structure:

{STRUCTURE_FORMAT}

Make sure that:
1. All form fields are identified
2. Field types fit the data (text, email, tel, date, ...)
3. Required fields are marked
4. select and radio fields list their options
5. Page numbers start at 1 and increase by one
6. Field ids are unique across the whole form

Return only the JSON object, no additional text."""

DOCUMENT_PROMPT = f"""You are an expert form designer. The text below was extracted from a PDF or Word form.
Recreate it as a digital form using exactly this JSON structure:

{STRUCTURE_FORMAT}

Group related fields into pages of a reasonable length, mark required fields,
give select and radio fields their options and keep field ids unique.
Return only the JSON object, no additional text."""

HTML_PROMPT = """You are an expert at generating modern, responsive HTML forms from a JSON structure.
Convert the form structure below into clean HTML5 using Bootstrap 5 classes, with labels,
appropriate input types, aria attributes and client-side validation messages.
Generate only the HTML code, no additional text or explanations."""


def extract_json_object(text: str) -> str:
    """Trim model output to its outermost ``{...}`` block."""
    if not text:
        return ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return text.strip()
    return text[start:end + 1]


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if present."""
    stripped = (text or "").strip()
    if stripped.startswith("```"):
        first_newline = stripped.find("\n")
        stripped = stripped[first_newline + 1:] if first_newline != -1 else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def fallback_structure(filename: str) -> str:
    """Two-page demo structure used whenever generation is unavailable."""
    base_name = os.path.splitext(os.path.basename(filename or "form"))[0] or "form"
    structure = {
        "formName": base_name,
        "description": f"Demo form generated from {filename}",
        "pages": [
            {
                "pageNumber": 1,
                "title": "Basic Information",
                "fields": [
                    {
                        "id": "firstName",
                        "type": "text",
                        "label": "First Name",
                        "placeholder": "Enter your first name",
                        "required": True,
                        "position": {"x": 10, "y": 50, "width": 200, "height": 30},
                    },
                    {
                        "id": "lastName",
                        "type": "text",
                        "label": "Last Name",
                        "placeholder": "Enter your last name",
                        "required": True,
                        "position": {"x": 250, "y": 50, "width": 200, "height": 30},
                    },
                    {
                        "id": "email",
                        "type": "email",
                        "label": "Email Address",
                        "placeholder": "Enter your email",
                        "required": True,
                        "validation": {"pattern": r"^[^\s@]+@[^\s@]+\.[^\s@]+$"},
                        "position": {"x": 10, "y": 120, "width": 300, "height": 30},
                    },
                    {
                        "id": "phone",
                        "type": "tel",
                        "label": "Phone Number",
                        "placeholder": "(555) 123-4567",
                        "required": False,
                        "position": {"x": 10, "y": 190, "width": 200, "height": 30},
                    },
                    {
                        "id": "department",
                        "type": "select",
                        "label": "Department",
                        "required": True,
                        "validation": {
                            "options": ["Human Resources", "Finance", "IT", "Marketing", "Operations", "Other"]
                        },
                        "position": {"x": 250, "y": 190, "width": 200, "height": 30},
                    },
                ],
            },
            {
                "pageNumber": 2,
                "title": "Additional Details",
                "fields": [
                    {
                        "id": "comments",
                        "type": "textarea",
                        "label": "Comments or Additional Information",
                        "placeholder": "Please provide any additional information...",
                        "required": False,
                        "position": {"x": 10, "y": 50, "width": 500, "height": 100},
                    },
                    {
                        "id": "agreement",
                        "type": "checkbox",
                        "label": "I agree to the terms and conditions",
                        "required": True,
                        "position": {"x": 10, "y": 200, "width": 300, "height": 20},
                    },
                ],
            },
        ],
    }
    return json.dumps(structure)


class FormStructureGenerator(ABC):
    """A backend that turns source material into form structure JSON."""

    @abstractmethod
    def structure_from_image(self, image_data: bytes, filename: str) -> str:
        """Raw structure JSON text for a form image."""

    @abstractmethod
    def structure_from_text(self, document_text: str) -> str:
        """Raw structure JSON text for extracted document text."""

    @abstractmethod
    def html_from_structure(self, structure_json: str) -> str:
        """Standalone HTML markup for a structure."""


class OpenAIFormStructureGenerator(FormStructureGenerator):
    """Form generation through the OpenAI chat completions API."""

    MIME_TYPES = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".gif": "image/gif",
        ".bmp": "image/bmp",
        ".tiff": "image/tiff",
    }

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.vision_model = settings.openai_vision_model
        self.text_model = settings.openai_text_model
        self.max_tokens = settings.openai_max_tokens
        self.client = client or OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
        )
        logger.debug(f"Using models: vision={self.vision_model}, text={self.text_model}")

    def _complete(self, model: str, messages: list) -> str:
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI API call failed ({model}): {e}")
            raise ExternalServiceError(f"OpenAI API call failed: {e}") from e

        if not response.choices:
            raise ExternalServiceError("OpenAI returned no choices")
        content = response.choices[0].message.content or ""
        if response.usage:
            logger.info(f"OpenAI {model} usage: {response.usage.total_tokens} tokens")
        return content.strip()

    def structure_from_image(self, image_data: bytes, filename: str) -> str:
        mime_type = self.MIME_TYPES.get(file_extension(filename), "image/jpeg")
        encoded = base64.b64encode(image_data).decode("utf-8")
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": IMAGE_PROMPT},
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
            ],
        }]
        return self._complete(self.vision_model, messages)

    def structure_from_text(self, document_text: str) -> str:
        messages = [
            {"role": "system", "content": DOCUMENT_PROMPT},
            {"role": "user", "content": f"Document text:\n\n{document_text}"},
        ]
        return self._complete(self.text_model, messages)

    def html_from_structure(self, structure_json: str) -> str:
        messages = [{"role": "user", "content": f"{HTML_PROMPT}\n\nForm Structure:\n{structure_json}"}]
        return self._complete(self.text_model, messages)


def get_generator(settings: Optional[Settings] = None) -> Optional[FormStructureGenerator]:
    """The configured generator, or None when no API key is set."""
    settings = settings or get_settings()
    if not settings.openai_api_key:
        return None
    return OpenAIFormStructureGenerator(settings)


class GeneratedStructure:
    """Structure JSON accepted from generation, plus where it came from."""

    def __init__(self, structure_json: str, schema: FormSchema, used_fallback: bool):
        self.structure_json = structure_json
        self.schema = schema
        self.used_fallback = used_fallback


class FormGenerationService:
    """
    Produces a usable form structure for an upload.

    Generation is best-effort: any failure of the generator, a missing API
    key, an unsupported file or output that does not parse as a form
    structure yields the built-in fallback structure instead.
    """

    def __init__(self, generator: Optional[FormStructureGenerator] = None):
        self.generator = generator

    def _raw_structure(self, data: bytes, filename: str) -> str:
        if is_image(filename):
            return self.generator.structure_from_image(data, filename)
        if is_document(filename):
            text = DocumentProcessingService.extract_text(data, filename)
            return self.generator.structure_from_text(text)
        raise ExternalServiceError(f"File type not supported: {file_extension(filename) or filename}")

    def generate_structure(self, data: bytes, filename: str) -> GeneratedStructure:
        if self.generator is None:
            logger.warning("OpenAI API key not configured. Using demo form structure.")
        else:
            try:
                structure_json = extract_json_object(self._raw_structure(data, filename))
                schema = parse_schema(structure_json)
                logger.info(f"Generated form structure for {filename}: {schema.total_pages} pages")
                return GeneratedStructure(structure_json, schema, used_fallback=False)
            except SchemaParseError as e:
                logger.warning(f"Generated form structure is invalid ({e.message}). Using fallback structure.")
            except Exception as e:
                logger.warning(f"Form generation failed ({e}). Using demo form structure.", exc_info=True)

        structure_json = fallback_structure(filename)
        return GeneratedStructure(structure_json, parse_schema(structure_json), used_fallback=True)

    def generate_form_html(self, structure_json: str) -> str:
        """
        Render a structure to HTML with the generator.

        Unlike structure generation there is no fallback: failures raise
        ExternalServiceError.
        """
        if self.generator is None:
            raise ExternalServiceError("Form generation service is not configured")
        parse_schema(structure_json)
        return strip_code_fence(self.generator.html_from_structure(structure_json))


def get_generation_service() -> FormGenerationService:
    """FastAPI dependency; overridden in tests with a fake generator."""
    return FormGenerationService(get_generator())
