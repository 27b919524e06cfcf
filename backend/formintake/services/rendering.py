"""Form rendering: fields, pages and progress merged with stored answers."""

import logging
import traceback
from typing import Callable, Dict, List, Mapping, Optional

from formintake.errors import FormsError
from formintake.models.submission import FormSubmission, FormStatus
from formintake.models.template import FormTemplate
from formintake.schemas.answers import AnswerMap, coerce_answer_map, decode_string_array
from formintake.schemas.rendering import (
    ControlKind,
    FieldView,
    FormView,
    OptionView,
    PageRenderDiagnostic,
    PageRenderResponse,
    PageView,
    ProgressStep,
    ProgressView,
    StepState,
)
from formintake.schemas.structure import (
    FieldType,
    FormField,
    FormSchema,
    get_page,
    parse_schema,
)

logger = logging.getLogger(__name__)


# Field renderers, one per field type

def _render_input(kind: ControlKind) -> Callable[[FormField, Optional[str]], FieldView]:
    def render(field: FormField, value: Optional[str]) -> FieldView:
        return _base_view(field, kind, value or "")
    return render


def _render_choice(kind: ControlKind) -> Callable[[FormField, Optional[str]], FieldView]:
    def render(field: FormField, value: Optional[str]) -> FieldView:
        current = value or ""
        options = []
        selected = []
        for option in field.options:
            # At most one option is selected, even if the list repeats a value
            is_selected = not selected and current == option
            if is_selected:
                selected.append(option)
            options.append(OptionView(value=option, selected=is_selected))
        view = _base_view(field, kind, current)
        view.options = options
        view.selected_options = selected
        return view
    return render


def _render_checkbox(field: FormField, value: Optional[str]) -> FieldView:
    current = value or ""
    if not field.is_multi_select:
        checked = current.lower() == "true"
        view = _base_view(field, ControlKind.CHECKBOX, "true" if checked else "false")
        view.selected_options = ["true"] if checked else []
        return view

    chosen: List[str] = []
    if current:
        parsed = decode_string_array(current)
        # Older rows stored a single option as a bare string
        chosen = parsed if parsed is not None else [current]

    view = _base_view(field, ControlKind.CHECKBOX_GROUP, current)
    view.options = [OptionView(value=o, selected=o in chosen) for o in field.options]
    view.selected_options = [o for o in field.options if o in chosen]
    return view


FIELD_RENDERERS: Dict[FieldType, Callable[[FormField, Optional[str]], FieldView]] = {
    FieldType.TEXT: _render_input(ControlKind.TEXT),
    FieldType.EMAIL: _render_input(ControlKind.EMAIL),
    FieldType.TEL: _render_input(ControlKind.TEL),
    FieldType.PHONE: _render_input(ControlKind.TEL),
    FieldType.DATE: _render_input(ControlKind.DATE),
    FieldType.NUMBER: _render_input(ControlKind.NUMBER),
    FieldType.TEXTAREA: _render_input(ControlKind.TEXTAREA),
    FieldType.SELECT: _render_choice(ControlKind.SELECT),
    FieldType.RADIO: _render_choice(ControlKind.RADIO),
    FieldType.CHECKBOX: _render_checkbox,
}


def _base_view(field: FormField, kind: ControlKind, current_value: str) -> FieldView:
    return FieldView(
        id=field.id,
        control_kind=kind,
        label=field.label or field.id,
        placeholder=field.placeholder,
        is_required=field.required,
        current_value=current_value,
    )


def render_field(field: FormField, answer_value: Optional[str]) -> FieldView:
    """
    Render one field with its stored answer.

    Never raises: unsupported field types render as plain text inputs.
    """
    renderer = FIELD_RENDERERS.get(field.field_type, _render_input(ControlKind.TEXT))
    return renderer(field, answer_value)


def render_page(schema: FormSchema, page_number: int, answers: Mapping[str, Optional[str]]) -> PageView:
    """Render the fields of one page in declared order."""
    page = get_page(schema, page_number)
    return PageView(
        page_number=page_number,
        total_pages=schema.total_pages,
        title=page.title or "Form Page",
        caption=f"Page {page_number} of {schema.total_pages}",
        fields=[render_field(f, answers.get(f.id)) for f in page.fields],
    )


def compute_progress(schema: FormSchema, current_page: int, is_complete: bool = False) -> ProgressView:
    """
    Progress bar state for a submission sitting on ``current_page``.

    A complete submission always reports 100%; otherwise the percentage is
    ``(current - 1) * 100 // max(total - 1, 1)`` so a single-page form in
    progress shows 0%.
    """
    total = schema.total_pages
    current = min(max(current_page, 1), max(total, 1))

    if is_complete:
        percentage = 100
    else:
        percentage = ((current - 1) * 100) // max(total - 1, 1)
    percentage = min(max(percentage, 0), 100)

    steps = []
    for number in range(1, total + 1):
        page = schema.pages[number - 1]
        if is_complete or number < current:
            state = StepState.COMPLETED
        elif number == current:
            state = StepState.ACTIVE
        else:
            state = StepState.PENDING
        steps.append(ProgressStep(number=number, title=page.title or f"Step {number}", state=state))

    return ProgressView(
        current_page=current,
        total_pages=total,
        percentage=percentage,
        caption=f"Step {current} of {total}",
        steps=steps,
    )


def render_form(
    schema: FormSchema,
    answers: Mapping[str, Optional[str]],
    current_page: int = 1,
    is_complete: bool = False,
) -> FormView:
    """Render every page plus progress."""
    return FormView(
        form_name=schema.form_name,
        description=schema.description,
        progress=compute_progress(schema, current_page, is_complete),
        pages=[render_page(schema, p.page_number, answers) for p in schema.pages],
    )


class RenderingService:
    """Renders stored templates and submissions for the HTTP layer."""

    @staticmethod
    def submission_answers(submission: Optional[FormSubmission]) -> AnswerMap:
        """Answer map of a submission; empty when there is none."""
        if submission is None:
            return {}
        answers = coerce_answer_map(submission.data)
        if submission.data and not answers:
            logger.error(
                f"Failed to parse answer data for submission {submission.id}; rendering empty form"
            )
        return answers

    @staticmethod
    def _diagnostic(template: FormTemplate, page_number: Optional[int], error: Exception) -> PageRenderDiagnostic:
        """Error panel for the exception currently being handled."""
        return PageRenderDiagnostic(
            template_id=template.id,
            page_number=page_number,
            error=error.message if isinstance(error, FormsError) else str(error),
            structure_json=template.structure_json,
            traceback=traceback.format_exc(),
        )

    @staticmethod
    def render_template_page(
        template: FormTemplate,
        page_number: int,
        submission: Optional[FormSubmission] = None
    ) -> PageRenderResponse:
        """
        Render one page, converting any failure into a diagnostic panel.

        The diagnostic carries the raw structure JSON and the traceback so
        support staff can see why the page is broken.
        """
        try:
            schema = parse_schema(template.structure_json)
            answers = RenderingService.submission_answers(submission)
            page = render_page(schema, page_number, answers)
            progress = compute_progress(
                schema,
                submission.current_page if submission else page_number,
                submission.is_complete if submission else False,
            )
            return PageRenderResponse(
                page=page,
                progress=progress,
                submission_id=submission.id if submission else None,
            )
        except Exception as e:
            logger.exception(
                f"Error rendering form page: template={template.id}, page={page_number}"
            )
            return PageRenderResponse(
                diagnostic=RenderingService._diagnostic(template, page_number, e),
                submission_id=submission.id if submission else None,
            )

    @staticmethod
    def render_template(
        template: FormTemplate,
        submission: Optional[FormSubmission] = None
    ) -> FormView:
        """Render a whole form; failures come back as a diagnostic like a single page."""
        try:
            schema = parse_schema(template.structure_json)
            answers = RenderingService.submission_answers(submission)
            view = render_form(
                schema,
                answers,
                current_page=submission.current_page if submission else 1,
                is_complete=submission.is_complete if submission else False,
            )
        except Exception as e:
            logger.exception(f"Error rendering form: template={template.id}")
            view = FormView(
                diagnostic=RenderingService._diagnostic(
                    template, submission.current_page if submission else None, e
                ),
            )
        view.template_id = template.id
        view.form_name = view.form_name or template.name
        view.autosave_enabled = view.diagnostic is None and (
            submission is None or submission.status == FormStatus.DRAFT
        )
        return view
