"""Form template management and rendering router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from sqlalchemy.orm import Session

from formintake.database import get_db
from formintake.models.submission import FormSubmission
from formintake.schemas.rendering import FormView, PageRenderResponse
from formintake.schemas.template import (
    TemplateCreate,
    TemplateUpdate,
    TemplateResponse,
    TemplateListResponse,
    FormHtmlResponse,
)
from formintake.schemas.user import CurrentUser
from formintake.services.auth import get_current_user, require_staff
from formintake.services.generation import FormGenerationService, get_generation_service
from formintake.services.rendering import RenderingService
from formintake.services.submission import SubmissionService
from formintake.services.template import TemplateService
from formintake.services.workflow import WorkflowService

router = APIRouter()


def _submission_for_render(
    db: Session,
    template_id: int,
    current_user: CurrentUser,
    submission_id: Optional[int]
) -> Optional[FormSubmission]:
    """An explicitly requested submission, else the caller's draft."""
    if submission_id is None:
        return WorkflowService.find_draft(db, template_id, current_user.user_id)

    submission = SubmissionService.get_submission(db, submission_id)
    if submission.form_template_id != template_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Submission does not belong to this template"
        )
    if submission.submitted_by != current_user.user_id and not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this submission"
        )
    return submission


@router.get("", response_model=List[TemplateListResponse])
async def list_templates(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = True,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """List templates available for filling in."""
    return TemplateService.get_templates(db, skip, limit, active_only, category)


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    template_data: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Create a template from structure JSON (staff only)."""
    return TemplateService.create_template(
        db,
        name=template_data.name,
        structure_json=template_data.structure_json,
        created_by=current_user.user_id,
        description=template_data.description,
        category=template_data.category,
    )


@router.post("/generate", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def generate_template(
    file: UploadFile = File(...),
    category: str = Form("General"),
    db: Session = Depends(get_db),
    generation: FormGenerationService = Depends(get_generation_service),
    current_user: CurrentUser = Depends(require_staff)
):
    """
    Generate a template from an uploaded form image or document.

    When AI generation is unavailable the template gets a demo structure.
    """
    data = await file.read()
    return TemplateService.generate_from_upload(
        db,
        data,
        file.filename or "",
        generated_by=current_user.user_id,
        generation=generation,
        category=category,
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Get a template by ID."""
    return TemplateService.get_template(db, template_id)


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: int,
    template_data: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Update a template (staff only)."""
    return TemplateService.update_template(
        db,
        template_id,
        updated_by=current_user.user_id,
        **template_data.model_dump(exclude_unset=True)
    )


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    """Deactivate a template (staff only)."""
    TemplateService.delete_template(db, template_id, deleted_by=current_user.user_id)


@router.get("/{template_id}/pages/{page_number}", response_model=PageRenderResponse)
async def render_page(
    template_id: int,
    page_number: int,
    submission_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Render one page merged with the caller's answers.

    Rendering problems come back as a diagnostic in the response body.
    """
    template = TemplateService.get_active_template(db, template_id)
    submission = _submission_for_render(db, template_id, current_user, submission_id)
    return RenderingService.render_template_page(template, page_number, submission)


@router.get("/{template_id}/render", response_model=FormView)
async def render_form(
    template_id: int,
    submission_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Render every page of a template with progress."""
    template = TemplateService.get_active_template(db, template_id)
    submission = _submission_for_render(db, template_id, current_user, submission_id)
    return RenderingService.render_template(template, submission)


@router.post("/{template_id}/html", response_model=FormHtmlResponse)
async def generate_html(
    template_id: int,
    db: Session = Depends(get_db),
    generation: FormGenerationService = Depends(get_generation_service),
    current_user: CurrentUser = Depends(require_staff)
):
    """Generate standalone HTML for a template with the AI generator."""
    template = TemplateService.get_template(db, template_id)
    html = generation.generate_form_html(template.structure_json)
    return FormHtmlResponse(template_id=template.id, html=html)
