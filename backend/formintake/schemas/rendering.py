"""Display-ready views produced by the rendering service."""

from enum import Enum as PyEnum
from typing import List, Optional

from pydantic import BaseModel


class ControlKind(str, PyEnum):
    """Concrete input control a field renders to."""
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    DATE = "date"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    CHECKBOX_GROUP = "checkbox_group"


class StepState(str, PyEnum):
    COMPLETED = "completed"
    ACTIVE = "active"
    PENDING = "pending"


class OptionView(BaseModel):
    value: str
    selected: bool = False


class FieldView(BaseModel):
    """One field merged with its stored answer."""
    id: str
    control_kind: ControlKind
    label: str
    placeholder: Optional[str] = None
    is_required: bool = False
    current_value: str = ""
    options: List[OptionView] = []
    selected_options: List[str] = []


class PageView(BaseModel):
    page_number: int
    total_pages: int
    title: str
    caption: str
    fields: List[FieldView] = []


class ProgressStep(BaseModel):
    number: int
    title: str
    state: StepState


class ProgressView(BaseModel):
    current_page: int
    total_pages: int
    percentage: int
    caption: str
    steps: List[ProgressStep] = []


class PageRenderDiagnostic(BaseModel):
    """Inline error panel shown instead of a page or form that failed to render."""
    template_id: Optional[int] = None
    page_number: Optional[int] = None
    error: str
    structure_json: str
    traceback: Optional[str] = None


class FormView(BaseModel):
    """Every page of a form plus progress, or a diagnostic when rendering failed."""
    template_id: Optional[int] = None
    form_name: Optional[str] = None
    description: Optional[str] = None
    progress: Optional[ProgressView] = None
    pages: List[PageView] = []
    autosave_enabled: bool = False
    diagnostic: Optional[PageRenderDiagnostic] = None


class PageRenderResponse(BaseModel):
    """Either a rendered page or a diagnostic for support staff."""
    page: Optional[PageView] = None
    progress: Optional[ProgressView] = None
    diagnostic: Optional[PageRenderDiagnostic] = None
    submission_id: Optional[int] = None
