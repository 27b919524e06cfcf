"""Form template Pydantic schemas."""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field


class TemplateCreate(BaseModel):
    """Schema for creating a template from structure JSON."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=500)
    category: str = Field("General", max_length=100)
    structure_json: str = Field(..., min_length=2)


class TemplateUpdate(BaseModel):
    """Schema for updating a template."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    structure_json: Optional[str] = None
    is_active: Optional[bool] = None


class TemplateResponse(BaseModel):
    """Schema for template responses."""
    id: int
    name: str
    description: str
    category: str
    structure_json: str
    total_pages: int
    original_file_name: Optional[str]
    generated_by: Optional[str]
    generated_at: Optional[datetime]
    is_active: bool
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class TemplateListResponse(BaseModel):
    """Schema for template list responses (structure omitted)."""
    id: int
    name: str
    description: str
    category: str
    total_pages: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class FormHtmlResponse(BaseModel):
    """Generated HTML for a template."""
    template_id: int
    html: str
