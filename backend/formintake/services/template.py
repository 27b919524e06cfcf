"""Template service for form definitions and AI generation from uploads."""

import logging
import os
from typing import Optional, List
from datetime import datetime

from sqlalchemy.orm import Session

from formintake.config import get_settings
from formintake.errors import NotFoundError, UploadRejectedError
from formintake.models.template import FormTemplate
from formintake.schemas.structure import parse_schema
from formintake.services.audit import AuditService
from formintake.services.document import SUPPORTED_EXTENSIONS, file_extension
from formintake.services.generation import FormGenerationService

logger = logging.getLogger(__name__)


class TemplateService:
    """Service for template management."""

    @staticmethod
    def get_template(db: Session, template_id: int) -> FormTemplate:
        """Get a template by ID, active or not."""
        template = db.query(FormTemplate).filter(FormTemplate.id == template_id).first()
        if not template:
            raise NotFoundError("Form template not found")
        return template

    @staticmethod
    def get_active_template(db: Session, template_id: int) -> FormTemplate:
        """Get a template that can still be filled in."""
        template = db.query(FormTemplate).filter(
            FormTemplate.id == template_id,
            FormTemplate.is_active == True
        ).first()
        if not template:
            raise NotFoundError("Form template not found")
        return template

    @staticmethod
    def get_templates(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        active_only: bool = True,
        category: Optional[str] = None
    ) -> List[FormTemplate]:
        """Get all templates, newest first."""
        query = db.query(FormTemplate)
        if active_only:
            query = query.filter(FormTemplate.is_active == True)
        if category:
            query = query.filter(FormTemplate.category == category)
        return query.order_by(FormTemplate.created_at.desc(), FormTemplate.id.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def create_template(
        db: Session,
        name: str,
        structure_json: str,
        created_by: str,
        description: str = "",
        category: str = "General"
    ) -> FormTemplate:
        """Create a template from structure JSON; the JSON must parse."""
        schema = parse_schema(structure_json)

        db_template = FormTemplate(
            name=name,
            description=description or schema.description or "",
            category=category or "General",
            structure_json=structure_json,
            total_pages=schema.total_pages,
            created_by=created_by,
        )
        db.add(db_template)
        db.flush()

        AuditService.record(
            db,
            user_id=created_by,
            action="CreateTemplate",
            entity_type="FormTemplate",
            entity_id=db_template.id,
            details=f"Created template {name} with {schema.total_pages} pages",
        )
        db.commit()
        db.refresh(db_template)
        logger.info(f"Created template {db_template.id}: {name}")
        return db_template

    @staticmethod
    def update_template(
        db: Session,
        template_id: int,
        updated_by: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        structure_json: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> FormTemplate:
        """Update template metadata and/or its structure."""
        db_template = TemplateService.get_template(db, template_id)
        changes = {}

        if structure_json is not None:
            schema = parse_schema(structure_json)
            db_template.structure_json = structure_json
            db_template.total_pages = schema.total_pages
            changes["total_pages"] = schema.total_pages
        if name is not None:
            db_template.name = name
            changes["name"] = name
        if description is not None:
            db_template.description = description
            changes["description"] = description
        if category is not None:
            db_template.category = category
            changes["category"] = category
        if is_active is not None:
            db_template.is_active = is_active
            changes["is_active"] = is_active

        AuditService.record(
            db,
            user_id=updated_by,
            action="UpdateTemplate",
            entity_type="FormTemplate",
            entity_id=db_template.id,
            details="Structure replaced" if structure_json is not None else "Metadata updated",
            new_values=changes,
        )
        db.commit()
        db.refresh(db_template)
        return db_template

    @staticmethod
    def delete_template(db: Session, template_id: int, deleted_by: str) -> None:
        """Soft delete a template (mark as inactive)."""
        db_template = TemplateService.get_template(db, template_id)
        db_template.is_active = False

        AuditService.record(
            db,
            user_id=deleted_by,
            action="DeleteTemplate",
            entity_type="FormTemplate",
            entity_id=db_template.id,
            details=f"Deactivated template {db_template.name}",
        )
        db.commit()

    @staticmethod
    def check_upload(filename: str, size: int) -> None:
        """Reject unsupported or oversized uploads before any processing."""
        if not filename:
            raise UploadRejectedError("No file uploaded")
        extension = file_extension(filename)
        if extension not in SUPPORTED_EXTENSIONS:
            allowed = ", ".join(sorted(SUPPORTED_EXTENSIONS))
            raise UploadRejectedError(f"Unsupported file type. Supported types: {allowed}")
        if size == 0:
            raise UploadRejectedError("Uploaded file is empty")
        max_bytes = get_settings().max_upload_bytes
        if size > max_bytes:
            raise UploadRejectedError(f"File size must be less than {max_bytes // (1024 * 1024)}MB")

    @staticmethod
    def generate_from_upload(
        db: Session,
        data: bytes,
        filename: str,
        generated_by: str,
        generation: FormGenerationService,
        category: str = "General"
    ) -> FormTemplate:
        """
        Create a template from an uploaded image or document.

        Generation never fails the request: the fallback structure is used
        when the generator is unavailable or produces something unusable.
        """
        TemplateService.check_upload(filename, len(data))

        generated = generation.generate_structure(data, filename)
        now = datetime.utcnow()
        db_template = FormTemplate(
            name=os.path.splitext(os.path.basename(filename))[0],
            description=f"AI-generated form from {filename}",
            category=category or "General",
            structure_json=generated.structure_json,
            total_pages=generated.schema.total_pages,
            original_file_name=filename,
            generated_by=generated_by,
            generated_at=now,
            created_by=generated_by,
        )
        db.add(db_template)
        db.flush()

        AuditService.record(
            db,
            user_id=generated_by,
            action="GenerateForm",
            entity_type="FormTemplate",
            entity_id=db_template.id,
            details=f"Generated from {filename}" + (" (fallback structure)" if generated.used_fallback else ""),
            new_values={"total_pages": db_template.total_pages, "used_fallback": generated.used_fallback},
        )
        db.commit()
        db.refresh(db_template)
        logger.info(f"Generated template {db_template.id} from {filename}")
        return db_template
