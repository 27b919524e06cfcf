"""Audit service for the append-only action log."""

from typing import Optional, List, Dict, Any
from datetime import datetime

from sqlalchemy.orm import Session

from formintake.models.audit import AuditLog


class AuditService:
    """Service for audit trail operations."""

    @staticmethod
    def record(
        db: Session,
        user_id: str,
        action: str,
        entity_type: str,
        entity_id: Optional[int] = None,
        details: Optional[str] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> AuditLog:
        """
        Add an audit entry to the session.

        The caller owns the transaction; the entry commits (or rolls back)
        with the change it describes.
        """
        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.add(entry)
        return entry

    @staticmethod
    def get_entity_log(
        db: Session,
        entity_type: str,
        entity_id: int,
        page: int = 1,
        page_size: int = 50,
        action: Optional[str] = None,
        user_id: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Get paginated audit log for one entity, newest first."""
        query = db.query(AuditLog).filter(
            AuditLog.entity_type == entity_type,
            AuditLog.entity_id == entity_id
        )

        if action:
            query = query.filter(AuditLog.action == action)
        if user_id:
            query = query.filter(AuditLog.user_id == user_id)
        if from_date:
            query = query.filter(AuditLog.created_at >= from_date)
        if to_date:
            query = query.filter(AuditLog.created_at <= to_date)

        total = query.count()

        entries = query.order_by(
            AuditLog.created_at.desc(), AuditLog.id.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()

        return {
            "items": entries,
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": (total + page_size - 1) // page_size,
        }

    @staticmethod
    def get_user_activity(
        db: Session,
        user_id: str,
        limit: int = 50
    ) -> List[AuditLog]:
        """Most recent actions performed by one identity."""
        return db.query(AuditLog).filter(
            AuditLog.user_id == user_id
        ).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
