"""CRUD operations for invoice templates."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import UpstreamServiceError
from backend.app.models.invoice_template import InvoiceTemplate
from backend.app.schemas.invoice_template import InvoiceTemplateCreate, InvoiceTemplateUpdate

logger = logging.getLogger(__name__)

# Per-document fields that never belong in a reusable template
DOCUMENT_ONLY_FIELDS = ("id", "invoiceNumber", "date", "dueDate")
BLANK_CLIENT = {"name": "", "email": "", "address": "", "phone": ""}


def clean_template_data(template_data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {key: value for key, value in template_data.items() if key not in DOCUMENT_ONLY_FIELDS}
    cleaned["client"] = dict(BLANK_CLIENT)
    cleaned["status"] = "Draft"
    return cleaned


def _store_failure(db: Session, operation: str, exc: SQLAlchemyError, **context) -> UpstreamServiceError:
    db.rollback()
    logger.error("Template store failure in %s: %s", operation, exc, extra={"operation": operation, **context})
    return UpstreamServiceError(operation)


class CRUDInvoiceTemplate:
    def create(self, db: Session, *, obj_in: InvoiceTemplateCreate, user_id: str) -> InvoiceTemplate:
        obj = InvoiceTemplate(
            user_id=user_id,
            name=obj_in.name,
            description=obj_in.description,
            template_data=clean_template_data(obj_in.template_data),
        )
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.create", exc, user_id=user_id) from exc
        return obj

    def get(self, db: Session, *, template_id: str, user_id: str) -> Optional[InvoiceTemplate]:
        try:
            return (
                db.query(InvoiceTemplate)
                .filter(InvoiceTemplate.id == template_id, InvoiceTemplate.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.get", exc, template_id=template_id, user_id=user_id) from exc

    def get_multi(self, db: Session, *, user_id: str) -> List[InvoiceTemplate]:
        try:
            return (
                db.query(InvoiceTemplate)
                .filter(InvoiceTemplate.user_id == user_id)
                .order_by(InvoiceTemplate.created_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.list", exc, user_id=user_id) from exc

    def update(self, db: Session, *, db_obj: InvoiceTemplate, obj_in: InvoiceTemplateUpdate) -> InvoiceTemplate:
        update_data = obj_in.model_dump(exclude_unset=True)
        if update_data.get("template_data") is not None:
            update_data["template_data"] = clean_template_data(update_data["template_data"])
        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)
        try:
            db.commit()
            db.refresh(db_obj)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.update", exc, template_id=db_obj.id) from exc
        return db_obj

    def increment_usage(self, db: Session, *, db_obj: InvoiceTemplate) -> InvoiceTemplate:
        try:
            db.execute(
                update(InvoiceTemplate)
                .where(InvoiceTemplate.id == db_obj.id)
                .values(usage_count=InvoiceTemplate.usage_count + 1)
            )
            db.commit()
            db.refresh(db_obj)
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.use", exc, template_id=db_obj.id) from exc
        return db_obj

    def delete(self, db: Session, *, db_obj: InvoiceTemplate) -> InvoiceTemplate:
        template_id = db_obj.id
        try:
            db.delete(db_obj)
            db.commit()
        except SQLAlchemyError as exc:
            raise _store_failure(db, "template.delete", exc, template_id=template_id) from exc
        return db_obj


invoice_template_crud = CRUDInvoiceTemplate()
