"""CRUD operations for stored invoice documents."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import Unauthorized, UpstreamServiceError
from backend.app.core.time import utc_now
from backend.app.models.invoice import Invoice as InvoiceRecord
from backend.app.schemas.invoice import Invoice

logger = logging.getLogger(__name__)


def _store_failure(db: Session, operation: str, exc: SQLAlchemyError, **context) -> UpstreamServiceError:
    db.rollback()
    logger.error("Invoice store failure in %s: %s", operation, exc, extra={"operation": operation, **context})
    return UpstreamServiceError(operation)


class CRUDInvoice:
    def upsert(self, db: Session, *, invoice: Invoice, user_id: str) -> InvoiceRecord:
        """Insert or overwrite by id. Concurrent saves are last-write-wins."""
        try:
            record = self._stage(db, invoice=invoice, user_id=user_id)
            db.commit()
            db.refresh(record)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Failed to save invoice: %s", exc,
                extra={"invoice_id": invoice.id, "user_id": user_id, "operation": "invoice.upsert"},
            )
            raise UpstreamServiceError("invoice.upsert") from exc
        return record

    def upsert_many(self, db: Session, *, invoices: List[Invoice], user_id: str) -> List[InvoiceRecord]:
        try:
            records = [self._stage(db, invoice=invoice, user_id=user_id) for invoice in invoices]
            db.commit()
            for record in records:
                db.refresh(record)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "Failed to batch save %d invoices: %s", len(invoices), exc,
                extra={"user_id": user_id, "operation": "invoice.upsert_many"},
            )
            raise UpstreamServiceError("invoice.upsert_many") from exc
        return records

    def _stage(self, db: Session, *, invoice: Invoice, user_id: str) -> InvoiceRecord:
        record = db.get(InvoiceRecord, invoice.id)
        if record is not None and record.user_id != user_id:
            db.rollback()
            raise Unauthorized("Invoice belongs to another user")
        data = invoice.model_dump(mode="json", by_alias=True)
        if record is None:
            record = InvoiceRecord(id=invoice.id, user_id=user_id)
            db.add(record)
        record.invoice_number = invoice.invoice_number
        record.invoice_data = data
        record.updated_at = utc_now()
        return record

    def get(self, db: Session, *, invoice_id: str, user_id: str) -> Optional[InvoiceRecord]:
        try:
            return (
                db.query(InvoiceRecord)
                .filter(InvoiceRecord.id == invoice_id, InvoiceRecord.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "invoice.get", exc, invoice_id=invoice_id, user_id=user_id) from exc

    def get_multi(self, db: Session, *, user_id: str) -> List[InvoiceRecord]:
        try:
            return (
                db.query(InvoiceRecord)
                .filter(InvoiceRecord.user_id == user_id)
                .order_by(InvoiceRecord.created_at.desc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise _store_failure(db, "invoice.list", exc, user_id=user_id) from exc

    def delete(self, db: Session, *, db_obj: InvoiceRecord) -> InvoiceRecord:
        invoice_id = db_obj.id
        try:
            db.delete(db_obj)
            db.commit()
        except SQLAlchemyError as exc:
            raise _store_failure(db, "invoice.delete", exc, invoice_id=invoice_id) from exc
        return db_obj


invoice_crud = CRUDInvoice()
