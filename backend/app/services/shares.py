"""Share link lifecycle: create, resolve, count access, revoke.

A share is Active until ``expires_at`` passes (Expired, no write happens) or
its owner deletes it (Revoked, terminal). Resolution never writes; access
counting is a separate call that the public viewer runs in the background.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFound, Unauthorized, UpstreamServiceError, ValidationError
from backend.app.core.settings import get_settings
from backend.app.core.time import as_utc, days_from, utc_now
from backend.app.db.session import SessionLocal
from backend.app.models.invoice import Invoice as InvoiceRecord
from backend.app.models.invoice_share import InvoiceShare
from backend.app.schemas.invoice import Invoice
from backend.app.schemas.invoice_share import CreateShareOptions

logger = logging.getLogger(__name__)


@dataclass
class ResolvedShare:
    share: InvoiceShare
    invoice: Invoice


def generate_share_token() -> str:
    return secrets.token_urlsafe(get_settings().share_token_bytes)


def build_share_url(token: str) -> str:
    return f"{get_settings().public_base_url}/share/{token}"


def is_expired(share: InvoiceShare, now: Optional[datetime] = None) -> bool:
    expires_at = as_utc(share.expires_at)
    if expires_at is None:
        return False
    return expires_at <= (now or utc_now())


def create_share(
    db: Session,
    owner_id: str,
    invoice_id: Optional[str],
    options: Optional[CreateShareOptions] = None,
    now: Optional[datetime] = None,
) -> InvoiceShare:
    if not invoice_id:
        raise ValidationError("Invoice ID is required", field="invoiceId")
    options = options or CreateShareOptions()

    try:
        invoice = db.get(InvoiceRecord, invoice_id)
    except SQLAlchemyError as exc:
        _log_store_failure("share.create", exc, invoice_id=invoice_id, user_id=owner_id)
        raise UpstreamServiceError("share.create") from exc
    if invoice is None or invoice.user_id != owner_id:
        raise Unauthorized("You do not own this invoice")

    created_at = now or utc_now()
    expires_at = None
    if options.expires_in_days:
        expires_at = days_from(created_at, options.expires_in_days)

    share = InvoiceShare(
        invoice_id=invoice_id,
        user_id=owner_id,
        share_token=generate_share_token(),
        allow_download=True if options.allow_download is None else options.allow_download,
        expires_at=expires_at,
        created_at=created_at,
        access_count=0,
    )
    try:
        db.add(share)
        db.commit()
        db.refresh(share)
    except SQLAlchemyError as exc:
        db.rollback()
        _log_store_failure("share.create", exc, invoice_id=invoice_id, user_id=owner_id)
        raise UpstreamServiceError("share.create") from exc

    logger.info(
        "Share created",
        extra={"share_id": share.id, "invoice_id": invoice_id, "user_id": owner_id},
    )
    return share


def resolve_share(db: Session, token: Optional[str], now: Optional[datetime] = None) -> ResolvedShare:
    """Look up a live share by token. Unknown, expired and revoked all raise NotFound."""
    if not token:
        raise NotFound("Share")
    try:
        share = db.query(InvoiceShare).filter(InvoiceShare.share_token == token).first()
        record = db.get(InvoiceRecord, share.invoice_id) if share is not None else None
    except SQLAlchemyError as exc:
        _log_store_failure("share.resolve", exc)
        raise UpstreamServiceError("share.resolve") from exc

    if share is None or record is None or is_expired(share, now):
        raise NotFound("Share")
    return ResolvedShare(share=share, invoice=Invoice.model_validate(record.invoice_data))


def increment_access(db: Session, share_id: str, now: Optional[datetime] = None) -> None:
    """Single-statement increment so concurrent viewers never lose a count."""
    db.execute(
        update(InvoiceShare)
        .where(InvoiceShare.id == share_id)
        .values(
            access_count=InvoiceShare.access_count + 1,
            last_accessed_at=now or utc_now(),
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()


def record_share_access(share_id: str) -> None:
    """Background task: count a view on its own session, never raising."""
    db = SessionLocal()
    try:
        increment_access(db, share_id)
    except Exception:
        db.rollback()
        logger.warning(
            "Failed to record share access", exc_info=True,
            extra={"share_id": share_id, "operation": "share.increment_access"},
        )
    finally:
        db.close()


def revoke_share(db: Session, owner_id: str, share_id: Optional[str]) -> None:
    if not share_id:
        raise ValidationError("Share ID is required", field="id")
    try:
        share = db.get(InvoiceShare, share_id)
    except SQLAlchemyError as exc:
        _log_store_failure("share.revoke", exc, share_id=share_id, user_id=owner_id)
        raise UpstreamServiceError("share.revoke") from exc
    if share is None or share.user_id != owner_id:
        raise Unauthorized("You do not own this share")

    try:
        db.delete(share)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        _log_store_failure("share.revoke", exc, share_id=share_id, user_id=owner_id)
        raise UpstreamServiceError("share.revoke") from exc
    logger.info("Share revoked", extra={"share_id": share_id, "user_id": owner_id})


def list_shares(db: Session, owner_id: str, invoice_id: Optional[str]) -> List[InvoiceShare]:
    if not invoice_id:
        raise ValidationError("Invoice ID is required", field="invoiceId")
    try:
        return (
            db.query(InvoiceShare)
            .filter(InvoiceShare.user_id == owner_id, InvoiceShare.invoice_id == invoice_id)
            .order_by(InvoiceShare.created_at.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        _log_store_failure("share.list", exc, invoice_id=invoice_id, user_id=owner_id)
        raise UpstreamServiceError("share.list") from exc


def _log_store_failure(operation: str, exc: Exception, **context) -> None:
    logger.error(
        "Share store operation failed: %s", exc,
        extra={"operation": operation, **context},
    )
