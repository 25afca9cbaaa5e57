"""Invoice document routes: upsert-by-id saves, listing, totals."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.errors import ValidationError
from backend.app.core.security import get_current_user
from backend.app.crud.crud_invoice import invoice_crud
from backend.app.db.session import get_db
from backend.app.schemas.invoice import BatchSaveRequest, Invoice, InvoiceRecordRead, InvoiceTotalsRead
from backend.app.schemas.user import CurrentUser
from backend.app.services.totals import build_totals_view, normalize_locale

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _get_owned_invoice(db: Session, invoice_id: str, user_id: str):
    record = invoice_crud.get(db, invoice_id=invoice_id, user_id=user_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return record


@router.get("/", response_model=List[InvoiceRecordRead])
async def list_invoices(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return invoice_crud.get_multi(db, user_id=current_user.id)


@router.post("/batch", response_model=List[InvoiceRecordRead])
async def batch_save_invoices(
    payload: BatchSaveRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return invoice_crud.upsert_many(db, invoices=payload.invoices, user_id=current_user.id)


@router.post("/preview", response_model=InvoiceTotalsRead)
async def preview_totals(invoice: Invoice, locale: str | None = None):
    return build_totals_view(invoice, normalize_locale(locale))


@router.put("/{invoice_id}", response_model=InvoiceRecordRead)
async def save_invoice(
    invoice_id: str,
    invoice: Invoice,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    if invoice.id != invoice_id:
        raise ValidationError("Invoice id does not match the URL", field="id")
    return invoice_crud.upsert(db, invoice=invoice, user_id=current_user.id)


@router.get("/{invoice_id}", response_model=InvoiceRecordRead)
async def get_invoice(invoice_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _get_owned_invoice(db, invoice_id, current_user.id)


@router.get("/{invoice_id}/totals", response_model=InvoiceTotalsRead)
async def get_invoice_totals(
    invoice_id: str,
    locale: str | None = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    record = _get_owned_invoice(db, invoice_id, current_user.id)
    return build_totals_view(Invoice.model_validate(record.invoice_data), normalize_locale(locale))


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    record = _get_owned_invoice(db, invoice_id, current_user.id)
    invoice_crud.delete(db, db_obj=record)
    return {"success": True}
