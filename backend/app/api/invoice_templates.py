"""Invoice template endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.crud.crud_invoice_template import invoice_template_crud
from backend.app.schemas.invoice_template import (
    InvoiceTemplateCreate,
    InvoiceTemplateRead,
    InvoiceTemplateUpdate,
)
from backend.app.schemas.user import CurrentUser

router = APIRouter(prefix="/invoice-templates", tags=["invoice_templates"])


def _get_owned_template(db: Session, template_id: str, user_id: str):
    template = invoice_template_crud.get(db, template_id=template_id, user_id=user_id)
    if not template:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice template not found")
    return template


@router.post("/", response_model=InvoiceTemplateRead, status_code=status.HTTP_201_CREATED)
async def create_invoice_template(
    template_in: InvoiceTemplateCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return invoice_template_crud.create(db, obj_in=template_in, user_id=current_user.id)


@router.get("/", response_model=list[InvoiceTemplateRead])
async def list_invoice_templates(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return invoice_template_crud.get_multi(db, user_id=current_user.id)


@router.get("/{template_id}", response_model=InvoiceTemplateRead)
async def get_invoice_template(template_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return _get_owned_template(db, template_id, current_user.id)


@router.put("/{template_id}", response_model=InvoiceTemplateRead)
async def update_invoice_template(
    template_id: str,
    template_in: InvoiceTemplateUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    template = _get_owned_template(db, template_id, current_user.id)
    return invoice_template_crud.update(db, db_obj=template, obj_in=template_in)


@router.post("/{template_id}/use", response_model=InvoiceTemplateRead)
async def use_invoice_template(template_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    template = _get_owned_template(db, template_id, current_user.id)
    return invoice_template_crud.increment_usage(db, db_obj=template)


@router.delete("/{template_id}", response_model=InvoiceTemplateRead)
async def delete_invoice_template(template_id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    template = _get_owned_template(db, template_id, current_user.id)
    deleted = InvoiceTemplateRead.model_validate(template)
    invoice_template_crud.delete(db, db_obj=template)
    return deleted
