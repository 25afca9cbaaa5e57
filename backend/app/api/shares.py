"""Share link routes: owner management plus the public viewer."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.app.core.errors import NotFound, ValidationError
from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.schemas.invoice_share import (
    InvoiceShareRead,
    PublicShareMeta,
    PublicShareView,
    ShareCreateRequest,
    ShareCreateResponse,
    ShareEmailRequest,
    ShareEmailResponse,
    ShareListResponse,
)
from backend.app.schemas.user import CurrentUser
from backend.app.services.email import send_share_email
from backend.app.services.shares import (
    build_share_url,
    create_share,
    list_shares,
    record_share_access,
    resolve_share,
    revoke_share,
)
from backend.app.services.totals import DEFAULT_LOCALE, build_totals_view, normalize_locale

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/share", tags=["share"])

INVALID_SHARE_BODY = {
    "status": "invalid_or_expired",
    "message": "This share link is no longer valid. Please ask the sender for a new link.",
}


@router.post("/create", response_model=ShareCreateResponse)
async def create_share_link(
    payload: ShareCreateRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    share = create_share(db, current_user.id, payload.invoice_id, payload.options)
    return ShareCreateResponse(share=InvoiceShareRead.model_validate(share), url=build_share_url(share.share_token))


@router.get("/list", response_model=ShareListResponse)
async def list_share_links(
    invoice_id: str | None = Query(default=None, alias="invoiceId"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    shares = list_shares(db, current_user.id, invoice_id)
    return ShareListResponse(shares=[InvoiceShareRead.model_validate(share) for share in shares])


@router.delete("/revoke")
async def revoke_share_link(
    share_id: str | None = Query(default=None, alias="id"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    revoke_share(db, current_user.id, share_id)
    return {"success": True}


@router.post("/email", response_model=ShareEmailResponse)
async def email_share_link(payload: ShareEmailRequest, current_user: CurrentUser = Depends(get_current_user)):
    return send_share_email(payload)


@router.get(
    "/{token}",
    response_model=PublicShareView,
    responses={status.HTTP_404_NOT_FOUND: {"description": "Invalid or expired link"}},
)
async def view_shared_invoice(
    token: str,
    background_tasks: BackgroundTasks,
    locale: str | None = None,
    db: Session = Depends(get_db),
):
    """Public, unauthenticated view. Any failure collapses into the same 404 body."""
    try:
        resolved = resolve_share(db, token)
        view = PublicShareView(
            share=PublicShareMeta(
                allow_download=resolved.share.allow_download,
                expires_at=resolved.share.expires_at,
            ),
            invoice=resolved.invoice,
            totals=build_totals_view(resolved.invoice, _viewer_locale(locale)),
        )
    except NotFound:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=INVALID_SHARE_BODY)
    except Exception:
        logger.warning("Shared invoice could not be rendered", exc_info=True, extra={"path": "/share/{token}"})
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=INVALID_SHARE_BODY)

    # Counted after the response is sent; a failure here never reaches the viewer
    background_tasks.add_task(record_share_access, resolved.share.id)
    return view


def _viewer_locale(locale: str | None) -> str:
    try:
        return normalize_locale(locale)
    except ValidationError:
        return DEFAULT_LOCALE
