"""Share-link email delivery through Resend's HTTP API.

Without RESEND_API_KEY the message is only logged ("mock mode") so local
development never fails on missing credentials.
"""

import logging
from html import escape
from typing import Optional

import httpx

from backend.app.core.errors import UpstreamServiceError
from backend.app.core.settings import get_settings
from backend.app.schemas.invoice_share import ShareEmailRequest, ShareEmailResponse

logger = logging.getLogger(__name__)

DEFAULT_SENDER_NAME = "SmartBill User"


def build_subject(invoice_number: str, sender_name: Optional[str]) -> str:
    return f"Invoice {invoice_number} from {sender_name or DEFAULT_SENDER_NAME}"


def build_html(invoice_number: str, share_url: str, sender_name: Optional[str]) -> str:
    sender = escape(sender_name or "A SmartBill user")
    return (
        '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        '<h2 style="color: #2563eb;">Invoice Shared</h2>'
        "<p>Hello,</p>"
        f"<p><strong>{sender}</strong> has shared an invoice with you.</p>"
        '<div style="background-color: #f8fafc; padding: 16px; border-radius: 8px; margin: 24px 0;">'
        '<p style="margin: 0 0 8px 0; color: #64748b; font-size: 14px;">Invoice Number</p>'
        f'<p style="margin: 0; font-weight: bold; font-size: 18px; color: #0f172a;">{escape(invoice_number)}</p>'
        "</div>"
        f'<a href="{escape(share_url, quote=True)}" style="display: inline-block; background-color: #2563eb; '
        'color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; font-weight: bold;">'
        "View Invoice</a>"
        "</div>"
    )


def send_share_email(request: ShareEmailRequest, client: Optional[httpx.Client] = None) -> ShareEmailResponse:
    settings = get_settings()
    subject = build_subject(request.invoice_number, request.sender_name)

    if not settings.resend_api_key:
        logger.info(
            "Mock email to %s: %s (%s)", request.email, subject, request.share_url,
            extra={"mock": True},
        )
        return ShareEmailResponse(success=True, message="Email queued (Mock Mode)", mock=True)

    payload = {
        "from": settings.email_from,
        "to": [request.email],
        "subject": subject,
        "html": build_html(request.invoice_number, request.share_url, request.sender_name),
    }
    headers = {"Authorization": f"Bearer {settings.resend_api_key}"}

    owns_client = client is None
    http = client or httpx.Client(timeout=settings.email_timeout_seconds)
    try:
        response = http.post(settings.email_api_url, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("Email provider request failed: %s", exc, extra={"operation": "share.email"})
        raise UpstreamServiceError("share.email") from exc
    finally:
        if owns_client:
            http.close()

    body = response.json() if response.content else {}
    return ShareEmailResponse(success=True, id=body.get("id"))
