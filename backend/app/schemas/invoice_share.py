"""Share link schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from backend.app.schemas.invoice import Invoice, InvoiceTotalsRead


class CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateShareOptions(CamelRequest):
    allow_download: Optional[bool] = None
    # None or 0 means the link never expires
    expires_in_days: Optional[int] = Field(default=None, ge=0, le=3650)


class ShareCreateRequest(CamelRequest):
    invoice_id: Optional[str] = None
    options: CreateShareOptions = Field(default_factory=CreateShareOptions)


class InvoiceShareRead(BaseModel):
    id: str
    invoice_id: str
    user_id: str
    share_token: str
    allow_download: bool
    expires_at: Optional[datetime] = None
    created_at: datetime
    last_accessed_at: Optional[datetime] = None
    access_count: int

    model_config = ConfigDict(from_attributes=True)


class ShareCreateResponse(BaseModel):
    share: InvoiceShareRead
    url: str


class ShareListResponse(BaseModel):
    shares: List[InvoiceShareRead]


class PublicShareMeta(BaseModel):
    allow_download: bool
    expires_at: Optional[datetime] = None


class PublicShareView(BaseModel):
    status: str = "ok"
    share: PublicShareMeta
    invoice: Invoice
    totals: InvoiceTotalsRead


class ShareEmailRequest(CamelRequest):
    email: EmailStr
    invoice_number: str = ""
    share_url: str = Field(min_length=1)
    sender_name: Optional[str] = None


class ShareEmailResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    mock: bool = False
    id: Optional[str] = None
