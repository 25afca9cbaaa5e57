"""Invoice document schemas.

The document travels as camelCase JSON (``taxRate``, ``customValues``) and is
stored verbatim in ``invoices.invoice_data``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ColumnType = Literal[
    "system-text",
    "system-quantity",
    "system-rate",
    "system-amount",
    "custom-text",
    "custom-number",
]


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomField(DocumentModel):
    id: str
    label: str = ""
    value: str = ""


class Sender(DocumentModel):
    name: str = ""
    email: str = ""
    address: str = ""
    phone: Optional[str] = None
    logo: Optional[str] = None
    signature: Optional[str] = None
    custom_fields: List[CustomField] = Field(default_factory=list)


class Client(DocumentModel):
    name: str = ""
    email: str = ""
    address: str = ""
    phone: Optional[str] = None
    custom_fields: List[CustomField] = Field(default_factory=list)


class PaymentInfo(DocumentModel):
    bank_name: Optional[str] = None
    account_name: Optional[str] = None
    account_number: Optional[str] = None
    swift_code: Optional[str] = None
    notes: Optional[str] = None


class InvoiceColumn(DocumentModel):
    id: str
    label: str = ""
    type: ColumnType
    visible: bool = True
    required: bool = False


class InvoiceItem(DocumentModel):
    id: str
    description: str = ""
    # Form fields may hold provisional text such as "" while editing
    quantity: Union[float, str] = 1
    rate: Union[float, str] = 0
    custom_values: Dict[str, Union[str, float]] = Field(default_factory=dict)


class Invoice(DocumentModel):
    id: str = Field(min_length=1, max_length=64)
    type: Literal["invoice", "receipt", "custom"] = "invoice"
    invoice_number: str = ""
    date: str = ""
    due_date: str = ""
    sender: Sender = Field(default_factory=Sender)
    client: Client = Field(default_factory=Client)
    items: List[InvoiceItem] = Field(default_factory=list)
    tax_rate: float = Field(default=0, ge=0, le=100)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    notes: str = ""
    status: Literal["Draft", "Sent", "Paid"] = "Draft"
    template: Literal["professional", "minimalist", "modern"] = "professional"
    is_header_reversed: bool = False
    visibility: Dict[str, bool] = Field(default_factory=dict)
    columns: List[InvoiceColumn] = Field(default_factory=list)
    payment_info: Optional[PaymentInfo] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        return value.upper()


class InvoiceRecordRead(BaseModel):
    id: str
    user_id: str
    invoice_number: str
    invoice_data: Invoice
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchSaveRequest(BaseModel):
    invoices: List[Invoice]


class RenderedRow(BaseModel):
    item_id: str
    cells: Dict[str, str]


class InvoiceTotalsRead(BaseModel):
    currency: str
    locale: str
    tax_rate: float
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    formatted_subtotal: str
    formatted_tax: str
    formatted_total: str
    rows: List[RenderedRow] = Field(default_factory=list)
