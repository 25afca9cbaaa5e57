"""Invoice template schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class InvoiceTemplateBase(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class InvoiceTemplateCreate(InvoiceTemplateBase):
    # Partial invoice document in its camelCase wire shape
    template_data: Dict[str, Any] = Field(default_factory=dict)


class InvoiceTemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    template_data: Optional[Dict[str, Any]] = None


class InvoiceTemplateRead(InvoiceTemplateBase):
    id: str
    user_id: str
    template_data: Dict[str, Any]
    usage_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
