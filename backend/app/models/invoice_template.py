"""Invoice template model for reusable invoice presets."""

import uuid

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class InvoiceTemplate(Base):
    __tablename__ = "invoice_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    template_data = Column(JSON, nullable=False, default=dict)
    usage_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
