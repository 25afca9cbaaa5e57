"""Invoice record: the full document is stored as a JSON snapshot."""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import relationship

from backend.app.core.time import utc_now
from backend.app.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"

    # Generated client-side; saves are upserts keyed on it
    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    invoice_number = Column(String(100), nullable=False, default="")
    invoice_data = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    shares = relationship("InvoiceShare", back_populates="invoice", cascade="all, delete-orphan")
