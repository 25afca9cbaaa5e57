from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.invoice_share import InvoiceShare  # noqa: F401
from backend.app.models.invoice_template import InvoiceTemplate  # noqa: F401
