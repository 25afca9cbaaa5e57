# SmartBill backend entrypoint: invoices, templates and public share links.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api import invoice_templates
from backend.app.api import invoices
from backend.app.api import shares
from backend.app.api.error_handlers import register_error_handlers
from backend.app.core.observability import setup_logging
from backend.app.core.settings import get_settings
from backend.app.db.base import Base
from backend.app.db.session import engine

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(invoices.router)
app.include_router(invoice_templates.router)
app.include_router(shares.router)


@app.get("/")
def read_root():
    return {"app": "SmartBill backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def create_tables():
    Base.metadata.create_all(bind=engine)
