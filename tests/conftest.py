"""Root conftest: point the app at a throwaway database before it is imported."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_smartbill.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "text")
# Tests never talk to the real email provider
os.environ["RESEND_API_KEY"] = ""
