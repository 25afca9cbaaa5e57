import os


def _env(name: str, default):
    value = os.getenv(name.upper())
    if value is None:
        return default
    if isinstance(default, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings:
    def __init__(self):
        self.app_name = _env("app_name", "SmartBill")
        self.api_version = "1.0.0"
        self.environment = _env("environment", "development")
        # Shared secret of the hosted auth provider; bearer tokens are HS256.
        self.secret_key = _env("secret_key", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = _env("access_token_expire_minutes", 60)
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = _env("database_url", "sqlite:///./smartbill.db")
        self.cors_origins = _env("cors_origins", ["http://localhost:3000", "http://127.0.0.1:3000"])

        self.public_base_url = _env("public_base_url", "http://localhost:3000").rstrip("/")
        # 24 random bytes encode to 32 url-safe characters
        self.share_token_bytes = _env("share_token_bytes", 24)

        self.resend_api_key = _env("resend_api_key", "") or None
        self.email_from = _env("email_from", "SmartBill <noreply@smartbillpro.com>")
        self.email_api_url = _env("email_api_url", "https://api.resend.com/emails")
        self.email_timeout_seconds = _env("email_timeout_seconds", 10.0)

        self.autosave_delay_seconds = _env("autosave_delay_seconds", 3.0)

        self.log_level = _env("log_level", "INFO")
        self.log_format = _env("log_format", "json")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
