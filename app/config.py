import os
from functools import lru_cache

# Prefer loading environment variables from a .env file if python-dotenv is available
try:
    from dotenv import load_dotenv, find_dotenv
    _env_path = find_dotenv(usecwd=True)
    if _env_path:
        load_dotenv(_env_path, override=False)
except ImportError:
    pass


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./stylehub.db")
    # Primary admin email; ADMIN_EMAILS may list more, comma separated
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    CURRENCY: str = os.getenv("CURRENCY", "INR")
    # Orders at or above the threshold ship free, otherwise the flat rate applies
    SHIPPING_FLAT_RATE: float = float(os.getenv("SHIPPING_FLAT_RATE", "99"))
    FREE_SHIPPING_THRESHOLD: float = float(os.getenv("FREE_SHIPPING_THRESHOLD", "999"))
    LOW_STOCK_THRESHOLD: int = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))

    @property
    def admin_emails(self) -> set:
        emails = {e.strip().lower() for e in (self.ADMIN_EMAILS or "").split(",") if e.strip()}
        if self.ADMIN_EMAIL:
            emails.add(self.ADMIN_EMAIL.strip().lower())
        return emails

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in (self.CORS_ORIGINS or "*").split(",") if o.strip()]


@lru_cache
def get_settings():
    return Settings()
