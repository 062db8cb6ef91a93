"""
Centralized application configuration

Settings are read from the environment (and `.env`), case-sensitive.
"""
import json
import secrets
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_TITLE: str = "Kalakari API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Marketplace API for handcrafted goods"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str

    # Auth
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "kalakari-token"

    # CSRF / session
    CSRF_ENABLED: bool = True
    CSRF_SECRET: str = ""
    CSRF_MAX_AGE_SECONDS: int = 3600
    SESSION_COOKIE_NAME: str = "kalakari-sid"

    # Rate limits (requests per minute)
    RATE_LIMIT_GENERAL: int = 300
    RATE_LIMIT_AUTH: int = 20
    RATE_LIMIT_ENABLED: bool = True
    # Comma-separated peer addresses allowed to set X-Forwarded-For
    TRUSTED_PROXIES: str = ""

    # Razorpay
    RAZORPAY_KEY_ID: str = ""
    RAZORPAY_KEY_SECRET: str = ""
    RAZORPAY_WEBHOOK_SECRET: str = ""
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"

    # Dev fixtures under /api/dev
    ENABLE_DEV_ENDPOINTS: bool = True

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:5173"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    def get_trusted_proxies(self) -> List[str]:
        return [proxy.strip() for proxy in self.TRUSTED_PROXIES.split(",") if proxy.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def dev_endpoints_enabled(self) -> bool:
        return self.ENABLE_DEV_ENDPOINTS and not self.is_production

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

# One secret per process when none is configured; tokens do not survive a restart.
if not settings.CSRF_SECRET:
    settings.CSRF_SECRET = secrets.token_hex(32)
