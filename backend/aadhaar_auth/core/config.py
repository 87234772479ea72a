from pydantic import BaseModel
import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env before any setting reads the environment
load_dotenv()


class Settings(BaseModel):
    # Environment and Debug Settings
    ENV: str = os.getenv("ENV", "dev")  # dev, staging, prod
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./aadhaar_auth.db")
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "http://localhost:3000")

    # AWS / Cognito identity provider
    AWS_REGION: str = os.getenv("AWS_REGION", "ap-south-1")
    AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
    AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
    COGNITO_USER_POOL_ID: str = os.getenv("COGNITO_USER_POOL_ID", "")
    COGNITO_CLIENT_ID: str = os.getenv("COGNITO_CLIENT_ID", "")
    COGNITO_CLIENT_SECRET: str = os.getenv("COGNITO_CLIENT_SECRET", "")
    IDENTITY_PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("IDENTITY_PROVIDER_TIMEOUT_SECONDS", "10"))

    # Code delivered by the simulated provider when Cognito is not configured
    SIMULATED_OTP_CODE: str = os.getenv("SIMULATED_OTP_CODE", "123456")

    # OTP sessions
    OTP_SESSION_TTL_SECONDS: int = int(os.getenv("OTP_SESSION_TTL_SECONDS", "600"))  # 10 minutes
    OTP_SESSION_SWEEP_INTERVAL_SECONDS: int = int(os.getenv("OTP_SESSION_SWEEP_INTERVAL_SECONDS", "300"))  # 5 minutes

    # Normalization
    DEFAULT_PHONE_REGION: str = os.getenv("DEFAULT_PHONE_REGION", "IN")
    DEFAULT_EMAIL_DOMAIN: str = os.getenv("DEFAULT_EMAIL_DOMAIN", "beejsebazaar.com")

    # Rate limiting (Redis-backed when REDIS_URL is set)
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_START_PER_WINDOW: int = int(os.getenv("RATE_LIMIT_START_PER_WINDOW", "5"))
    RATE_LIMIT_VERIFY_PER_WINDOW: int = int(os.getenv("RATE_LIMIT_VERIFY_PER_WINDOW", "10"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "600"))
    RATE_LIMIT_LOCKOUT_SECONDS: int = int(os.getenv("RATE_LIMIT_LOCKOUT_SECONDS", "900"))

    @property
    def cognito_configured(self) -> bool:
        """True only when both the user pool and app client are set."""
        return bool(self.COGNITO_USER_POOL_ID and self.COGNITO_CLIENT_ID)

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
