"""
Configuration settings for Todo Service.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings"""

    # Service information
    service_name: str = os.getenv("SERVICE_NAME", "todo_service")
    service_version: str = os.getenv("SERVICE_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "False").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API configuration
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    # Authentication: "jwt" verifies session tokens locally, "remote" asks the auth service
    auth_mode: str = os.getenv("AUTH_MODE", "jwt").lower()
    secret_key: str = os.getenv(
        "SECRET_KEY",
        "todo-service-secret-key-change-in-production"
    )
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    # Auth Service configuration
    auth_service_url: str = os.getenv("AUTH_SERVICE_URL", "http://auth_service:8000")
    auth_service_timeout: int = int(os.getenv("AUTH_SERVICE_TIMEOUT", "10"))
    auth_service_retries: int = int(os.getenv("AUTH_SERVICE_RETRIES", "3"))

    # Session / request gate
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session_token")
    login_path: str = os.getenv("LOGIN_PATH", "/login")
    public_routes: List[str] = _split(os.getenv("PUBLIC_ROUTES", "/login,/api/auth,/health"))

    # CORS configuration
    allowed_origins: List[str] = os.getenv("ALLOWED_ORIGINS", "*").split(",")
    allowed_methods: List[str] = os.getenv("ALLOWED_METHODS", "*").split(",")
    allowed_headers: List[str] = os.getenv("ALLOWED_HEADERS", "*").split(",")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
