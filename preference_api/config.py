import logging

from dotenv import load_dotenv
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Preference Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./preferences.db"

    # Security settings
    secret_key: str = "change-me"
    access_token_expire_minutes: int = 30

    # Locale settings (order matters: region fallback picks the first match)
    supported_locales: list[str] = ["en", "fr", "de", "es", "pt-BR", "ar"]
    default_locale: str = "en"

    # Base attributes shared by every cookie the service writes
    cookie_secure: bool = True
    cookie_httponly: bool = True
    cookie_samesite: str = "lax"
    cookie_path: str = "/"
    cookie_domain: str | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("supported_locales")
    @classmethod
    def validate_supported_locales(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("supported_locales must not be empty")
        if len(set(value)) != len(value):
            raise ValueError("supported_locales must not contain duplicates")
        return value

    @field_validator("cookie_samesite")
    @classmethod
    def validate_cookie_samesite(cls, value: str) -> str:
        value = value.lower()
        if value not in ("lax", "strict", "none"):
            raise ValueError("cookie_samesite must be one of 'lax', 'strict' or 'none'")
        return value

    @model_validator(mode="after")
    def validate_default_locale(self) -> "Settings":
        if self.default_locale not in self.supported_locales:
            raise ValueError(f"default_locale '{self.default_locale}' is not in supported_locales")
        return self


settings = Settings()

if settings.secret_key == "change-me":
    logger.warning("Using default SECRET_KEY. This is insecure and should be changed in production!")
