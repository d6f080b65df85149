"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, HttpUrl, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]
BcryptRounds = Annotated[int, Field(ge=4, le=31)]

PLACEHOLDER_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    app_env: Literal["development", "test", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    public_base_url: HttpUrl | None = Field(default=None, validation_alias="PUBLIC_BASE_URL")
    jwt_secret: NonEmptyStr = Field(validation_alias="JWT_SECRET")
    jwt_expires_days: PositiveInt = Field(default=90, validation_alias="JWT_EXPIRES_DAYS")
    jwt_cookie_expires_days: PositiveInt = Field(
        default=90,
        validation_alias="JWT_COOKIE_EXPIRES_DAYS",
    )
    bcrypt_rounds: BcryptRounds = Field(default=12, validation_alias="BCRYPT_ROUNDS")
    password_reset_ttl_minutes: PositiveInt = Field(
        default=10,
        validation_alias="PASSWORD_RESET_TTL_MINUTES",
    )
    password_reset_mask_unknown_email: bool = Field(
        default=False,
        validation_alias="PASSWORD_RESET_MASK_UNKNOWN_EMAIL",
    )
    smtp_host: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_HOST")
    smtp_port: PositiveInt = Field(default=587, validation_alias="SMTP_PORT")
    smtp_username: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_USERNAME")
    smtp_password: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=False, validation_alias="SMTP_USE_TLS")
    email_from: NonEmptyStr = Field(
        default="noreply@tour-booking.local",
        validation_alias="EMAIL_FROM",
    )
    email_from_name: NonEmptyStr = Field(
        default="Tour Booking",
        validation_alias="EMAIL_FROM_NAME",
    )
    bootstrap_admin_email: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_EMAIL",
    )
    bootstrap_admin_password: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_PASSWORD",
    )
    bootstrap_admin_password_file: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_PASSWORD_FILE",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @model_validator(mode="after")
    def _reject_placeholder_secret_in_production(self) -> "Settings":
        if self.app_env == "production" and self.jwt_secret == PLACEHOLDER_JWT_SECRET:
            raise ValueError("JWT_SECRET must be changed before running in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
