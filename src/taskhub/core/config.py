"""Configuration management for TaskHub.

Every setting can be supplied through an environment variable with the
``TASKHUB_`` prefix or a local ``.env`` file, and is validated by Pydantic
Settings at construction time.
"""

from __future__ import annotations

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskHubConfig(BaseSettings):
    """Main configuration for TaskHub.

    Example:
        ```python
        # TASKHUB_JWT_SECRET=...
        # TASKHUB_DATABASE_URL=postgresql+asyncpg://...
        config = TaskHubConfig()

        # Or programmatically
        config = TaskHubConfig(
            database_url="sqlite+aiosqlite:///:memory:",
            jwt_secret="x" * 32,
        )
        ```

    Attributes:
        database_url: SQLAlchemy async connection URL
        jwt_secret: Secret used to sign access and invitation tokens
        free_member_limit: Member count from which acceptance needs a subscription
        smtp_host: Outbound mail server; ``None`` logs mail instead of sending
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __str__(self) -> str:
        """String representation with masked secrets."""
        result = super().__repr__()
        # Mask passwords in URLs
        result = re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", result)
        # Mask secret values
        result = re.sub(
            r"(jwt_secret|smtp_password|secret|password)=(?:'[^']*'|[^\s,)]+)",
            r"\1='***'",
            result,
            flags=re.IGNORECASE,
        )
        return result

    ##########################
    # Database Configuration #
    ##########################

    database_url: str = Field(
        default="sqlite+aiosqlite:///./taskhub.db",
        description="Primary database connection URL",
    )

    database_pool_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Database connection pool size (ignored for SQLite)",
    )

    database_max_overflow: int = Field(
        default=20,
        ge=0,
        le=200,
        description="Max overflow connections beyond pool size",
    )

    database_echo: bool = Field(
        default=False,
        description="Enable SQL query logging (use only in development)",
    )

    ##################
    # Authentication #
    ##################

    jwt_secret: str = Field(
        ...,
        description="Secret key for signing access and invitation tokens (required)",
    )

    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )

    jwt_issuer: str = Field(
        default="taskhub",
        description="Issuer claim written into and required on access tokens",
    )

    jwt_audience: str = Field(
        default="taskhub-clients",
        description="Audience claim written into and required on access tokens",
    )

    access_token_ttl_minutes: int = Field(
        default=1440,
        ge=1,
        description="Lifetime of an access token in minutes",
    )

    ############
    # Workflow #
    ############

    invitation_ttl_days: int = Field(
        default=7,
        ge=1,
        description="Days before a pending invitation expires",
    )

    free_member_limit: int = Field(
        default=4,
        ge=1,
        description="Member count at which accepting an invitation needs a subscription",
    )

    deadline_check_interval_seconds: float = Field(
        default=3600,
        gt=0,
        description="Seconds between two deadline notifier cycles",
    )

    deadline_warning_window_hours: float = Field(
        default=24,
        gt=0,
        description="Tasks due within this many hours receive a warning",
    )

    enable_deadline_checker: bool = Field(
        default=True,
        description="Run the deadline notifier in the background",
    )

    ########
    # Mail #
    ########

    smtp_host: str | None = Field(
        default=None,
        description="SMTP server host; when unset outgoing mail is only logged",
    )

    smtp_port: int = Field(
        default=587,
        ge=1,
        le=65535,
        description="SMTP server port",
    )

    smtp_username: str | None = Field(default=None, description="SMTP login user")

    smtp_password: str | None = Field(default=None, description="SMTP login password")

    smtp_use_tls: bool = Field(
        default=True,
        description="Upgrade the SMTP connection with STARTTLS",
    )

    mail_from_address: str = Field(
        default="noreply@taskhub.local",
        description="Sender address of outgoing mail",
    )

    mail_from_name: str = Field(
        default="TaskHub",
        description="Sender display name of outgoing mail",
    )

    base_url: str = Field(
        default="http://localhost:3000",
        description="Public front-end URL used to build invitation links",
    )

    ########
    # HTTP #
    ########

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed by the CORS middleware",
    )

    ##############
    # Validators #
    ##############

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL and warn about sync drivers.

        Args:
            v: Database URL to validate

        Returns:
            Validated, normalised URL string
        """
        import warnings

        from taskhub.utils.db_compat import uses_sync_driver

        url_str = str(v).rstrip("/")
        if uses_sync_driver(url_str):
            warnings.warn(
                "Database URL uses a synchronous driver scheme. "
                "Use an async driver instead (e.g. postgresql+asyncpg, "
                "sqlite+aiosqlite).",
                stacklevel=4,
            )
        return url_str

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Reject secrets too short to sign HS256 tokens safely.

        Raises:
            ValueError: If the secret is shorter than 32 characters
        """
        if len(v) < 32:
            raise ValueError("jwt_secret must be at least 32 characters long")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    def model_post_init(self, __context: object) -> None:
        """Run cross-field validation after model construction."""
        self.validate_configuration()

    def validate_configuration(self) -> None:
        """Validate complete configuration consistency.

        Raises:
            ValueError: If configuration is inconsistent
        """
        if self.smtp_host and not (self.smtp_username and self.smtp_password):
            raise ValueError("smtp_host requires smtp_username and smtp_password")


__all__ = ["TaskHubConfig"]
