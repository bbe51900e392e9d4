"""Library settings and configuration management.

This module provides Pydantic-based settings that load from environment
variables with validation and type safety. Field names match the standard
AWS environment variables where one exists (``AWS_REGION``,
``AWS_ACCESS_KEY_ID``, ...), so an environment already set up for the AWS
CLI works unchanged.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ec2kit.constants import DEFAULT_CHECK_INTERVAL


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    All settings can be overridden via environment variables or a ``.env``
    file. When no credentials are configured, boto3's default credential
    chain (shared config, instance profile, ...) is used.

    Example:
        >>> settings = Settings()
        >>> print(settings.aws_region)
        'us-east-1'
        >>> print(settings.check_interval_seconds)
        5.0
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # AWS Configuration
    # =========================================================================

    aws_region: str = Field(
        default="us-east-1",
        description="AWS region the EC2 client is bound to",
    )

    aws_access_key_id: str | None = Field(
        default=None,
        description="Explicit access key ID (falls back to the boto3 credential chain)",
    )

    aws_secret_access_key: SecretStr | None = Field(
        default=None,
        description="Explicit secret access key, required with aws_access_key_id",
    )

    aws_endpoint_url: str | None = Field(
        default=None,
        description="Override EC2 endpoint URL (e.g. a local emulator)",
    )

    # =========================================================================
    # Instance Launching
    # =========================================================================

    check_interval_seconds: float = Field(
        default=DEFAULT_CHECK_INTERVAL,
        gt=0.0,
        le=300.0,
        description="Seconds between polls while waiting for pending instances",
    )

    # =========================================================================
    # Rate Limiting & Throttling Configuration
    # =========================================================================

    max_concurrent_aws_calls: int = Field(
        default=8,
        ge=1,
        le=100,
        description="Maximum concurrent AWS API calls",
    )

    aws_api_rate_limit: float = Field(
        default=15.0,
        ge=0.1,
        le=1000.0,
        description="Tokens per second for AWS API rate limiting",
    )

    aws_api_max_tokens: int = Field(
        default=30,
        ge=1,
        le=1000,
        description="Maximum tokens in AWS API rate limit bucket",
    )

    # =========================================================================
    # Logging Configuration
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level applied by configure_logging",
    )

    @model_validator(mode="after")
    def validate_credentials(self) -> "Settings":
        """Validate that explicit credentials come as a complete pair.

        Returns:
            The validated Settings instance.

        Raises:
            ValueError: If only one of the access key ID and secret key is set.
        """
        if bool(self.aws_access_key_id) != bool(self.aws_secret_access_key):
            raise ValueError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together"
            )
        return self

    def client_kwargs(self) -> dict[str, str]:
        """Build extra keyword arguments for ``boto3.client``.

        Only values that are actually configured are included, so boto3
        keeps resolving everything else itself.

        Returns:
            Dictionary of boto3 client keyword arguments.
        """
        kwargs: dict[str, str] = {}
        if self.aws_access_key_id and self.aws_secret_access_key:
            kwargs["aws_access_key_id"] = self.aws_access_key_id
            kwargs["aws_secret_access_key"] = self.aws_secret_access_key.get_secret_value()
        if self.aws_endpoint_url:
            kwargs["endpoint_url"] = self.aws_endpoint_url
        return kwargs


@lru_cache
def get_settings() -> Settings:
    """Get cached settings.

    Settings are cached to avoid repeated environment variable reads
    and validation. Call ``get_settings.cache_clear()`` to reload.

    Returns:
        Validated Settings instance.

    Example:
        >>> settings = get_settings()
        >>> print(settings.aws_region)
        'us-east-1'
    """
    return Settings()
