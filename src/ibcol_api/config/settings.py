# src/ibcol_api/config/settings.py
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict, SettingsError
from typing_extensions import Annotated, Self

from ibcol_api.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TRANSLATIONS_DIR = Path(__file__).resolve().parent.parent / "translations"
VALID_DEPLOYMENT_MODES = ["local-dev", "aws-mock", "aws-prod"]


def split_list_value(value):
    """Accept list settings from the environment as JSON or comma-separated text.

    ``"en-us, zh-hk"`` and ``'["en-us", "zh-hk"]'`` both become ``["en-us", "zh-hk"]``.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.startswith("["):
        try:
            return json.loads(text)
        except json.JSONDecodeError as err:
            raise ValueError(f"not a valid JSON list: {err.msg}") from err
    return [item.strip() for item in text.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    ``file_reference_secret`` has no default. Tokens issued by one instance
    must decode on every other instance, so the secret is shared
    infrastructure configuration and the service refuses to start without it.

    Usage:
        from ibcol_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="ibcol-portal-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="ibcol-registration-uploads",
        description="S3 bucket holding registration uploads"
    )

    upload_prefix: str = Field(
        default="uploads",
        pattern=r"^[a-z0-9][a-z0-9_-]*$",
        description="Key prefix under which every upload is stored"
    )

    signed_url_expiry_seconds: int = Field(
        default=900,
        gt=0,
        le=604800,
        description="Validity window of presigned upload and download URLs"
    )

    max_upload_size_bytes: int = Field(
        default=500 * 1024 * 1024,
        gt=0,
        description="Largest file a client may request an upload target for"
    )

    allowed_content_types: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Accepted upload MIME types; empty accepts everything"
    )

    storage_timeout_seconds: float = Field(
        default=3.0,
        gt=0,
        description="Connect and read timeout for storage backend calls"
    )

    storage_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per storage call before a transient failure is surfaced"
    )

    # File references
    file_reference_secret: SecretStr = Field(
        description="Shared secret used to encrypt file reference tokens"
    )

    file_reference_previous_secrets: Annotated[List[SecretStr], NoDecode] = Field(
        default_factory=list,
        description="Retired secrets still accepted when decoding tokens"
    )

    # Localization
    default_locale: str = Field(
        default="en-us",
        description="Locale whose translations are complete and used as fallback"
    )

    supported_locales: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["en-us", "zh-hk"],
        description="Locales served by the site"
    )

    translations_dir: Path = Field(
        default=DEFAULT_TRANSLATIONS_DIR,
        description="Directory holding <locale>/<namespace>.json translation files"
    )

    # HTTP
    cors_allow_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        if v not in VALID_DEPLOYMENT_MODES:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {VALID_DEPLOYMENT_MODES}")
        return v

    @field_validator('file_reference_secret')
    @classmethod
    def require_non_empty_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("file_reference_secret must not be empty")
        return v

    @field_validator('default_locale', mode='before')
    @classmethod
    def normalise_default_locale(cls, v):
        return v.strip().lower().replace("_", "-") if isinstance(v, str) else v

    @field_validator('allowed_content_types', 'file_reference_previous_secrets', 'cors_allow_origins', mode='before')
    @classmethod
    def split_list_values(cls, v):
        return split_list_value(v)

    @field_validator('supported_locales', mode='before')
    @classmethod
    def normalise_supported_locales(cls, v):
        v = split_list_value(v)
        if not isinstance(v, list):
            return v
        return [item.strip().lower().replace("_", "-") if isinstance(item, str) else item for item in v]

    @model_validator(mode='after')
    def apply_mode_defaults(self) -> Self:
        """Fill in endpoint and credentials for the local deployment modes."""
        if self.default_locale not in self.supported_locales:
            raise ValueError(
                f"default_locale {self.default_locale!r} must be one of {self.supported_locales}"
            )

        # local-dev talks to a moto server; aws-mock is patched in-process
        if self.aws_endpoint_url is None and self.deployment_mode == "local-dev":
            self.aws_endpoint_url = "http://localhost:5000"

        if self.deployment_mode in ["local-dev", "aws-mock"]:
            self.aws_access_key_id = self.aws_access_key_id or "mock"
            self.aws_secret_access_key = self.aws_secret_access_key or "mock"
        return self

    @property
    def file_reference_secrets(self) -> List[str]:
        """Current secret first, then the retired ones."""
        return [self.file_reference_secret.get_secret_value()] + [
            secret.get_secret_value() for secret in self.file_reference_previous_secrets
        ]

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def load_settings(**overrides) -> Settings:
    """Build a Settings instance, turning validation failures into a ConfigurationError."""
    try:
        return Settings(**overrides)
    except SettingsError as err:
        logger.error(f"Invalid configuration: {err}")
        raise ConfigurationError(f"Invalid configuration: {err}") from err
    except ValidationError as err:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in err.errors()
        )
        logger.error(f"Invalid configuration: {problems}")
        raise ConfigurationError(f"Invalid configuration: {problems}") from err


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return load_settings()
