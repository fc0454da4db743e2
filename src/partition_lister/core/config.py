"""Configuration management for partition-lister."""

from typing import Any, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

ENV_PREFIX = "PARTITION_LISTER_"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "partition-lister"

    model_config = {
        "env_prefix": ENV_PREFIX,
        "case_sensitive": False,
    }


class ExportSettings(BaseSettings):
    """Inputs of a single export run.

    Every field can be set through a ``PARTITION_LISTER_<FIELD>`` environment
    variable; explicit keyword arguments take precedence over the environment.
    """

    bucket: str = Field(..., min_length=1, description="Bucket to enumerate")
    prefix: str = Field(..., description="Root prefix, may be empty")
    delimiter: str = Field("/", min_length=1, description="Hierarchy delimiter")

    region_name: str = Field("us-east-1", description="AWS region name")
    endpoint_url: Optional[str] = Field(None, description="Custom S3 endpoint URL")
    aws_profile: Optional[str] = Field(None, description="AWS CLI profile name")
    access_key_id: Optional[str] = Field(None, description="AWS access key ID")
    secret_access_key: Optional[str] = Field(None, description="AWS secret access key")
    session_token: Optional[str] = Field(None, description="AWS session token")

    shallow_max_pages: int = Field(5, ge=0, description="Page cap for discovery")
    shallow_max_keys: int = Field(5, ge=1, le=1000, description="Keys per discovery page")
    deep_max_pages: int = Field(0, ge=0, description="Page cap per partition, 0 = all")
    deep_max_keys: int = Field(1000, ge=1, le=1000, description="Keys per partition page")
    listing_attempts: int = Field(1, ge=1, description="Attempts per listing call")

    workers: int = Field(5, ge=1, description="Number of listing workers")
    queue_size: int = Field(5, ge=1, description="Capacity of the job queue")

    output_format: str = Field("csv", description="Record format: csv or json")
    output_location: str = Field("./target", description="Directory for output files")
    output_prefix: str = Field("advertiser", min_length=1, description="Output file name prefix")
    force: bool = Field(False, description="Rewrite outputs that already exist")

    model_config = {
        "env_prefix": ENV_PREFIX,
        "case_sensitive": False,
    }


def load_export_settings(**overrides: Any) -> ExportSettings:
    """Build export settings from the environment plus explicit overrides.

    Overrides whose value is ``None`` are ignored so that unset CLI options fall
    back to the environment.

    Raises:
        ConfigurationError: If a required setting is missing or invalid
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return ExportSettings(**values)
    except PydanticValidationError as e:
        fields = ", ".join(
            ENV_PREFIX + ".".join(str(part) for part in err["loc"]).upper()
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid or missing settings: {fields}") from e


settings = Settings()
