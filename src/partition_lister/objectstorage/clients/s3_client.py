"""S3 client configuration and management.

This module provides S3 client configuration and management functionality
with support for multiple authentication methods and S3-compatible services.

Every ``S3ClientManager`` owns its own ``boto3.Session``. boto3 sessions are
not safe to share between threads, so each listing worker builds a manager of
its own and keeps it for the lifetime of the worker.

Authentication Methods Supported:
    1. Explicit credentials (access_key_id, secret_access_key)
    2. AWS CLI profiles (aws_profile)
    3. IAM roles / environment variables (no explicit credentials)
    4. Temporary credentials (session_token)
"""

from typing import Any, Dict, Optional

import boto3
from pydantic import BaseModel, ConfigDict, Field

from partition_lister.core import ExportSettings, get_logger

logger = get_logger(__name__)


class S3ClientConfig(BaseModel):
    """Configuration for S3 client connections.

    Authentication Priority:
        1. If aws_profile is provided, use profile-based authentication
        2. If explicit credentials are provided, use them
        3. Otherwise, fall back to default AWS credential chain

    Example:
        # MinIO endpoint
        config = S3ClientConfig(
            endpoint_url="http://localhost:9000",
            access_key_id="minioadmin",
            secret_access_key="minioadmin"
        )
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    access_key_id: Optional[str] = Field(None, description="AWS access key ID")
    secret_access_key: Optional[str] = Field(None, description="AWS secret access key")
    session_token: Optional[str] = Field(
        None, description="AWS session token for temporary credentials"
    )
    region_name: str = Field("us-east-1", description="AWS region name")
    endpoint_url: Optional[str] = Field(
        None, description="Custom S3 endpoint URL for S3-compatible services"
    )
    aws_profile: Optional[str] = Field(
        None, description="AWS CLI profile name to use for credentials"
    )

    @classmethod
    def from_settings(cls, export_settings: ExportSettings) -> "S3ClientConfig":
        """Extract the connection part of the export settings."""
        return cls(
            access_key_id=export_settings.access_key_id,
            secret_access_key=export_settings.secret_access_key,
            session_token=export_settings.session_token,
            region_name=export_settings.region_name,
            endpoint_url=export_settings.endpoint_url,
            aws_profile=export_settings.aws_profile,
        )


class S3ClientManager:
    """Manages a single S3 client connection."""

    def __init__(self, config: S3ClientConfig):
        """Initialize S3 client manager.

        Args:
            config: S3 client configuration
        """
        self.config = config
        self._client = None
        logger.debug("S3 client manager initialized", region=config.region_name)

    @property
    def client(self):
        """Get or create S3 client instance."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self):
        """Create boto3 S3 client with the configured settings."""
        kwargs: Dict[str, Any] = {
            "region_name": self.config.region_name,
        }

        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.aws_profile:
            session = boto3.Session(profile_name=self.config.aws_profile)
            logger.debug(
                "S3 client created with profile", profile=self.config.aws_profile
            )
        else:
            session = boto3.Session()
            if self.config.access_key_id and self.config.secret_access_key:
                kwargs.update(
                    {
                        "aws_access_key_id": self.config.access_key_id,
                        "aws_secret_access_key": self.config.secret_access_key,
                    }
                )
                if self.config.session_token:
                    kwargs["aws_session_token"] = self.config.session_token
                logger.debug("S3 client created with explicit credentials")
            else:
                logger.debug("S3 client created with default credential chain")

        return session.client("s3", **kwargs)  # type: ignore
