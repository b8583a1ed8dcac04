"""
Application Configuration Management

Loads configuration from environment variables and AWS Secrets Manager.
Supports both development (env vars / .env file) and Lambda (secret ARNs) modes.
"""

import json
import os
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from upsync.utils.exceptions import ConfigurationException


def parse_account_mappings(value: Any) -> Dict[str, str]:
    """Parse the mapping table from a JSON object string or a dict"""
    if value is None or value == "":
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"ACCOUNT_MAPPINGS is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError("ACCOUNT_MAPPINGS must be a JSON object")
    return {str(key): str(mapped) for key, mapped in value.items()}


class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development", description="Environment name")

    # Application
    app_name: str = Field(default="Up-PocketSmith Bridge")
    app_version: str = Field(default="1.0.0")
    log_level: str = Field(default="INFO")

    # FastAPI (local runs only, Lambda goes through Mangum)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Up
    up_secret_key: Optional[str] = Field(
        default=None, description="Up webhook secret used to sign deliveries"
    )
    up_bearer_token: Optional[str] = Field(
        default=None, description="Up personal access token"
    )
    up_api_base_url: str = Field(default="https://api.up.com.au/api/v1")
    up_signature_header: str = Field(default="X-Up-Authenticity-Signature")

    # PocketSmith
    pocketsmith_api_key: Optional[str] = Field(
        default=None, description="PocketSmith developer key"
    )
    pocketsmith_api_base_url: str = Field(default="https://api.pocketsmith.com/v2")
    pocketsmith_exact_note_match: bool = Field(
        default=False,
        description="Keep only search results whose note equals the Up transaction id",
    )

    # Up account id -> PocketSmith transaction account id
    account_mappings: Dict[str, str] = Field(default_factory=dict)

    # HTTP
    http_timeout_seconds: float = Field(default=30.0)

    # AWS
    aws_region: str = Field(default="ap-southeast-2")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment"""
        valid_envs = ["development", "test", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v_lower

    @field_validator("account_mappings", mode="before")
    @classmethod
    def validate_account_mappings(cls, v: Any) -> Dict[str, str]:
        """Accept the mapping table as a JSON object string"""
        return parse_account_mappings(v)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_lambda(self) -> bool:
        """Check if running in AWS Lambda environment"""
        return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))

    def validate_required_secrets(self) -> None:
        """
        Validate that required secrets are present.
        Raises ValueError if any required secrets are missing.
        """
        missing = []

        if not self.up_secret_key:
            missing.append("up_secret_key")
        if not self.up_bearer_token:
            missing.append("up_bearer_token")
        if not self.pocketsmith_api_key:
            missing.append("pocketsmith_api_key")

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"In Lambda, ensure ARN environment variables are set. "
                f"Locally, ensure .env file or environment variables are configured."
            )


# Secret env var -> env var holding the Secrets Manager ARN for it
SECRET_ARN_VARIABLES: Dict[str, str] = {
    "UP_SECRET_KEY": "UP_SECRET_KEY_ARN",
    "UP_BEARER_TOKEN": "UP_BEARER_TOKEN_ARN",
    "POCKETSMITH_API_KEY": "POCKETSMITH_API_KEY_ARN",
    "ACCOUNT_MAPPINGS": "ACCOUNT_MAPPINGS_ARN",
}


def _fetch_secret_by_arn(arn: str, region: str) -> str:
    """
    Fetch a secret value from AWS Secrets Manager using ARN.

    Args:
        arn: The ARN of the secret
        region: AWS region

    Returns:
        The secret value as a string
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=arn)
        return response.get("SecretString", "")
    except Exception as e:
        raise RuntimeError(f"Failed to retrieve secret from ARN {arn}: {e}") from e


def load_secrets_from_arns() -> None:
    """
    Resolve `<NAME>_ARN` variables into `<NAME>` environment variables.

    Values already present in the environment win over the ARN lookup.
    """
    region = os.getenv("AWS_REGION", "ap-southeast-2")
    for variable, arn_variable in SECRET_ARN_VARIABLES.items():
        arn = os.getenv(arn_variable)
        if arn and not os.getenv(variable):
            os.environ[variable] = _fetch_secret_by_arn(arn, region)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached per process).

    In Lambda, secrets referenced by ARN environment variables are fetched
    from Secrets Manager before the settings object is built.

    Raises:
        ConfigurationException: If a secret cannot be fetched, a value does
            not validate or a required secret is missing
    """
    try:
        if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
            load_secrets_from_arns()

        settings = Settings()
        settings.validate_required_secrets()
    except (RuntimeError, ValueError) as e:
        raise ConfigurationException(
            "Invalid bridge configuration", details={"error": str(e)}
        ) from e

    return settings


def load_account_mappings(settings: Settings) -> Dict[str, str]:
    """
    Mapping table for the current invocation.

    The settings object is cached for the life of the process, so in Lambda
    the secret behind ACCOUNT_MAPPINGS_ARN is read again on every call and a
    rotated table applies to warm containers too.

    Raises:
        ConfigurationException: If the secret cannot be read or parsed
    """
    arn = os.getenv("ACCOUNT_MAPPINGS_ARN")
    if not (settings.is_lambda and arn):
        return dict(settings.account_mappings)

    region = os.getenv("AWS_REGION", settings.aws_region)
    try:
        return parse_account_mappings(_fetch_secret_by_arn(arn, region))
    except (RuntimeError, ValueError) as e:
        raise ConfigurationException(
            "Could not load account mappings", details={"error": str(e)}
        ) from e
