import json
from enum import Enum
from functools import lru_cache
from logging import getLevelName
from typing import Annotated, Any, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

SUPPORTED_SIGNING_ALGORITHMS = ("HS256", "HS384", "HS512")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # General App settings
    ENVIRONMENT: Environment = Field(
        Environment.DEVELOPMENT, alias="M2M_AUTH_ENVIRONMENT"
    )
    LOGGING_LEVEL: str = Field("INFO", alias="M2M_AUTH_LOGGING_LEVEL")
    ROOT_PATH: str = Field("", alias="M2M_AUTH_ROOT_PATH")

    # Client record store
    DATABASE_URL: str = Field(..., alias="M2M_AUTH_DATABASE_URL")
    CLIENT_SECRET_HASH_ROUNDS: int = Field(
        12, ge=4, le=31, alias="M2M_AUTH_CLIENT_SECRET_HASH_ROUNDS"
    )

    # Signing secret
    SIGNING_SECRET_ID: str = Field(
        "M2M_AUTH_SIGNING_SECRET", alias="M2M_AUTH_SIGNING_SECRET_ID"
    )
    SIGNING_SECRET_BACKEND: Literal["env", "aws"] = Field(
        "env", alias="M2M_AUTH_SIGNING_SECRET_BACKEND"
    )
    SIGNING_ALGORITHM: str = Field("HS256", alias="M2M_AUTH_SIGNING_ALGORITHM")
    AWS_REGION: Optional[str] = Field(None, alias="M2M_AUTH_AWS_REGION")

    # Access tokens
    TOKEN_ISSUER: str = Field("m2m_auth_service", alias="M2M_AUTH_TOKEN_ISSUER")
    TOKEN_AUDIENCE: str = Field("m2m_services", alias="M2M_AUTH_TOKEN_AUDIENCE")
    TOKEN_LIFETIME_SECONDS: int = Field(
        3600, gt=0, alias="M2M_AUTH_TOKEN_LIFETIME_SECONDS"
    )

    # Authorizer decision cache
    DECISION_CACHE_TTL_SECONDS: int = Field(
        300, ge=0, alias="M2M_AUTH_DECISION_CACHE_TTL_SECONDS"
    )
    DECISION_CACHE_MAX_ENTRIES: int = Field(
        10_000, gt=0, alias="M2M_AUTH_DECISION_CACHE_MAX_ENTRIES"
    )

    # Client IDs allowed to call the client management endpoints
    ADMIN_CLIENT_IDS: Annotated[List[str], NoDecode] = Field(
        default_factory=list, alias="M2M_AUTH_ADMIN_CLIENT_IDS"
    )

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(True, alias="M2M_AUTH_RATE_LIMIT_ENABLED")
    RATE_LIMIT_TOKEN: str = Field("10/minute", alias="M2M_AUTH_RATE_LIMIT_TOKEN")

    @field_validator("LOGGING_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if not isinstance(getLevelName(level), int):
            raise ValueError(f"Invalid logging level: {v!r}")
        return level

    @field_validator("SIGNING_ALGORITHM", mode="before")
    def validate_signing_algorithm(cls, v: str) -> str:
        algorithm = str(v).upper()
        if algorithm not in SUPPORTED_SIGNING_ALGORITHMS:
            raise ValueError(
                f"Unsupported signing algorithm {v!r}; "
                f"expected one of {', '.join(SUPPORTED_SIGNING_ALGORITHMS)}"
            )
        return algorithm

    @field_validator("ADMIN_CLIENT_IDS", mode="before")
    def assemble_admin_client_ids(cls, v: Any) -> List[str]:
        """
        Accepts a CSV string ('a,b,c') as well as a JSON list.
        """
        if v is None or v == "":
            return []
        if isinstance(v, str) and v.startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [client_id.strip() for client_id in v.split(",") if client_id.strip()]
        return v

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        return self.ENVIRONMENT == Environment.TESTING

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


# Instantiate the settings
settings = Settings()


@lru_cache()
def get_app_settings() -> Settings:
    """Settings dependency; override it in tests to inject different values."""
    return settings
