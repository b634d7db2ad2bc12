"""Environment-bound configuration objects.

Pydantic BaseSettings groups loaded from environment variables and an optional
.env file. Azure Pipelines exposes pipeline variables as upper-cased
environment variables (``System.AccessToken`` → ``SYSTEM_ACCESSTOKEN``), which
is how the DevOps settings pick them up.

Example:
    from smarttask.config import get_settings

    settings = get_settings()  # Cached singleton
    ceiling = settings.governance.max_steps
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv(override=False)


class ModelType(str, Enum):
    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"


class ModelSettings(BaseSettings):
    """Oracle model selection and credentials.

    - MODEL_TYPE: openai | azure_openai (default: azure_openai)
    - OpenAI-compatible: MODEL_ID, MODEL_API_KEY / OPENAI_API_KEY, MODEL_BASE_URL
    - Azure: AZURE_OPENAI_INSTANCE_NAME, AZURE_OPENAI_KEY,
      AZURE_OPENAI_DEPLOYMENT_NAME, AZURE_OPENAI_API_VERSION
    """

    model_type: ModelType = Field(default=ModelType.AZURE_OPENAI, alias="MODEL_TYPE")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, alias="MODEL_TEMPERATURE")

    model_id: str = Field(default="gpt-4o", validation_alias=AliasChoices("MODEL_ID", "OPENAI_MODEL"))
    api_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("MODEL_API_KEY", "OPENAI_API_KEY"))
    base_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("MODEL_BASE_URL", "OPENAI_BASE_URL"))

    azure_instance_name: Optional[str] = Field(default=None, alias="AZURE_OPENAI_INSTANCE_NAME")
    azure_api_key: Optional[str] = Field(default=None, alias="AZURE_OPENAI_KEY")
    azure_deployment_name: Optional[str] = Field(default=None, alias="AZURE_OPENAI_DEPLOYMENT_NAME")
    azure_api_version: str = Field(default="2025-01-01-preview", alias="AZURE_OPENAI_API_VERSION")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )


class GovernanceSettings(BaseSettings):
    """Loop limits and replanning heuristics.

    - max_steps: completed-step ceiling before forced termination (default: 10)
    - min_step_length: replanned steps shorter than this are dropped (default: 10)
    """

    max_steps: int = Field(default=10, ge=1, le=100, alias="MAX_STEPS")
    min_step_length: int = Field(default=10, ge=1, le=200, alias="MIN_STEP_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class ObservabilitySettings(BaseSettings):
    """Tracing and logging configuration."""

    langsmith_project: Optional[str] = Field(default=None, alias="LANGCHAIN_PROJECT")
    langsmith_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("LANGCHAIN_API_KEY", "LANGSMITH_API_KEY")
    )
    langsmith_endpoint: Optional[str] = Field(default=None, alias="LANGCHAIN_ENDPOINT")
    tracing_enabled: bool = Field(default=False, alias="LANGCHAIN_TRACING_V2")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    log_prompt_max_length: int = Field(default=500, ge=100, le=5000, alias="LOG_PROMPT_MAX_LENGTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class DevOpsSettings(BaseSettings):
    """Azure DevOps REST access, read from the pipeline agent environment."""

    collection_uri: Optional[str] = Field(default=None, alias="SYSTEM_COLLECTIONURI")
    team_project: Optional[str] = Field(default=None, alias="SYSTEM_TEAMPROJECT")
    access_token: Optional[str] = Field(default=None, alias="SYSTEM_ACCESSTOKEN")
    build_id: Optional[str] = Field(default=None, alias="BUILD_BUILDID")
    build_number: Optional[str] = Field(default=None, alias="BUILD_BUILDNUMBER")
    requested_for: Optional[str] = Field(default=None, alias="BUILD_REQUESTEDFOR")
    repository_id: Optional[str] = Field(default=None, alias="BUILD_REPOSITORY_ID")
    source_version: Optional[str] = Field(default=None, alias="BUILD_SOURCEVERSION")
    source_branch: Optional[str] = Field(default=None, alias="BUILD_SOURCEBRANCH")
    pull_request_id: Optional[str] = Field(default=None, alias="SYSTEM_PULLREQUEST_PULLREQUESTID")
    api_version: str = Field(default="7.0", alias="DEVOPS_API_VERSION")
    request_timeout: float = Field(default=30.0, gt=0, alias="DEVOPS_REQUEST_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(BaseSettings):
    """Root application settings.

    Nested groups:
    - models: oracle model routing and credentials (ModelSettings)
    - governance: loop ceiling and filtering (GovernanceSettings)
    - observability: tracing and logging (ObservabilitySettings)
    - devops: Azure DevOps REST access (DevOpsSettings)
    """

    environment: str = Field(default="dev", alias="APP_ENV")
    capabilities_config_path: Optional[str] = Field(default=None, alias="CAPABILITIES_CONFIG")
    models: ModelSettings = Field(default_factory=ModelSettings)
    governance: GovernanceSettings = Field(default_factory=GovernanceSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    devops: DevOpsSettings = Field(default_factory=DevOpsSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()
