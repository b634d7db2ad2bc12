"""Default oracle wiring using environment-derived settings."""

from __future__ import annotations

from typing import Dict

from langchain_openai import AzureChatOpenAI, ChatOpenAI

from smarttask.config import ModelSettings, ModelType
from smarttask.utils.error_handler import ConfigurationError


def _openai_kwargs(settings: ModelSettings) -> Dict[str, object]:
    if not settings.api_key:
        raise ConfigurationError("Missing API key for OpenAI model. Set MODEL_API_KEY or OPENAI_API_KEY.")
    kwargs: Dict[str, object] = {
        "model": settings.model_id,
        "api_key": settings.api_key,
        "temperature": settings.temperature,
    }
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    return kwargs


def _azure_kwargs(settings: ModelSettings) -> Dict[str, object]:
    missing = [
        name
        for name, value in (
            ("AZURE_OPENAI_INSTANCE_NAME", settings.azure_instance_name),
            ("AZURE_OPENAI_KEY", settings.azure_api_key),
            ("AZURE_OPENAI_DEPLOYMENT_NAME", settings.azure_deployment_name),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing Azure OpenAI configuration: {', '.join(missing)}")
    return {
        "azure_endpoint": f"https://{settings.azure_instance_name}.openai.azure.com/",
        "azure_deployment": settings.azure_deployment_name,
        "api_key": settings.azure_api_key,
        "api_version": settings.azure_api_version,
        "temperature": settings.temperature,
    }


def build_chat_model(settings: ModelSettings):
    """Construct the chat model selected by ``MODEL_TYPE``.

    Raises:
        ConfigurationError: credentials for the selected provider are missing.
    """
    if settings.model_type == ModelType.OPENAI:
        return ChatOpenAI(**_openai_kwargs(settings))
    return AzureChatOpenAI(**_azure_kwargs(settings))
