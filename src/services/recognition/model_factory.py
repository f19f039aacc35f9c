"""Model factory for the order field extractor.

Supports an OpenAI-compatible endpoint (optionally behind a custom base URL),
Azure OpenAI, and Google Gemini, selected by ``LLM_PROVIDER``.
"""

from __future__ import annotations

import logging

from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from core.config import Settings, get_settings


logger = logging.getLogger(__name__)


def _normalize_azure_endpoint(endpoint: str) -> str:
    """Strip trailing slashes; Azure treats `//openai/...` as a different path."""
    return endpoint.rstrip("/")


def _validate_azure_credentials(settings: Settings) -> bool:
    if (
        not settings.AZURE_OPENAI_ENDPOINT
        or not settings.AZURE_OPENAI_API_KEY
        or not settings.AZURE_OPENAI_API_VERSION
    ):
        logger.warning("LLM_PROVIDER=azure_openai but Azure credentials are missing")
        return False
    return True


def _create_azure_model(settings: Settings) -> Model:
    from openai import AsyncAzureOpenAI

    azure_client = AsyncAzureOpenAI(
        azure_endpoint=_normalize_azure_endpoint(settings.AZURE_OPENAI_ENDPOINT or ""),
        api_key=settings.AZURE_OPENAI_API_KEY,
        api_version=settings.AZURE_OPENAI_API_VERSION,
    )
    provider = OpenAIProvider(openai_client=azure_client)
    return OpenAIChatModel(settings.EXTRACTION_MODEL, provider=provider)


def _create_openai_model(settings: Settings) -> Model:
    provider = OpenAIProvider(
        base_url=settings.OPENAI_BASE_URL, api_key=settings.OPENAI_API_KEY
    )
    return OpenAIChatModel(settings.EXTRACTION_MODEL, provider=provider)


def _create_gemini_model(settings: Settings) -> Model:
    provider = GoogleProvider(api_key=settings.GEMINI_API_KEY)
    return GoogleModel(settings.EXTRACTION_MODEL, provider=provider)


def get_extraction_model() -> Model:
    """Build the pydantic-ai model for order field extraction.

    Raises:
        ValueError: if the selected provider is missing credentials.
    """
    settings = get_settings()
    provider = settings.LLM_PROVIDER

    if provider == "azure_openai":
        if not _validate_azure_credentials(settings):
            raise ValueError(
                "Azure OpenAI selected but AZURE_OPENAI_ENDPOINT / "
                "AZURE_OPENAI_API_KEY / AZURE_OPENAI_API_VERSION are not all set."
            )
        logger.info("Using Azure OpenAI extraction model: %s", settings.EXTRACTION_MODEL)
        return _create_azure_model(settings)

    if provider == "gemini":
        if not settings.GEMINI_API_KEY:
            raise ValueError("Gemini selected but GEMINI_API_KEY is not set.")
        logger.info("Using Gemini extraction model: %s", settings.EXTRACTION_MODEL)
        return _create_gemini_model(settings)

    if not settings.OPENAI_API_KEY:
        raise ValueError("OpenAI selected but OPENAI_API_KEY is not set.")
    logger.info(
        "Using OpenAI-compatible extraction model: %s (base_url=%s)",
        settings.EXTRACTION_MODEL,
        settings.OPENAI_BASE_URL or "default",
    )
    return _create_openai_model(settings)
