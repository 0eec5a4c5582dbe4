"""
LLM Service Manager - Centralized management of the summarizer providers.

Provides a unified interface for managing Gemini and OpenAI clients with
initialization at startup, on-demand fallback and graceful shutdown.
"""

from typing import Any

from app.config import settings
from app.services.llm_interface import LLMInterface
from app.services.llm_providers.gemini_client import GeminiClient
from app.services.llm_providers.openai_client import OpenAIClient
from app.utils.logger import setup_logger

logger = setup_logger("llm_service_manager")

# Client instances cache
_initialized_clients: dict[str, LLMInterface] = {}

# Mapping of provider names to their constructor classes
_client_constructors: dict[str, type[LLMInterface]] = {
    "gemini": GeminiClient,
    "openai": OpenAIClient,
}


def _get_client_config(provider_name: str) -> dict[str, Any]:
    if provider_name == "gemini":
        return {
            "api_key": settings.gemini_api_key,
            "default_model": settings.default_gemini_model,
        }
    if provider_name == "openai":
        return {
            "api_key": settings.openai_api_key,
            "base_url": settings.openai_base_url,
            "default_model": settings.default_openai_model,
        }
    logger.warning(f"Unknown provider name: {provider_name}")
    return {}


def _create_client(provider_name: str) -> LLMInterface | None:
    config = _get_client_config(provider_name)
    if not config.get("api_key"):
        logger.warning(
            f"{provider_name.capitalize()} API key not configured. Skipping {provider_name} client initialization."
        )
        return None

    constructor_args = {k: v for k, v in config.items() if v is not None}
    try:
        client = _client_constructors[provider_name](**constructor_args)
    except ValueError as ve:
        logger.error(f"Configuration error initializing {provider_name} client: {ve}")
        return None
    except Exception as e:
        logger.error(
            f"Failed to initialize {provider_name} client: {e}", exc_info=True
        )
        return None

    _initialized_clients[provider_name] = client
    logger.info(f"{provider_name.capitalize()} client successfully initialized.")
    return client


def initialize_all_llm_clients():
    """Initialize all LLM clients based on available configuration."""
    logger.info("Initializing LLM clients based on available configuration...")

    for provider_name in _client_constructors:
        if provider_name in _initialized_clients:
            logger.debug(f"{provider_name} client already initialized, skipping")
            continue
        _create_client(provider_name)

    logger.info(
        f"LLM client initialization complete. Available: {sorted(_initialized_clients)}"
    )


async def close_all_llm_clients():
    """Close all initialized LLM clients."""
    if not _initialized_clients:
        logger.info("No LLM clients to close.")
        return

    for provider_name, client_instance in _initialized_clients.items():
        try:
            await client_instance.close()
            logger.info(f"{provider_name.capitalize()} client closed successfully.")
        except Exception as e:
            logger.error(f"Error closing {provider_name} client: {e}", exc_info=True)

    _initialized_clients.clear()
    logger.info("All LLM clients cleared from cache.")


def get_llm_client(provider_name: str | None = None) -> LLMInterface | None:
    """
    Get an initialized LLM client for the specified provider.

    Returns None if the provider is not available or not properly configured.
    """
    provider_name = (provider_name or settings.default_llm_provider).lower()
    client = _initialized_clients.get(provider_name)
    if client:
        return client

    if provider_name not in _client_constructors:
        logger.error(
            f"Unknown provider name: {provider_name}. Available providers: {list(_client_constructors)}"
        )
        return None

    logger.info(
        f"{provider_name.capitalize()} client not pre-initialized. Attempting on-demand initialization."
    )
    return _create_client(provider_name)
