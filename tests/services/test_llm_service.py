import pytest

from app.config import settings
from app.services import llm_service
from app.services.llm_providers.gemini_client import GeminiClient
from app.services.llm_providers.openai_client import OpenAIClient


@pytest.fixture(autouse=True)
def clean_client_cache():
    llm_service._initialized_clients.clear()
    yield
    llm_service._initialized_clients.clear()


def test_unconfigured_provider_yields_no_client():
    assert llm_service.get_llm_client("gemini") is None
    assert llm_service.get_llm_client("openai") is None
    assert llm_service.get_llm_client("unknown") is None


async def test_clients_are_built_from_configured_keys(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "test-gemini-key")
    monkeypatch.setattr(settings, "openai_api_key", "test-openai-key")

    llm_service.initialize_all_llm_clients()

    assert isinstance(llm_service.get_llm_client("gemini"), GeminiClient)
    assert isinstance(llm_service.get_llm_client("OpenAI"), OpenAIClient)
    assert llm_service.get_llm_client() is llm_service.get_llm_client("gemini")

    await llm_service.close_all_llm_clients()
    assert llm_service._initialized_clients == {}


def test_missing_key_is_a_configuration_error():
    with pytest.raises(ValueError):
        GeminiClient(api_key="")
    with pytest.raises(ValueError):
        OpenAIClient(api_key="")


async def test_empty_prompt_short_circuits():
    client = OpenAIClient(api_key="test-openai-key")

    assert await client.generate_text("   ") == ""
    await client.close()
