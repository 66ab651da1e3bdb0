"""
LLM Factory
Builds LLM clients from settings.
"""
from typing import Optional
import logging

from config import LLMSettings, get_llm_settings
from utils.exceptions import ConfigurationError

from .base import BaseLLM
from .openai_llm import OpenAILLM
from .gemini_llm import GeminiLLM


logger = logging.getLogger(__name__)


DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.0-flash",
}

# Gateways whose key lives in a dedicated setting
_BASE_URL_KEYS = {
    "openrouter.ai": "openrouter_api_key",
    "integrate.api.nvidia.com": "nvidia_api_key",
}


def _resolve_api_key(settings: LLMSettings, provider: str, base_url: Optional[str]) -> Optional[str]:
    if base_url:
        for host, attr in _BASE_URL_KEYS.items():
            if host in base_url:
                return getattr(settings, attr)
    api_keys = {
        "openai": settings.openai_api_key,
        "gemini": settings.gemini_api_key,
    }
    return api_keys.get(provider)


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    Build an LLM client.

    Args:
        provider: LLM provider (openai, gemini)
        model: Model name (provider default when omitted)
        settings: LLM settings (process settings when omitted)
        **kwargs: api_key, base_url, temperature, max_tokens, top_p, timeout

    Returns:
        BaseLLM instance

    Example:
        llm = get_llm(provider="openai", model="nvidia/nemotron-nano-9b-v2",
                      base_url="https://openrouter.ai/api/v1")
    """
    settings = settings or get_llm_settings()
    provider = (provider or settings.extraction_provider).strip().lower()
    model = model or DEFAULT_MODELS.get(provider)

    base_url = kwargs.pop("base_url", None)
    api_key = kwargs.pop("api_key", None) or _resolve_api_key(settings, provider, base_url)
    if not api_key:
        raise ConfigurationError(
            f"No API key configured for provider '{provider}'",
            {"provider": provider, "base_url": base_url},
        )

    default_params = {
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
        "timeout": settings.timeout_sec,
    }
    for key, value in default_params.items():
        if key not in kwargs:
            kwargs[key] = value

    if provider == "openai":
        return OpenAILLM(
            model=model,
            api_key=api_key,
            base_url=base_url,
            **kwargs,
        )
    elif provider == "gemini":
        kwargs.pop("top_p", None)
        return GeminiLLM(
            model=model,
            api_key=api_key,
            **kwargs,
        )
    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
