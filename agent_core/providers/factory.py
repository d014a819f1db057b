"""Provider factory helpers."""

from __future__ import annotations

import logging
from typing import List

from .base import BaseProvider
from .chain import ProviderChain, ProviderStrategy

logger = logging.getLogger("ProviderFactory")


def create_provider(settings) -> BaseProvider:
    """Instantiate the configured provider implementation."""
    provider_name = (getattr(settings, "llm_provider", "ollama") or "ollama").lower()
    if provider_name == "openrouter":
        from .openrouter import OpenRouterProvider

        return OpenRouterProvider.from_settings(settings)

    from .ollama import OllamaProvider

    return OllamaProvider.from_settings(settings)


def create_provider_chain(settings) -> ProviderChain:
    """
    Build a chain from settings.

    The configured provider always comes first. Multi-provider strategies
    append the other backend when it is usable (OpenRouter needs a key).
    """
    strategy = ProviderStrategy(getattr(settings, "provider_strategy", "single"))
    providers: List[BaseProvider] = [create_provider(settings)]

    if strategy != ProviderStrategy.SINGLE:
        if settings.llm_provider == "ollama" and settings.openrouter_api_key:
            from .openrouter import OpenRouterProvider

            providers.append(OpenRouterProvider.from_settings(settings))
        elif settings.llm_provider == "openrouter":
            from .ollama import OllamaProvider

            providers.append(OllamaProvider.from_settings(settings))

    logger.info(
        "Provider chain: strategy=%s providers=%s",
        strategy.value,
        [type(p).__name__ for p in providers],
    )
    return ProviderChain(providers, strategy)
