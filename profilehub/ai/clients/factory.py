# profilehub/ai/clients/factory.py
# AI client factory routing a model name to its provider client

from __future__ import annotations

from typing import Callable, Type

from ..types import GenerateResult
from .base import BaseClient


# lazy client factory for OpenAI (tests can monkeypatch this)
def _get_openai_client_class() -> Type[BaseClient]:
    from .openai_client import OpenAIClient

    return OpenAIClient


# * Registry mapping provider IDs to client factory functions
CLIENT_REGISTRY: dict[str, Callable[[], Type[BaseClient]]] = {
    "openai": _get_openai_client_class,
}

# model name prefixes served by each provider
MODEL_PREFIXES: dict[str, tuple[str, ...]] = {
    "openai": ("gpt-", "o1", "o3", "o4"),
}


def provider_for_model(model: str) -> str | None:
    for provider, prefixes in MODEL_PREFIXES.items():
        if model.startswith(prefixes):
            return provider
    return None


# * Send a prompt through the client for the model's provider; label names the request in logs
def run_generate(prompt: str, model: str, label: str = "optimize") -> GenerateResult:
    provider = provider_for_model(model)
    if provider is None:
        return GenerateResult(success=False, model=model, error=f"Unsupported model: {model}")

    client_factory = CLIENT_REGISTRY.get(provider)
    if client_factory is None:
        return GenerateResult(success=False, model=model, error=f"Unknown provider: {provider}")

    client = client_factory()()
    return client.run_generate(prompt, model, label)
