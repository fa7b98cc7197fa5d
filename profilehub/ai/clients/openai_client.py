# profilehub/ai/clients/openai_client.py
# OpenAI Responses API client for optimization requests

from __future__ import annotations

from typing import Any

from .base import BaseClient
from ...config.settings import settings_manager
from ...core.exceptions import AIError, ProviderError, RateLimitError


# gpt-5 family rejects the temperature parameter
def _request_options(model: str) -> dict[str, Any]:
    if model.startswith("gpt-5"):
        return {}
    return {"temperature": settings_manager.load().temperature}


def _sdk_error(openai_module: Any, name: str) -> type | None:
    # SDK exception classes are missing when the module is mocked
    found = getattr(openai_module, name, None)
    return found if isinstance(found, type) else None


# * Map an SDK exception onto the hub's AI errors
def _as_ai_error(openai_module: Any, error: Exception) -> AIError:
    rate_limited = _sdk_error(openai_module, "RateLimitError")
    if rate_limited and isinstance(error, rate_limited):
        return RateLimitError(
            f"OpenAI rate limit reached; try the optimization again later ({error})",
            provider="openai",
            retry_after=getattr(error, "retry_after", None),
        )
    status_error = _sdk_error(openai_module, "APIStatusError")
    if status_error and isinstance(error, status_error):
        status = getattr(error, "status_code", "unknown")
        return ProviderError(
            f"OpenAI rejected the request ({status}): {getattr(error, 'message', error)}",
            provider="openai",
        )
    connection_error = _sdk_error(openai_module, "APIConnectionError")
    if connection_error and isinstance(error, connection_error):
        return ProviderError(f"Could not reach OpenAI: {error}", provider="openai")
    return AIError(f"OpenAI API error: {error}")


class OpenAIClient(BaseClient):

    provider_name = "openai"

    def send(self, prompt: str, model: str) -> str:
        import openai

        client = openai.OpenAI()
        try:
            response = client.responses.create(model=model, input=prompt, **_request_options(model))
        except Exception as e:
            raise _as_ai_error(openai, e) from e
        return response.output_text
