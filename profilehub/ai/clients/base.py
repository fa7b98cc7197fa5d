# profilehub/ai/clients/base.py
# Base optimization client: credential check, one timed model call & reply parsing

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import ClassVar

from ..types import GenerateResult
from ..utils import parse_reply
from ...config.env_validator import get_missing_env_message, validate_provider_env
from ...core.exceptions import HubError
from ...core.verbose import vlog_ai_request, vlog_ai_response, vlog_dev


class BaseClient(ABC):
    """Sends one optimization prompt to a provider.

    ``run_generate`` never raises: a missing key, a provider failure and an
    unreadable reply all come back as a failed ``GenerateResult`` whose error
    is ready to show. Subclasses only implement ``send``.
    """

    provider_name: ClassVar[str] = ""

    def run_generate(self, prompt: str, model: str, label: str = "optimize") -> GenerateResult:
        if not validate_provider_env(self.provider_name):
            result = GenerateResult(
                success=False, model=model, error=get_missing_env_message(self.provider_name)
            )
            vlog_ai_response(self.provider_name, label, result)
            return result

        vlog_ai_request(self.provider_name, model, label, len(prompt))
        started = time.perf_counter()
        raw_text = ""
        try:
            raw_text = self.send(prompt, model)
            result = GenerateResult(
                success=True, data=parse_reply(raw_text), raw_text=raw_text, model=model
            )
        except HubError as e:
            result = GenerateResult(success=False, raw_text=raw_text, model=model, error=str(e))
        except Exception as e:
            result = GenerateResult(
                success=False,
                raw_text=raw_text,
                model=model,
                error=f"Unexpected error from {self.provider_name}: {e}",
            )
        result.duration_ms = (time.perf_counter() - started) * 1000
        vlog_ai_response(self.provider_name, label, result)
        if raw_text:
            vlog_dev("AI", f"{label}: raw reply", raw_text[:2000])
        return result

    # * Return the provider's reply text; raise AIError (or a subclass) on failure
    @abstractmethod
    def send(self, prompt: str, model: str) -> str: ...
