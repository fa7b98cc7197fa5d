# profilehub/ai/types.py
# Outcome of one optimization request sent to a model

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class GenerateResult:
    success: bool
    data: dict[str, Any] | None = None  # the parsed reply object
    raw_text: str = ""  # reply as the provider sent it, kept for failed parses
    error: str = ""
    model: str = ""
    duration_ms: float | None = None  # None when no request was sent
