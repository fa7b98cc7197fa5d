# profilehub/ai/utils.py
# Reply helpers: strip fences & reasoning blocks, then read the JSON object a model returns

import json
import re
from typing import Any

from ..core.exceptions import JSONParsingError

_THINKING = re.compile(r"<think>.*?</think>\s*(.*)", re.DOTALL)
_FENCE = re.compile(r"^```(?:json)?\s*\n(.*?)\n```\s*$", re.DOTALL)


def strip_markdown_code_blocks(text: str) -> str:
    text = text.strip()
    thinking = _THINKING.match(text)
    if thinking:
        text = thinking.group(1).strip()
    fenced = _FENCE.match(text)
    return fenced.group(1) if fenced else text


# * Read the reply object; raises JSONParsingError for anything but a JSON object
def parse_reply(text: str) -> dict[str, Any]:
    body = strip_markdown_code_blocks(text)
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        preview = body[:200] + ("..." if len(body) > 200 else "")
        raise JSONParsingError(f"Model reply is not valid JSON ({e.msg}): {preview}") from e
    if not isinstance(data, dict):
        raise JSONParsingError(f"Model reply must be a JSON object, got {type(data).__name__}")
    return data
