"""Helpers for pulling structured data out of free-form LLM responses."""

import json
import re
from typing import Any

from focusflow.core.errors import GenerationError
from focusflow.core.logging import get_logger

logger = get_logger(__name__)

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CODE_FENCE = re.compile(r"```(?:json|javascript|js|text)?\s*\n(.*?)\n\s*```", re.DOTALL | re.IGNORECASE)


def _loads_object(text: str) -> dict[str, Any] | None:
    """Parse ``text`` as a JSON object, tolerating trailing commas."""
    try:
        value = json.loads(_TRAILING_COMMA.sub(r"\1", text.strip()))
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _outermost_braces(text: str) -> str | None:
    """Slice from the first ``{`` to the last ``}``.

    Models sometimes wrap the object in prose; the roadmap payload is a single
    object so the widest brace span is the right candidate.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json_object(content: str | None) -> dict[str, Any]:
    """Extract a JSON object from an LLM response.

    Tries, in order: the whole response, the first fenced code block, and the
    outermost brace span.

    Raises:
        GenerationError: If the response is empty or holds no JSON object
    """
    if not content or not content.strip():
        raise GenerationError("Empty LLM response")

    candidates = [content]
    fenced = _CODE_FENCE.search(content)
    if fenced:
        candidates.append(fenced.group(1))
    braces = _outermost_braces(content)
    if braces:
        candidates.append(braces)

    for candidate in candidates:
        result = _loads_object(candidate)
        if result is not None:
            return result

    logger.error("Could not extract JSON from LLM response", content_preview=content[:200])
    raise GenerationError("Could not extract JSON from LLM response")
