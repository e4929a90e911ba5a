"""
JSON helpers for LLM responses.
Completion providers often wrap JSON in Markdown code fences.
"""
import json
import re
from typing import Any, Dict

from manova.errors import MalformedProviderResponse


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing fence."""
    if not text:
        return ""

    cleaned = text.strip()

    if "```json" in cleaned:
        cleaned = cleaned.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in cleaned:
        cleaned = cleaned.split("```", 1)[1].split("```", 1)[0]

    return cleaned.strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse an LLM reply into a JSON object.

    Falls back to the first {...} span when the model added prose around it.

    Raises:
        MalformedProviderResponse: if no JSON object can be recovered
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise MalformedProviderResponse("Empty response from provider")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", cleaned, re.S)
        if not match:
            raise MalformedProviderResponse("Response is not valid JSON", {"raw": cleaned[:200]})
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise MalformedProviderResponse(f"Response is not valid JSON: {e}", {"raw": cleaned[:200]})

    if not isinstance(parsed, dict):
        raise MalformedProviderResponse("Expected a JSON object", {"type": type(parsed).__name__})

    return parsed
