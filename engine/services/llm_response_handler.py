"""
LLM Response Handler - turn raw model output into a validated store
"""
import json
import re
from typing import Any

from pydantic import ValidationError

from logging_config import logger
from services.generation_errors import MalformedModelResponseError
from services.store_schema import GenerationResult

_OPENING_FENCE_RE = re.compile(r"\A```(?:json|JSON)?[ \t]*\n?")


def strip_code_fences(content: str) -> str:
    """Remove a markdown code fence wrapping the reply; inner backticks are kept"""
    content = content.strip()
    content = _OPENING_FENCE_RE.sub("", content, count=1)
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors()[:5]:
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location or '<root>'}: {error.get('msg')}")
    return "; ".join(parts)


def parse_generation_result(content: Any) -> GenerationResult:
    """
    Parse the model's reply into a GenerationResult.

    Args:
        content: message content returned by the chat completion API

    Returns:
        The fully validated result

    Raises:
        MalformedModelResponseError: not JSON, not an object, or the
            object does not match the store schema
    """
    if not isinstance(content, str) or not content.strip():
        raise MalformedModelResponseError(details="Empty response from AI model")

    cleaned = strip_code_fences(content)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("AI reply is not valid JSON", error=str(e), preview=cleaned[:200])
        raise MalformedModelResponseError(details=str(e))

    if not isinstance(data, dict):
        raise MalformedModelResponseError(details="Invalid response structure")
    if not data.get("storeName") or not isinstance(data.get("products"), list):
        raise MalformedModelResponseError(details="Invalid response structure")

    try:
        result = GenerationResult.model_validate(data)
    except ValidationError as e:
        details = _describe_validation_error(e)
        logger.warning("AI reply failed schema validation", details=details)
        raise MalformedModelResponseError(details=details)

    logger.info(
        "AI reply parsed",
        store_name=result.store_name,
        products=len(result.products),
        suggestions=len(result.suggestions)
    )
    return result
