"""
Store generation through an OpenAI-compatible chat completions API.
"""
from typing import Dict, List

import httpx

from config import settings
from logging_config import logger
from services.generation_errors import RateLimitedError, UpstreamError


# Models selectable in the builder, in display order
SUPPORTED_MODELS: Dict[str, Dict[str, str]] = {
    "google/gemini-2.5-flash": {"name": "Gemini Flash (Recommended)", "tier": "free"},
    "google/gemini-2.5-pro": {"name": "Gemini Pro (Best Quality)", "tier": "free"},
    "google/gemini-2.5-flash-lite": {"name": "Gemini Lite (Fastest)", "tier": "free"},
    "openai/gpt-5-nano": {"name": "GPT-5 Nano", "tier": "paid"},
    "openai/gpt-5-mini": {"name": "GPT-5 Mini", "tier": "paid"},
    "openai/gpt-5": {"name": "GPT-5 (Premium)", "tier": "paid"},
}


def get_available_models() -> List[Dict[str, str]]:
    """List the selectable models for the builder UI"""
    return [
        {"id": model_id, "name": info["name"], "tier": info["tier"]}
        for model_id, info in SUPPORTED_MODELS.items()
    ]


class OpenRouterStoreGenerator:
    """Single-shot chat completion client, no retries and no streaming"""

    def __init__(
        self,
        api_key: str = None,
        api_url: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None
    ):
        self.api_key = api_key or settings.OPENROUTER_API_KEY
        self.api_url = api_url or settings.LLM_API_URL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self.transport = transport

    async def complete(self, model: str, system_prompt: str, user_prompt: str) -> str:
        """
        Send one system + user exchange and return the assistant text.

        Raises:
            RateLimitedError: provider answered 429
            UpstreamError: any other failure, including timeouts
        """
        if not self.api_key:
            raise UpstreamError("OPENROUTER_API_KEY not configured")

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": settings.TEMPERATURE,
        }

        logger.info("Calling AI model", model=model, prompt_length=len(user_prompt))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.api_url,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                        "X-Title": "PromptSite",
                    },
                    json=payload
                )
        except httpx.TimeoutException as e:
            logger.error("AI model request timed out", model=model, timeout=self.timeout)
            raise UpstreamError("AI model request timed out", details=str(e))
        except httpx.HTTPError as e:
            logger.error("AI model request failed", model=model, error=str(e))
            raise UpstreamError(details=str(e))

        if response.status_code == 429:
            logger.warning("AI model rate limited", model=model)
            raise RateLimitedError()
        if response.status_code != 200:
            logger.error(
                "AI model returned an error",
                model=model,
                status=response.status_code,
                body=response.text[:500]
            )
            raise UpstreamError(upstream_status=response.status_code, details=response.text[:500] or None)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected AI response envelope", model=model, error=str(e))
            raise UpstreamError("Unexpected response from AI provider", details=str(e))

        logger.info("AI model responded", model=model, content_length=len(content or ""))
        return content
