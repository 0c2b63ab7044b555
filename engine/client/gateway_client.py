"""
HTTP client for the generation engine, used by the builder
"""
from typing import Any, Dict, Optional

import httpx

from logging_config import logger
from services.generation_errors import GenerationError, UpstreamError, error_for_status


class GatewayClient:
    """Calls /api/generate-website and /api/credits with the session token"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self, auth_token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        return headers

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise error_for_status(response.status_code, body.get("error"), body.get("details"))

    async def _request(self, method: str, path: str, auth_token: Optional[str], **kwargs) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.request(method, path, headers=self._headers(auth_token), **kwargs)
        except httpx.HTTPError as e:
            logger.error("Generation engine unreachable", path=path, error=str(e))
            raise UpstreamError("Could not reach the generation service", details=str(e))

        self._raise_for_error(response)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Invalid response from the generation service", details=str(e))

    async def generate(self, auth_token: Optional[str], prompt: str, model: Optional[str] = None) -> Dict[str, Any]:
        """Return the `content` object of a successful generation"""
        body = {"prompt": prompt}
        if model:
            body["model"] = model

        data = await self._request("POST", "/api/generate-website", auth_token, json=body)
        if not data.get("success") or not isinstance(data.get("content"), dict):
            raise GenerationError(data.get("error") or "Generation failed")
        return data["content"]

    async def fetch_credits(self, auth_token: Optional[str]) -> int:
        data = await self._request("GET", "/api/credits", auth_token)
        return int(data["daily_credits"])
