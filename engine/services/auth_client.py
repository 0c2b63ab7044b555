"""
Bearer token resolution against the hosted auth service (Supabase GoTrue)
"""
from typing import Optional

import httpx

from config import settings
from logging_config import logger
from services.generation_errors import UnauthenticatedError, UpstreamError


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Pull the token out of an `Authorization: Bearer ...` header"""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class SupabaseAuthClient:
    """Resolves access tokens to account ids"""

    def __init__(
        self,
        base_url: str = None,
        anon_key: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.SUPABASE_ANON_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS
        self.transport = transport

    async def resolve_token(self, token: Optional[str]) -> str:
        """
        Exchange an access token for the account id it belongs to.

        Raises:
            UnauthenticatedError: missing, expired or rejected token
            UpstreamError: the auth service could not be reached
        """
        if not token:
            raise UnauthenticatedError()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/auth/v1/user",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "apikey": self.anon_key,
                    }
                )
        except httpx.HTTPError as e:
            logger.error("Auth service unreachable", error=str(e))
            raise UpstreamError("Authentication service unavailable", details=str(e))

        if response.status_code in (401, 403):
            raise UnauthenticatedError()
        if response.status_code != 200:
            logger.error("Auth service error", status=response.status_code)
            raise UpstreamError(
                "Authentication service unavailable",
                upstream_status=response.status_code
            )

        try:
            account_id = response.json().get("id")
        except ValueError:
            account_id = None

        if not account_id:
            raise UnauthenticatedError()

        return str(account_id)
