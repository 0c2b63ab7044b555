"""
Shared FastAPI dependencies: collaborators and the request limiter
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import settings, get_ledger_redis_client
from services.auth_client import SupabaseAuthClient
from services.credits_ledger import CreditsLedger
from services.generation_gateway import GenerationGateway
from services.store_generator import OpenRouterStoreGenerator

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def get_auth_client() -> SupabaseAuthClient:
    return SupabaseAuthClient()


def get_credits_ledger() -> CreditsLedger:
    return CreditsLedger(get_ledger_redis_client())


def get_generation_gateway() -> GenerationGateway:
    return GenerationGateway(
        auth_client=get_auth_client(),
        ledger=get_credits_ledger(),
        generator=OpenRouterStoreGenerator()
    )
