"""Pytest configuration and shared fixtures."""

import json
import os

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")
os.environ.setdefault("SUPABASE_URL", "https://auth.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

import fakeredis
import httpx
import pytest

from services.auth_client import SupabaseAuthClient
from services.credits_ledger import CreditsLedger
from services.generation_gateway import GenerationGateway
from services.store_generator import OpenRouterStoreGenerator

AUTH_URL = "https://auth.test"
LLM_URL = "https://llm.test/v1/chat/completions"
VALID_TOKEN = "valid-token"
ACCOUNT_ID = "user-123"


def make_store_reply(store_name="Acme", product_count=3):
    """A well-formed model reply as a Python dict."""
    return {
        "storeName": store_name,
        "products": [
            {
                "id": i,
                "name": f"Product {i}",
                "description": f"A carefully made product number {i}",
                "price": 10.5 * i,
                "images": {},
            }
            for i in range(1, product_count + 1)
        ],
        "customization": {
            "primaryColor": "#1a1a2e",
            "accentColor": "#e94560",
            "font": "modern",
            "layout": "minimal",
        },
        "suggestions": ["Add customer reviews", "Offer free shipping", "Add a newsletter"],
    }


class FakeLLM:
    """Records chat completion calls and answers with a canned reply."""

    def __init__(self, content=None, status_code=200, body=None):
        self.content = content if content is not None else json.dumps(make_store_reply())
        self.status_code = status_code
        self.body = body
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status_code != 200:
            return httpx.Response(self.status_code, text=self.body or "upstream failure")
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": self.content}}]},
        )

    @property
    def calls(self):
        return len(self.requests)

    def generator(self):
        return OpenRouterStoreGenerator(
            api_key="test-key",
            api_url=LLM_URL,
            transport=httpx.MockTransport(self.handler),
        )


def auth_handler(request: httpx.Request) -> httpx.Response:
    if request.headers.get("authorization") == f"Bearer {VALID_TOKEN}":
        return httpx.Response(200, json={"id": ACCOUNT_ID, "email": "owner@example.com"})
    return httpx.Response(401, json={"msg": "invalid JWT"})


@pytest.fixture
def redis_client():
    """In-memory Redis standing in for the ledger store."""
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def ledger(redis_client):
    return CreditsLedger(redis_client, default_credits=10, key_prefix="user_credits:")


@pytest.fixture
def auth_client():
    return SupabaseAuthClient(
        base_url=AUTH_URL,
        anon_key="test-anon-key",
        transport=httpx.MockTransport(auth_handler),
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def gateway(auth_client, ledger, fake_llm):
    return GenerationGateway(
        auth_client=auth_client,
        ledger=ledger,
        generator=fake_llm.generator(),
        default_model="google/gemini-2.5-flash",
    )
