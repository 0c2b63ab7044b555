"""Tests for the Redis credits ledger."""

import threading
from unittest.mock import MagicMock

import fakeredis
import pytest
import redis

from config import get_ledger_redis_client, settings
from routers.dependencies import get_credits_ledger
from services.credits_ledger import CreditsLedger
from services.generation_errors import InsufficientCreditsError, LedgerUnavailableError


class TestCheckAndDeduct:
    """Atomic check-then-decrement behaviour."""

    def test_first_use_initialises_to_ten_then_deducts(self, ledger, redis_client):
        assert redis_client.get("user_credits:new-user") is None

        remaining = ledger.check_and_deduct("new-user")

        assert remaining == 9
        assert redis_client.get("user_credits:new-user") == "9"

    def test_existing_balance_is_decremented_by_one(self, ledger, redis_client):
        redis_client.set("user_credits:acct", 5)

        assert ledger.check_and_deduct("acct") == 4
        assert ledger.check_and_deduct("acct") == 3
        assert redis_client.get("user_credits:acct") == "3"

    def test_zero_balance_is_rejected_without_mutation(self, ledger, redis_client):
        redis_client.set("user_credits:broke", 0)

        with pytest.raises(InsufficientCreditsError) as exc:
            ledger.check_and_deduct("broke")

        assert exc.value.status_code == 402
        assert exc.value.message == "Insufficient credits"
        assert redis_client.get("user_credits:broke") == "0"

    def test_last_credit_can_be_spent_once(self, ledger, redis_client):
        redis_client.set("user_credits:acct", 1)

        assert ledger.check_and_deduct("acct") == 0
        with pytest.raises(InsufficientCreditsError):
            ledger.check_and_deduct("acct")
        assert redis_client.get("user_credits:acct") == "0"

    def test_zero_default_creates_entry_and_rejects(self, redis_client):
        ledger = CreditsLedger(redis_client, default_credits=0, key_prefix="user_credits:")

        with pytest.raises(InsufficientCreditsError):
            ledger.check_and_deduct("acct")
        assert redis_client.get("user_credits:acct") == "0"

    def test_accounts_are_independent(self, ledger, redis_client):
        redis_client.set("user_credits:a", 0)

        assert ledger.check_and_deduct("b") == 9
        assert redis_client.get("user_credits:a") == "0"

    def test_concurrent_requests_cannot_both_spend_last_credit(self):
        server = fakeredis.FakeServer()
        fakeredis.FakeRedis(server=server, decode_responses=True).set("user_credits:acct", 1)

        ledgers = [
            CreditsLedger(fakeredis.FakeRedis(server=server, decode_responses=True),
                          default_credits=10, key_prefix="user_credits:")
            for _ in range(2)
        ]
        barrier = threading.Barrier(2)
        outcomes = []

        def spend(ledger):
            barrier.wait()
            try:
                outcomes.append(ledger.check_and_deduct("acct"))
            except InsufficientCreditsError as e:
                outcomes.append(e)

        threads = [threading.Thread(target=spend, args=(ledger,)) for ledger in ledgers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        successes = [o for o in outcomes if o == 0]
        rejections = [o for o in outcomes if isinstance(o, InsufficientCreditsError)]
        assert len(successes) == 1
        assert len(rejections) == 1
        assert fakeredis.FakeRedis(server=server, decode_responses=True).get("user_credits:acct") == "0"


class TestLedgerFailures:
    """Persistence failures surface as LedgerUnavailableError."""

    def test_missing_client(self):
        ledger = CreditsLedger(None)

        with pytest.raises(LedgerUnavailableError) as exc:
            ledger.check_and_deduct("acct")
        assert exc.value.status_code == 500

    def test_redis_error_during_deduction(self):
        client = MagicMock()
        client.transaction.side_effect = redis.ConnectionError("connection refused")
        ledger = CreditsLedger(client, default_credits=10, key_prefix="user_credits:")

        with pytest.raises(LedgerUnavailableError) as exc:
            ledger.check_and_deduct("acct")
        assert "deduct" in exc.value.message

    def test_redis_error_during_balance_lookup(self):
        client = MagicMock()
        client.get.side_effect = redis.TimeoutError("timed out")
        ledger = CreditsLedger(client)

        with pytest.raises(LedgerUnavailableError):
            ledger.get_balance("acct")


class TestGetBalance:
    def test_unknown_account_reports_default_without_creating(self, ledger, redis_client):
        assert ledger.get_balance("nobody") == 10
        assert redis_client.get("user_credits:nobody") is None

    def test_reports_stored_balance(self, ledger, redis_client):
        redis_client.set("user_credits:acct", 3)
        assert ledger.get_balance("acct") == 3


class TestSharedLedgerClient:
    """The request dependency reuses one lazily connecting client."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        get_ledger_redis_client.cache_clear()
        yield
        get_ledger_redis_client.cache_clear()

    def test_client_is_built_once_without_ping(self, monkeypatch):
        fake_client = MagicMock()
        from_url = MagicMock(return_value=fake_client)
        monkeypatch.setattr(redis, "from_url", from_url)
        monkeypatch.setattr(settings, "REDIS_ENABLED", True)

        first = get_credits_ledger()
        second = get_credits_ledger()

        assert first.redis is fake_client
        assert second.redis is fake_client
        from_url.assert_called_once()
        fake_client.ping.assert_not_called()

    def test_disabled_redis_gives_unavailable_ledger(self, monkeypatch):
        monkeypatch.setattr(settings, "REDIS_ENABLED", False)

        with pytest.raises(LedgerUnavailableError):
            get_credits_ledger().check_and_deduct("acct")
