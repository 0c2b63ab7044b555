"""
Credits ledger backed by Redis.

One integer per account under CREDITS_KEY_PREFIX + account id. The check,
lazy initialisation and decrement run inside a single WATCH/MULTI/EXEC
transaction so concurrent requests for the same account cannot both spend
the last credit.
"""
from typing import Optional

import redis

from config import settings
from logging_config import logger
from services.generation_errors import InsufficientCreditsError, LedgerUnavailableError


class CreditsLedger:
    """Per-account daily generation quota"""

    def __init__(
        self,
        redis_client: Optional[redis.Redis],
        default_credits: int = None,
        key_prefix: str = None
    ):
        self.redis = redis_client
        self.default_credits = (
            settings.DEFAULT_DAILY_CREDITS if default_credits is None else default_credits
        )
        self.key_prefix = key_prefix or settings.CREDITS_KEY_PREFIX

    def _key(self, account_id: str) -> str:
        return f"{self.key_prefix}{account_id}"

    def _require_client(self) -> redis.Redis:
        if self.redis is None:
            raise LedgerUnavailableError()
        return self.redis

    def get_balance(self, account_id: str) -> int:
        """Remaining credits; accounts without an entry report the default"""
        client = self._require_client()
        try:
            raw = client.get(self._key(account_id))
        except redis.RedisError as e:
            logger.error("Credits lookup failed", account_id=account_id, error=str(e))
            raise LedgerUnavailableError()

        return self.default_credits if raw is None else int(raw)

    def check_and_deduct(self, account_id: str) -> int:
        """
        Spend one credit for a generation attempt.

        Args:
            account_id: id resolved from the caller's auth token

        Returns:
            Credits remaining after the deduction

        Raises:
            InsufficientCreditsError: balance is zero, nothing was written
            LedgerUnavailableError: Redis lookup or write failed
        """
        client = self._require_client()
        key = self._key(account_id)

        def deduct(pipe) -> Optional[int]:
            raw = pipe.get(key)
            current = self.default_credits if raw is None else int(raw)

            if current <= 0:
                if raw is None:
                    pipe.multi()
                    pipe.set(key, current)
                return None

            pipe.multi()
            pipe.set(key, current - 1)
            return current - 1

        try:
            remaining = client.transaction(deduct, key, value_from_callable=True)
        except redis.RedisError as e:
            logger.error("Credits deduction failed", account_id=account_id, error=str(e))
            raise LedgerUnavailableError("Failed to deduct credit. Please try again.")

        if remaining is None:
            logger.warning("Insufficient credits", account_id=account_id)
            raise InsufficientCreditsError()

        logger.info("Credit deducted", account_id=account_id, remaining=remaining)
        return remaining
