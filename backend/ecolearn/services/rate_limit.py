from __future__ import annotations
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_tz
from typing import Callable
from ecolearn.config import settings
from ecolearn.services.kv import KeyValueStore, get_kv_store

WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


def _utcnow() -> datetime:
    return datetime.now(dt_tz.utc)


class ChatRateLimiter:
    """
    Per-user daily message quota. The 24h window starts at the first message
    after the previous window expired, not at midnight. Advisory only: the
    counter lives in the key-value store and is not a security boundary.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limit: int,
        window: timedelta = WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.limit = limit
        self.window = window
        self.clock = clock

    @staticmethod
    def _key(user_id: str) -> str:
        return f"chat:ratelimit:{user_id}"

    async def check_and_consume(self, user_id: str) -> RateLimitResult:
        key = self._key(user_id)
        async with self.store.lock(key):
            now = self.clock()
            raw = await self.store.get(key)
            if raw is None:
                count, reset_at = 0, now + self.window
            else:
                rec = json.loads(raw)
                count, reset_at = int(rec["count"]), datetime.fromisoformat(rec["reset_at"])
            if now > reset_at:
                count, reset_at = 0, now + self.window

            if count >= self.limit:
                result = RateLimitResult(allowed=False, remaining=0)
            else:
                count += 1
                result = RateLimitResult(allowed=True, remaining=self.limit - count)

            ttl = max(1, int((reset_at - now).total_seconds()) + 1)
            await self.store.set(key, json.dumps({"count": count, "reset_at": reset_at.isoformat()}), ttl_seconds=ttl)
            return result


def get_rate_limiter() -> ChatRateLimiter:
    return ChatRateLimiter(get_kv_store(), settings.chat_daily_message_limit)
