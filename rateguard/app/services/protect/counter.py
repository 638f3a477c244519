"""Per-address request counters with a sliding expiry."""

from typing import Any, Optional

from rateguard.app.core.logging import get_logger
from rateguard.app.core.redis import decode, require_client, store_errors

from .models import ProtectConfig
from .redis_lua import INCREMENT_AND_REFRESH_SCRIPT

logger = get_logger(__name__)


class CounterStore:
    """Request counters stored in Redis.

    Redis key format:
    - {prefix}:{address} - request count, expires ttl seconds after the
      last increment
    """

    def __init__(self, redis_client: Optional[Any], config: ProtectConfig) -> None:
        self._redis = redis_client
        self._config = config

    async def increment_and_refresh(self, address: str) -> int:
        """Count one request from the address and refresh its window.

        Args:
            address: Origin address (not validated)

        Returns:
            The counter value after the increment

        Raises:
            NotInitializedError: No Redis client was provided
            StoreUnavailableError: Redis failed
        """
        redis = require_client(self._redis)
        key = self._config.counter_key(address)
        async with store_errors("increment"):
            count = await redis.eval(
                INCREMENT_AND_REFRESH_SCRIPT,
                1,  # Number of keys
                key,  # KEYS[1]
                self._config.ttl,  # ARGV[1]
            )
        return int(decode(count))

    async def current_count(self, address: str) -> int:
        """Get the current counter value without changing it.

        Returns:
            The counter value, or 0 if absent or expired
        """
        redis = require_client(self._redis)
        async with store_errors("get"):
            value = await redis.get(self._config.counter_key(address))
        if value is None:
            return 0
        return int(decode(value))
