"""Request verification: sliding window counting and ban promotion.

Each verify() call costs one Redis round trip for banned addresses and two
or three otherwise. The sequence of ban check, increment and promotion is
not a transaction: concurrent requests crossing ban_limit together may each
add the address to the block list, which is idempotent. Increments are
never lost because INCR is atomic.
"""

from typing import Any, Optional, Set

from rateguard.app.core.config import settings
from rateguard.app.core.logging import get_log_context, get_logger
from rateguard.app.core.networks import BannedNetworks
from rateguard.app.core.redis import require_client

from .ban_set import BanSet
from .counter import CounterStore
from .models import (
    BANNED_RESULT,
    LIMITED_RESULT,
    SAFE_RESULT,
    ProtectConfig,
    VerificationResult,
)

logger = get_logger(__name__)


class VerificationEngine:
    """Decides whether a request from an address is safe, limited or banned.

    The engine keeps no state of its own besides configuration and the
    injected Redis client, so any number of engines, in any number of
    processes, can share one Redis.

    Verdicts:
    - BANNED (418): the address is on the block list, or this request took
      its count above ban_limit (the address is added to the list)
    - LIMITED (429): the count is above max_requests
    - SAFE (200): otherwise

    Store failures are raised as StoreUnavailableError. Whether to let the
    request through or reject it in that case is up to the caller.
    """

    def __init__(
        self,
        redis_client: Optional[Any],
        config: Optional[ProtectConfig] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            redis_client: Connected redis.asyncio client (or compatible)
            config: Verification policy (defaults to values from settings)
        """
        self._redis = redis_client
        self._config = config or ProtectConfig.from_settings(settings)
        self._counter = CounterStore(redis_client, self._config)
        self._ban_set = BanSet(redis_client, self._config)

        if self._config.ban_limit < self._config.max_requests:
            logger.warning(
                f"ban_limit ({self._config.ban_limit}) is below max_requests "
                f"({self._config.max_requests}); addresses will be banned "
                "before they are ever limited"
            )
        logger.info(
            f"Verification engine ready: ttl={self._config.ttl}s "
            f"max_requests={self._config.max_requests} "
            f"ban_limit={self._config.ban_limit} prefix={self._config.prefix!r}"
        )

    @property
    def config(self) -> ProtectConfig:
        return self._config

    @property
    def counter(self) -> CounterStore:
        return self._counter

    @property
    def ban_set(self) -> BanSet:
        return self._ban_set

    def _ensure_ready(self) -> None:
        require_client(self._redis)

    async def verify(self, address: str) -> VerificationResult:
        """Count a request from the address and return its verdict.

        Banned addresses short-circuit: their requests are not counted.

        Args:
            address: Resolved origin address

        Returns:
            VerificationResult with status and HTTP code

        Raises:
            NotInitializedError: The engine has no Redis client
            StoreUnavailableError: Redis failed
        """
        self._ensure_ready()

        if await self._ban_set.contains(address):
            return BANNED_RESULT

        count = await self._counter.increment_and_refresh(address)

        if count > self._config.ban_limit:
            if await self._ban_set.add(address):
                logger.warning(
                    f"Address promoted to block list after {count} requests",
                    extra=get_log_context(
                        client_ip=address,
                        status=BANNED_RESULT.status.name,
                        http_code=BANNED_RESULT.http_code,
                    ),
                )
            return BANNED_RESULT

        if count > self._config.max_requests:
            return LIMITED_RESULT

        return SAFE_RESULT

    async def is_limited(self, address: str) -> bool:
        """Check whether the address's current count exceeds max_requests.

        Read-only: the request is not counted.
        """
        self._ensure_ready()
        return await self._counter.current_count(address) > self._config.max_requests

    async def banned_addresses(self) -> Set[str]:
        """Snapshot of the block list as stored."""
        self._ensure_ready()
        return await self._ban_set.list_all()

    async def banned_networks(self) -> BannedNetworks:
        """Range-aware view of the block list, built fresh on every call."""
        return BannedNetworks(await self.banned_addresses())

    async def is_banned(self, address: str) -> bool:
        """Check whether the address is covered by the block list.

        Unlike verify(), this honours CIDR ranges written to the list by
        administrators.
        """
        networks = await self.banned_networks()
        return networks.includes(address)

    async def close(self) -> None:
        """Close the Redis client and detach it from the engine.

        Every operation afterwards raises NotInitializedError.
        """
        redis, self._redis = self._redis, None
        self._counter = CounterStore(None, self._config)
        self._ban_set = BanSet(None, self._config)
        if redis is not None:
            try:
                await redis.aclose()
            except Exception as e:
                logger.warning(f"Error closing Redis connection: {e}")
