"""Durable set of banned addresses."""

from typing import Any, Optional, Set

from rateguard.app.core.redis import decode, require_client, store_errors

from .models import ProtectConfig


class BanSet:
    """Block list stored as a Redis set under {prefix}:block-list.

    Entries never expire. Nothing in this package removes them; clearing the
    list is left to administrators.
    """

    def __init__(self, redis_client: Optional[Any], config: ProtectConfig) -> None:
        self._redis = redis_client
        self._config = config

    async def add(self, address: str) -> bool:
        """Add an address to the block list.

        Returns:
            True if the address was not listed before. Adding twice is harmless.
        """
        redis = require_client(self._redis)
        async with store_errors("sadd"):
            added = await redis.sadd(self._config.block_list_key, address)
        return int(added) > 0

    async def contains(self, address: str) -> bool:
        redis = require_client(self._redis)
        async with store_errors("sismember"):
            member = await redis.sismember(self._config.block_list_key, address)
        return bool(member)

    async def list_all(self) -> Set[str]:
        """Return every banned address."""
        redis = require_client(self._redis)
        async with store_errors("smembers"):
            members = await redis.smembers(self._config.block_list_key)
        return {decode(m) for m in members or ()}
