"""Shared fixtures: an in-memory Redis double and engines built on it."""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from rateguard.app.services.protect import ProtectConfig, VerificationEngine


@pytest.fixture
def mock_redis():
    """Create a mock Redis client for testing.

    Supports the commands the services issue: GET, EVAL (the increment
    script), SADD, SISMEMBER and SMEMBERS. Values are returned as str, as a
    client created with decode_responses=True would.
    """
    redis = MagicMock()
    redis.data = {}
    redis.sets = {}
    redis.ttls = {}

    def _purge_if_expired(key):
        if key in redis.ttls and redis.ttls[key] <= time.time():
            redis.data.pop(key, None)
            redis.ttls.pop(key, None)

    async def mock_get(key):
        _purge_if_expired(key)
        return redis.data.get(key)

    async def mock_eval(script, num_keys, *args):
        """Mock Redis Lua script execution for INCREMENT_AND_REFRESH_SCRIPT.

        - KEYS[1]: counter key
        - ARGV[1]: ttl
        """
        keys, argv = args[:num_keys], args[num_keys:]
        counter_key = keys[0]
        ttl = int(argv[0])

        _purge_if_expired(counter_key)
        count = int(redis.data.get(counter_key, "0")) + 1
        redis.data[counter_key] = str(count)
        redis.ttls[counter_key] = time.time() + ttl
        return count

    async def mock_sadd(key, *members):
        members_set = redis.sets.setdefault(key, set())
        added = 0
        for member in members:
            if member not in members_set:
                members_set.add(member)
                added += 1
        return added

    async def mock_sismember(key, member):
        return 1 if member in redis.sets.get(key, set()) else 0

    async def mock_smembers(key):
        return set(redis.sets.get(key, set()))

    redis.get = mock_get
    redis.eval = mock_eval
    redis.sadd = mock_sadd
    redis.sismember = mock_sismember
    redis.smembers = mock_smembers
    redis.aclose = AsyncMock()

    return redis


@pytest.fixture
def small_config():
    """Small thresholds so boundary tests stay short."""
    return ProtectConfig(ttl=10, max_requests=5, ban_limit=10, prefix="test-guard")


@pytest.fixture
def engine(mock_redis, small_config):
    return VerificationEngine(mock_redis, small_config)


@pytest.fixture
def default_engine(mock_redis):
    """Engine with the stock ttl=10, max_requests=200, ban_limit=1000 policy."""
    return VerificationEngine(mock_redis, ProtectConfig())
