"""Tests for CounterStore."""

import time
from unittest.mock import AsyncMock

import pytest
import redis

from rateguard.app.exceptions import (
    NotInitializedError,
    ReservedAddressError,
    StoreUnavailableError,
)
from rateguard.app.services.protect import (
    INCREMENT_AND_REFRESH_SCRIPT,
    CounterStore,
    ProtectConfig,
)


@pytest.fixture
def config():
    return ProtectConfig(ttl=30, max_requests=5, ban_limit=10, prefix="test-guard")


@pytest.fixture
def store(mock_redis, config):
    return CounterStore(mock_redis, config)


class TestIncrementAndRefresh:
    """Test the atomic increment."""

    @pytest.mark.asyncio
    async def test_creates_counter_at_one(self, store, mock_redis):
        assert await store.increment_and_refresh("10.0.0.1") == 1
        assert mock_redis.data["test-guard:10.0.0.1"] == "1"

    @pytest.mark.asyncio
    async def test_returns_value_after_increment(self, store):
        values = [await store.increment_and_refresh("10.0.0.1") for _ in range(3)]
        assert values == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_sets_expiry_to_ttl(self, store, mock_redis):
        before = time.time()
        await store.increment_and_refresh("10.0.0.1")

        expires_at = mock_redis.ttls["test-guard:10.0.0.1"]
        assert before + 30 <= expires_at <= time.time() + 30

    @pytest.mark.asyncio
    async def test_runs_single_script_with_key_and_ttl(self, config):
        """Increment and expiry refresh go to Redis as one EVAL."""
        client = AsyncMock()
        client.eval.return_value = 7

        count = await CounterStore(client, config).increment_and_refresh("10.0.0.1")

        assert count == 7
        client.eval.assert_awaited_once_with(
            INCREMENT_AND_REFRESH_SCRIPT, 1, "test-guard:10.0.0.1", 30
        )
        client.incr.assert_not_called()
        client.expire.assert_not_called()

    def test_script_increments_and_expires(self):
        assert "INCR" in INCREMENT_AND_REFRESH_SCRIPT
        assert "EXPIRE" in INCREMENT_AND_REFRESH_SCRIPT

    @pytest.mark.asyncio
    async def test_accepts_bytes_reply(self, config):
        client = AsyncMock()
        client.eval.return_value = b"3"

        assert await CounterStore(client, config).increment_and_refresh("x") == 3

    @pytest.mark.asyncio
    async def test_expired_counter_starts_over(self, store, mock_redis):
        await store.increment_and_refresh("10.0.0.1")
        await store.increment_and_refresh("10.0.0.1")
        mock_redis.ttls["test-guard:10.0.0.1"] = time.time() - 1

        assert await store.increment_and_refresh("10.0.0.1") == 1


class TestCurrentCount:
    """Test the read-only counter lookup."""

    @pytest.mark.asyncio
    async def test_absent_counter_is_zero(self, store):
        assert await store.current_count("10.0.0.1") == 0

    @pytest.mark.asyncio
    async def test_reads_without_mutating(self, store):
        await store.increment_and_refresh("10.0.0.1")

        assert await store.current_count("10.0.0.1") == 1
        assert await store.current_count("10.0.0.1") == 1

    @pytest.mark.asyncio
    async def test_expired_counter_is_zero(self, store, mock_redis):
        await store.increment_and_refresh("10.0.0.1")
        mock_redis.ttls["test-guard:10.0.0.1"] = time.time() - 1

        assert await store.current_count("10.0.0.1") == 0


class TestFailures:
    """Test error translation."""

    @pytest.mark.asyncio
    async def test_missing_client(self, config):
        store = CounterStore(None, config)

        with pytest.raises(NotInitializedError):
            await store.increment_and_refresh("10.0.0.1")
        with pytest.raises(NotInitializedError):
            await store.current_count("10.0.0.1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            redis.ConnectionError("connection refused"),
            redis.TimeoutError("timed out"),
            redis.RedisError("unexpected"),
        ],
    )
    async def test_redis_errors_become_store_unavailable(self, config, error):
        client = AsyncMock()
        client.eval.side_effect = error

        with pytest.raises(StoreUnavailableError) as exc_info:
            await CounterStore(client, config).increment_and_refresh("10.0.0.1")

        assert exc_info.value.__cause__ is error
        assert exc_info.value.operation == "increment"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_get_error_becomes_store_unavailable(self, config):
        client = AsyncMock()
        client.get.side_effect = redis.ConnectionError("down")

        with pytest.raises(StoreUnavailableError):
            await CounterStore(client, config).current_count("10.0.0.1")

    @pytest.mark.asyncio
    async def test_command_errors_are_not_store_unavailable(self, config):
        """WRONGTYPE and similar replies come from a reachable store."""
        client = AsyncMock()
        error = redis.ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value")
        client.eval.side_effect = error

        with pytest.raises(redis.ResponseError) as exc_info:
            await CounterStore(client, config).increment_and_refresh("10.0.0.1")

        assert exc_info.value is error


class TestReservedAddress:
    """The block list key must never be used as a counter."""

    @pytest.mark.asyncio
    async def test_block_list_suffix_is_not_counted(self, store, mock_redis):
        with pytest.raises(ReservedAddressError):
            await store.increment_and_refresh("block-list")

        assert "test-guard:block-list" not in mock_redis.data

    @pytest.mark.asyncio
    async def test_block_list_suffix_is_not_read(self, store):
        with pytest.raises(ReservedAddressError):
            await store.current_count("block-list")

    def test_reserved_error_maps_to_bad_request(self):
        assert ReservedAddressError("block-list").status_code == 400
