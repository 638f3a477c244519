"""Redis client helpers.

Connection lifecycle lives here, outside the verification services: the
services receive an already-built client and only issue commands on it.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import redis
import redis.asyncio as aioredis

from rateguard.app.core.config import settings
from rateguard.app.core.logging import get_logger
from rateguard.app.exceptions import NotInitializedError, StoreUnavailableError

logger = get_logger(__name__)


def create_redis_client(redis_url: Optional[str] = None) -> aioredis.Redis:
    """Create an asyncio Redis client.

    The client connects lazily on its first command, so this never blocks.

    Args:
        redis_url: Redis connection URL (defaults to settings.redis_url)

    Returns:
        redis.asyncio.Redis instance returning str values
    """
    return aioredis.from_url(redis_url or settings.redis_url, decode_responses=True)


def require_client(client: Optional[Any]) -> Any:
    """Return the client or raise NotInitializedError if there is none."""
    if client is None:
        raise NotInitializedError()
    return client


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Translate redis-py transport failures into StoreUnavailableError.

    Nothing is retried or masked; the original exception is chained.
    """
    try:
        yield
    except redis.ResponseError:
        # Command errors (WRONGTYPE, NOSCRIPT) mean the store answered
        raise
    except redis.ConnectionError as e:
        logger.error(f"Redis connection failed during {operation}: {e}")
        raise StoreUnavailableError(operation) from e
    except redis.TimeoutError as e:
        logger.warning(f"Redis timeout during {operation}: {e}")
        raise StoreUnavailableError(operation, "Key-value store timed out") from e
    except redis.RedisError as e:
        logger.error(f"Redis error during {operation}: {e}")
        raise StoreUnavailableError(operation) from e


def decode(value: Any) -> Any:
    """Decode bytes returned by clients created without decode_responses."""
    if isinstance(value, bytes):
        return value.decode()
    return value
