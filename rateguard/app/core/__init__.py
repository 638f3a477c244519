"""Core utilities for rateguard."""

from rateguard.app.core.config import Settings, settings
from rateguard.app.core.logging import get_logger, setup_logging
from rateguard.app.core.networks import BannedNetworks
from rateguard.app.core.redis import create_redis_client

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "BannedNetworks",
    "create_redis_client",
]
