"""Request verification backed by Redis.

This package provides per-address sliding window counters, the durable
block list and the engine that turns both into verdicts.
"""

from .ban_set import BanSet
from .counter import CounterStore
from .engine import VerificationEngine
from .models import (
    BANNED_RESULT,
    LIMITED_RESULT,
    SAFE_RESULT,
    ProtectConfig,
    VerificationResult,
    VerificationStatus,
)
from .redis_lua import INCREMENT_AND_REFRESH_SCRIPT

__all__ = [
    "BanSet",
    "CounterStore",
    "VerificationEngine",
    "ProtectConfig",
    "VerificationResult",
    "VerificationStatus",
    "SAFE_RESULT",
    "LIMITED_RESULT",
    "BANNED_RESULT",
    "INCREMENT_AND_REFRESH_SCRIPT",
]
