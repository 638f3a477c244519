"""Services package for rateguard."""

from rateguard.app.services.protect import (
    BanSet,
    CounterStore,
    ProtectConfig,
    VerificationEngine,
    VerificationResult,
    VerificationStatus,
)

__all__ = [
    "BanSet",
    "CounterStore",
    "ProtectConfig",
    "VerificationEngine",
    "VerificationResult",
    "VerificationStatus",
]
