"""Data models for request verification."""

from dataclasses import dataclass
from enum import IntEnum

from rateguard.app.core.config import Settings
from rateguard.app.exceptions import ReservedAddressError

# Counter keys share the prefix with the block list, so this address is never counted
BLOCK_LIST_SUFFIX = "block-list"


class VerificationStatus(IntEnum):
    """Verdict for a request, ordered by severity."""
    SAFE = 0
    LIMITED = 1
    BANNED = 2


@dataclass(frozen=True)
class VerificationResult:
    """Result of verifying one request.

    Attributes:
        status: Verdict for the request
        http_code: Code the request layer responds with (200, 429 or 418)
    """
    status: VerificationStatus
    http_code: int

    @property
    def is_safe(self) -> bool:
        return self.status is VerificationStatus.SAFE

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"status": self.status.name, "http_code": self.http_code}


SAFE_RESULT = VerificationResult(VerificationStatus.SAFE, 200)
LIMITED_RESULT = VerificationResult(VerificationStatus.LIMITED, 429)
BANNED_RESULT = VerificationResult(VerificationStatus.BANNED, 418)


@dataclass(frozen=True)
class ProtectConfig:
    """Immutable verification policy for one engine.

    Attributes:
        ttl: Sliding window length in seconds
        max_requests: Count above which an address is LIMITED
        ban_limit: Count above which an address is BANNED for good
        prefix: Redis key namespace
    """
    ttl: int = 10
    max_requests: int = 200
    ban_limit: int = 1000
    prefix: str = "rate-guard"

    @property
    def block_list_key(self) -> str:
        return f"{self.prefix}:{BLOCK_LIST_SUFFIX}"

    def counter_key(self, address: str) -> str:
        """Build the counter key for an address.

        Raises:
            ReservedAddressError: The key would collide with the block list
        """
        if address == BLOCK_LIST_SUFFIX:
            raise ReservedAddressError(address)
        return f"{self.prefix}:{address}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProtectConfig":
        """Create from resolved application settings."""
        return cls(
            ttl=settings.ttl,
            max_requests=settings.max_requests,
            ban_limit=settings.ban_limit,
            prefix=settings.prefix,
        )
