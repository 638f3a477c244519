"""rateguard: Redis-backed request throttling and ban list protection."""

__version__ = "0.1.0"
