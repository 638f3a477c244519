"""Middleware package for rateguard."""

from rateguard.app.middleware.client_address import (
    ClientAddressResolver,
    ForwardedClientAddressResolver,
)
from rateguard.app.middleware.protect import ProtectMiddleware, render_rejection

__all__ = [
    "ClientAddressResolver",
    "ForwardedClientAddressResolver",
    "ProtectMiddleware",
    "render_rejection",
]
