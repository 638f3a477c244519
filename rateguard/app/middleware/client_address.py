"""Origin address resolution for incoming requests.

The verification engine only ever sees an address string. Turning a
framework request into that string happens here, one resolver per hosting
framework.
"""

import ipaddress
from typing import Optional, Protocol

from starlette.requests import Request


class ClientAddressResolver(Protocol):
    """Given a request, produce the resolved origin address."""

    def resolve(self, request: Request) -> str:
        ...


class ForwardedClientAddressResolver:
    """Resolve the client address of a Starlette request.

    Lookup order:
    1. First hop of the X-Forwarded-For header, if it is an IP address
    2. X-Real-IP header, if it is an IP address
    3. Socket peer address
    4. Empty string if none of the above is available
    """

    def __init__(
        self,
        forwarded_header: str = "X-Forwarded-For",
        real_ip_header: str = "X-Real-IP",
    ):
        self.forwarded_header = forwarded_header
        self.real_ip_header = real_ip_header

    def resolve(self, request: Request) -> str:
        forwarded = request.headers.get(self.forwarded_header)
        if forwarded:
            client_ip = _normalize_ip(forwarded.split(",")[0])
            if client_ip:
                return client_ip

        real_ip = _normalize_ip(request.headers.get(self.real_ip_header))
        if real_ip:
            return real_ip

        return request.client.host if request.client else ""


def _normalize_ip(value: Optional[str]) -> Optional[str]:
    """Return the canonical form of an IP header value, or None if it is not one.

    Header values are client controlled and end up in Redis keys, so anything
    that does not parse as an address is ignored.
    """
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None
