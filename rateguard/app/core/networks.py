"""Range-aware containment checks over a list of banned addresses."""

import ipaddress
from typing import Iterable, List, Union

from rateguard.app.core.logging import get_logger

logger = get_logger(__name__)

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def _parse_network(entry: str) -> IPNetwork | None:
    """Parse a block list entry into a network.

    Bare addresses become single-host networks (/32 or /128). Entries that
    already carry a prefix length are kept as ranges.
    """
    entry = entry.strip()
    if not entry:
        return None
    try:
        if "/" in entry:
            return ipaddress.ip_network(entry, strict=False)
        address = ipaddress.ip_address(entry)
        return ipaddress.ip_network(f"{address}/{address.max_prefixlen}")
    except ValueError:
        logger.debug(f"Skipping block list entry that is not an IP or CIDR: {entry!r}")
        return None


def _parse_address(value: str) -> IPAddress | None:
    try:
        address = ipaddress.ip_address(value.strip())
    except ValueError:
        return None
    # ::ffff:a.b.c.d is matched against IPv4 ranges
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        return address.ipv4_mapped
    return address


class BannedNetworks:
    """Set of banned networks built from block list entries.

    Example:
        >>> networks = BannedNetworks(["10.0.0.1", "192.168.0.0/16"])
        >>> networks.includes("192.168.4.2")
        True
    """

    def __init__(self, entries: Iterable[str] = ()):
        self._networks: List[IPNetwork] = []
        for entry in entries:
            network = _parse_network(str(entry))
            if network is not None:
                self._networks.append(network)

    @property
    def networks(self) -> List[IPNetwork]:
        return list(self._networks)

    def includes(self, value: str) -> bool:
        """Check whether an address falls inside any banned network.

        Args:
            value: Address string; anything that is not an IP is never included

        Returns:
            True if the address is covered by a banned network
        """
        address = _parse_address(value)
        if address is None:
            return False
        return any(
            address.version == network.version and address in network
            for network in self._networks
        )

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self.includes(value)

    def __len__(self) -> int:
        return len(self._networks)

    def __repr__(self) -> str:
        return f"BannedNetworks({[str(n) for n in self._networks]!r})"
