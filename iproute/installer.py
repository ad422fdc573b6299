"""
Design (installer.py)
- Purpose: Install one route and classify the result.
- Inputs: destination string, gateway address, interface index; a backend with add_route(RouteSpec).
- Outputs: OutcomeKind.
- Side effects: One kernel route-add per well-formed destination; none for malformed input.
- Thread-safety: Stateless apart from the backend, which must be safe to call from many threads.
"""

import logging
from ipaddress import ip_address, ip_network
from typing import Protocol

from pyroute2 import NetlinkError

from .classifier import classify
from .models import IPAddress, IPNetwork, OutcomeKind, RouteSpec

logger = logging.getLogger(__name__)


class RouteBackend(Protocol):
    def add_route(self, spec: RouteSpec) -> None: ...


def parse_destination(destination: str) -> IPNetwork | None:
    """
    Purpose: Turn a destination string into a network.
    Inputs: "10.0.0.0/24", "10.0.0.5/24" (host bits masked), "10.0.0.1", "2001:db8::1", ...
    Outputs: IPv4Network/IPv6Network, or None if the text is not an address or CIDR.
             A bare address becomes a full-length host route (/32 or /128).
             The prefix must be a plain decimal length: netmasks ("/255.255.255.0")
             and leading zeros ("/024") are rejected.
    """
    if not isinstance(destination, str):
        return None
    try:
        if "/" in destination:
            _, _, prefix = destination.partition("/")
            if not _is_prefix_length(prefix):
                return None
            return ip_network(destination, strict=False)
        address = ip_address(destination)
    except ValueError:
        return None
    return ip_network((address, address.max_prefixlen))


def _is_prefix_length(text: str) -> bool:
    return text.isascii() and text.isdigit() and (text == "0" or not text.startswith("0"))


class RouteInstaller:
    def __init__(self, backend: RouteBackend) -> None:
        self.backend = backend

    def install(self, destination: str, gateway: IPAddress, interface_index: int) -> OutcomeKind:
        """
        Purpose: Add a single route. No retries; a failed add is final for this destination.
        Inputs: destination (str), gateway (parsed address), interface_index (int)
        Outputs: OutcomeKind.SUCCESS or the classified failure.
        """
        network = parse_destination(destination)
        if network is None:
            logger.debug("Error parsing destination %r", destination)
            return OutcomeKind.INVALID_ARGUMENT

        spec = RouteSpec(destination=network, gateway=gateway, interface_index=interface_index)
        try:
            self.backend.add_route(spec)
        except (NetlinkError, OSError) as exc:
            logger.debug("Error adding route %s: %s", destination, exc)
            return classify(exc)
        return OutcomeKind.SUCCESS
