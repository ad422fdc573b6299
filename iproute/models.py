"""
Design (models.py)
- Purpose: Define simple, typed data structures for the route loader.
- Inputs: Field values (str, int, ipaddress objects).
- Outputs: Dataclass / Enum instances.
- Side effects: None.
- Thread-safety: All dataclasses are frozen, so they can be shared across workers.
"""

from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from typing import Tuple, Union

from .config import DEFAULT_DEBUG, DEFAULT_WORKER_COUNT, DUPLICATES_DIR

IPAddress = Union[IPv4Address, IPv6Address]
IPNetwork = Union[IPv4Network, IPv6Network]


class OutcomeKind(Enum):
    """
    Design (OutcomeKind)
    - Purpose: Result of a single route-add attempt. The value is the label used in the report.
    """
    SUCCESS = "Successfully added"
    ALREADY_EXISTS = "Already existed (skipped)"
    NETWORK_UNREACHABLE = "Network unreachable"
    OPERATION_NOT_PERMITTED = "Operation not permitted"
    INVALID_ARGUMENT = "Invalid argument"
    NO_ROUTE_TO_HOST = "No route to host"
    NO_SUCH_DEVICE = "No such device"
    UNKNOWN = "Unknown errors"

    @property
    def label(self) -> str:
        return self.value


# Kinds that have a counter; NO_SUCH_DEVICE is fatal and never counted.
COUNTED_KINDS: Tuple[OutcomeKind, ...] = (
    OutcomeKind.SUCCESS,
    OutcomeKind.ALREADY_EXISTS,
    OutcomeKind.NETWORK_UNREACHABLE,
    OutcomeKind.OPERATION_NOT_PERMITTED,
    OutcomeKind.INVALID_ARGUMENT,
    OutcomeKind.NO_ROUTE_TO_HOST,
    OutcomeKind.UNKNOWN,
)

# Kinds that go through OutcomeRecorder.record_error()
ERROR_KINDS: Tuple[OutcomeKind, ...] = COUNTED_KINDS[2:]


@dataclass(frozen=True)
class RouteSpec:
    """
    Design (RouteSpec)
    - Purpose: One route to hand to the kernel.
    - Fields:
        destination: network to reach (host routes are /32 or /128).
        gateway: next-hop address.
        interface_index: kernel index of the outgoing interface.
    """
    destination: IPNetwork
    gateway: IPAddress
    interface_index: int


@dataclass(frozen=True)
class RouteTarget:
    """Gateway and interface resolved once per batch."""
    gateway: str
    gateway_ip: IPAddress
    interface: str
    interface_index: int


@dataclass(frozen=True)
class Batch:
    """
    Design (Batch)
    - Purpose: Destinations loaded from one route file.
    - Fields:
        name: human-readable name for logging (file name).
        destinations: destination strings in file order.
    """
    name: str
    destinations: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.destinations)


@dataclass(frozen=True)
class RouteGroup:
    """A gateway/interface pair and the route files installed through it."""
    name: str
    gateway: str
    interface: str
    files: Tuple[str, ...] = ()

    @property
    def enabled(self) -> bool:
        return bool(self.gateway) and bool(self.interface)


@dataclass(frozen=True)
class Settings:
    """
    Design (Settings)
    - Purpose: Resolved runtime configuration (settings file merged with CLI flags).
    - Fields:
        gateway / interface: primary route group.
        default_gateway / default_interface: secondary route group.
        worker_count: max concurrent route-add calls (positive).
        debug: log every failed destination and enable DEBUG logging.
        notify: send the final summary as a desktop notification.
        route_files / default_route_files: JSON route files per group.
        duplicates_dir: directory for the duplicate routes log.
    """
    gateway: str = ""
    interface: str = ""
    default_gateway: str = ""
    default_interface: str = ""
    worker_count: int = DEFAULT_WORKER_COUNT
    debug: bool = DEFAULT_DEBUG
    notify: bool = False
    route_files: Tuple[str, ...] = field(default_factory=tuple)
    default_route_files: Tuple[str, ...] = field(default_factory=tuple)
    duplicates_dir: str = DUPLICATES_DIR

    def groups(self) -> Tuple[RouteGroup, RouteGroup]:
        return (
            RouteGroup("primary", self.gateway, self.interface, self.route_files),
            RouteGroup("default", self.default_gateway, self.default_interface, self.default_route_files),
        )
