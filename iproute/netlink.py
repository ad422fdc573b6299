"""
Design (netlink.py)
- Purpose: Talk to the kernel routing table through pyroute2.
- Inputs: Interface names (resolve_interface) and RouteSpec values (add_route).
- Outputs: Interface indexes; route-add side effects.
- Side effects: Opens netlink sockets on demand; close() releases them all.
- Thread-safety: A socket is checked out by one thread per call and returned afterwards,
  so no two threads ever share an IPRoute. At most one socket per concurrent caller is opened.
"""

import logging
import queue
import socket
import threading
from contextlib import contextmanager
from typing import Iterator

from pyroute2 import IPRoute

from .errors import InterfaceNotFoundError
from .models import RouteSpec

logger = logging.getLogger(__name__)


class NetlinkRoutes:
    """
    Design (NetlinkRoutes)
    - State:
        _idle: sockets not currently in use
        _sockets: every IPRoute opened so far (for close())
        _lock: protects _sockets
    """

    def __init__(self) -> None:
        self._idle: "queue.SimpleQueue[IPRoute]" = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._sockets: list[IPRoute] = []

    @contextmanager
    def _socket(self) -> Iterator[IPRoute]:
        try:
            ipr = self._idle.get_nowait()
        except queue.Empty:
            ipr = IPRoute()
            with self._lock:
                self._sockets.append(ipr)
        try:
            yield ipr
        finally:
            self._idle.put(ipr)

    def resolve_interface(self, name: str) -> int:
        """
        Purpose: Look up the kernel index of an interface.
        Inputs: name (e.g. "tun0")
        Outputs: interface index (int)
        Raises: InterfaceNotFoundError if no link has that name.
        """
        if not name:
            raise InterfaceNotFoundError(name)
        with self._socket() as ipr:
            indexes = ipr.link_lookup(ifname=name)
        if not indexes:
            raise InterfaceNotFoundError(name)
        return indexes[0]

    def add_route(self, spec: RouteSpec) -> None:
        """Add one route; NetlinkError propagates to the caller for classification."""
        family = socket.AF_INET6 if spec.destination.version == 6 else socket.AF_INET
        with self._socket() as ipr:
            ipr.route(
                "add",
                family=family,
                dst=str(spec.destination.network_address),
                dst_len=spec.destination.prefixlen,
                gateway=str(spec.gateway),
                oif=spec.interface_index,
            )

    def close(self) -> None:
        with self._lock:
            sockets, self._sockets = self._sockets, []
        self._idle = queue.SimpleQueue()
        for ipr in sockets:
            try:
                ipr.close()
            except OSError as exc:
                logger.warning("Error closing netlink socket: %s", exc)
