"""Shared fixtures: an in-memory routing table standing in for the netlink backend."""

import errno
import os
import threading
import time
from pathlib import Path

import pytest

from iproute.dispatcher import BatchDispatcher
from iproute.errors import InterfaceNotFoundError
from iproute.installer import RouteInstaller
from iproute.recorder import OutcomeRecorder


class FakeRoutes:
    """Backend double: tracks installed routes, calls and peak concurrency."""

    def __init__(self, links=None, delay: float = 0.0) -> None:
        self.links = dict(links if links is not None else {"tun0": 7, "eth0": 2})
        self.delay = delay
        self.routes = set()
        self.calls = []
        self.errors = {}
        self.lookups = []
        self.active = 0
        self.peak = 0
        self.closed = False
        self._lock = threading.Lock()

    def resolve_interface(self, name: str) -> int:
        self.lookups.append(name)
        if name not in self.links:
            raise InterfaceNotFoundError(name)
        return self.links[name]

    def add_route(self, spec) -> None:
        with self._lock:
            self.calls.append(spec)
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            with self._lock:
                error = self.errors.get(str(spec.destination))
                if error is not None:
                    raise error
                if spec.destination in self.routes:
                    raise OSError(errno.EEXIST, os.strerror(errno.EEXIST))
                self.routes.add(spec.destination)
        finally:
            with self._lock:
                self.active -= 1

    def close(self) -> None:
        self.closed = True


def read_lines(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


@pytest.fixture
def fake_routes() -> FakeRoutes:
    return FakeRoutes()


@pytest.fixture
def duplicates_path(tmp_path: Path) -> Path:
    return tmp_path / "route_duplicates_test.log"


@pytest.fixture
def recorder(duplicates_path: Path):
    rec = OutcomeRecorder(duplicates_path)
    yield rec
    rec.close()


@pytest.fixture
def dispatcher(fake_routes: FakeRoutes, recorder: OutcomeRecorder) -> BatchDispatcher:
    return BatchDispatcher(RouteInstaller(fake_routes), recorder, fake_routes)
