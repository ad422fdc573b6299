"""
Background route workers.

Design:
- One run() call per batch; batches never overlap, so the limit bounds kernel calls process-wide.
- Every run():
    1) Resolve gateway and interface once; a bad one fails the batch before any destination.
    2) For each destination, take a slot from a BoundedSemaphore(limit), then submit a unit of work.
    3) The worker installs the route and reports the outcome to the OutcomeRecorder.
    4) The slot is returned from the future's done-callback (success, error or cancel alike).
    5) Wait for every submitted unit before returning.
- Fatal outcomes (interface vanished) are raised out of the worker; run() stops submitting,
  cancels queued work, waits for in-flight work and re-raises.
- Thread-safety: Recorder does its own locking; the backend hands each thread its own socket.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from ipaddress import ip_address
from typing import List, Protocol

from .errors import ConfigurationError, DeviceVanishedError, InvalidGatewayError
from .installer import RouteInstaller
from .models import Batch, OutcomeKind, RouteTarget
from .recorder import OutcomeRecorder
from .utils import format_duplicate

logger = logging.getLogger(__name__)


class InterfaceResolver(Protocol):
    def resolve_interface(self, name: str) -> int: ...


class BatchDispatcher:
    def __init__(self, installer: RouteInstaller, recorder: OutcomeRecorder,
                 resolver: InterfaceResolver, debug: bool = False) -> None:
        self.installer = installer
        self.recorder = recorder
        self.resolver = resolver
        self.debug = debug

    def resolve(self, gateway: str, interface: str) -> RouteTarget:
        """
        Purpose: Resolve the batch's gateway and interface once.
        Raises: InvalidGatewayError, InterfaceNotFoundError (both ConfigurationError).
        """
        try:
            gateway_ip = ip_address(gateway.strip())
        except ValueError:
            raise InvalidGatewayError(gateway) from None
        index = self.resolver.resolve_interface(interface)
        return RouteTarget(gateway=gateway, gateway_ip=gateway_ip, interface=interface, interface_index=index)

    def run(self, batch: Batch, gateway: str, interface: str, concurrency_limit: int) -> int:
        """
        Purpose: Install every destination of one batch with at most concurrency_limit in flight.
        Inputs: batch, gateway (text), interface (name), concurrency_limit (>= 1)
        Outputs: number of destinations dispatched.
        Raises: ConfigurationError before any work; DeviceVanishedError after in-flight work drains.
        """
        if isinstance(concurrency_limit, bool) or not isinstance(concurrency_limit, int) or concurrency_limit < 1:
            raise ConfigurationError(f"concurrency limit must be a positive integer, got {concurrency_limit!r}")
        target = self.resolve(gateway, interface)

        slots = threading.BoundedSemaphore(concurrency_limit)
        abort = threading.Event()
        failures: list[BaseException] = []
        failures_lock = threading.Lock()

        def settle(future: Future) -> None:
            try:
                if not future.cancelled():
                    exc = future.exception()
                    if exc is not None:
                        with failures_lock:
                            failures.append(exc)
                        abort.set()
            finally:
                slots.release()

        dispatched = 0
        pool = ThreadPoolExecutor(max_workers=concurrency_limit, thread_name_prefix="route-worker")
        try:
            for destination in batch.destinations:
                if abort.is_set():
                    break
                slots.acquire()
                if abort.is_set():
                    slots.release()
                    break
                try:
                    future = pool.submit(self._attempt, destination, target)
                except BaseException:
                    slots.release()
                    raise
                future.add_done_callback(settle)
                dispatched += 1
            pool.shutdown(wait=True, cancel_futures=abort.is_set())
        except BaseException:
            # Interrupted while dispatching: drop queued work, let in-flight calls finish.
            pool.shutdown(wait=True, cancel_futures=True)
            raise

        if failures:
            raise self._pick_failure(failures)
        return dispatched

    @staticmethod
    def _pick_failure(failures: List[BaseException]) -> BaseException:
        for exc in failures:
            if isinstance(exc, DeviceVanishedError):
                return exc
        return failures[0]

    def _attempt(self, destination: str, target: RouteTarget) -> OutcomeKind:
        outcome = self.installer.install(destination, target.gateway_ip, target.interface_index)
        if outcome is OutcomeKind.SUCCESS:
            self.recorder.record_success()
        elif outcome is OutcomeKind.ALREADY_EXISTS:
            self.recorder.record_duplicate(format_duplicate(destination, target))
        elif outcome is OutcomeKind.NO_SUCH_DEVICE:
            raise DeviceVanishedError(target.interface)
        else:
            self.recorder.record_error(outcome)
            if self.debug:
                logger.error("Error adding route for %s via %s dev %s: %s",
                             destination, target.gateway, target.interface, outcome.label)
        return outcome

