"""
Design (main.py)
- Purpose: Command-line entry point. Loads settings, installs every route group, reports stats.
- Inputs: argv (see parse_args), optional JSON settings file, JSON route files.
- Outputs: Exit code (0 ok or interrupted, 1 on configuration or fatal interface errors).
- Side effects: Modifies the kernel routing table; writes the duplicates log; logs the report.
- Thread-safety: Runs on the main thread; SIGINT/SIGTERM arrive here as KeyboardInterrupt
  and are ignored while the recorder closes and the report is logged.
"""

import argparse
import logging
import signal
import sys
from typing import Dict, Optional, Sequence

from iproute import __version__
from iproute.config import LOG_FORMAT
from iproute.dispatcher import BatchDispatcher
from iproute.errors import ConfigurationError, DeviceVanishedError, RouteFileError
from iproute.installer import RouteInstaller
from iproute.models import OutcomeKind, RouteGroup, Settings
from iproute.netlink import NetlinkRoutes
from iproute.recorder import OutcomeRecorder
from iproute.storage import build_settings, load_batch, load_settings
from iproute.utils import make_duplicates_path, notify

logger = logging.getLogger("iproute")

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="iproute",
        description="Install IP routes in bulk from JSON route files.",
    )
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument("--gateway", help="gateway for --routes")
    parser.add_argument("--interface", help="interface for --routes")
    parser.add_argument("--default-gateway", help="gateway for --default-routes")
    parser.add_argument("--default-interface", help="interface for --default-routes")
    parser.add_argument("--routes", nargs="+", action="extend", metavar="FILE",
                        help="route files installed via --gateway/--interface")
    parser.add_argument("--default-routes", nargs="+", action="extend", metavar="FILE",
                        help="route files installed via --default-gateway/--default-interface")
    parser.add_argument("--workers", type=int, help="max concurrent route-add calls (default 100)")
    parser.add_argument("--duplicates-dir", help="directory for the duplicate routes log")
    parser.add_argument("--debug", action="store_true", default=None, help="log every failed route")
    parser.add_argument("--notify", action="store_true", default=None,
                        help="show the final summary as a desktop notification")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Settings file first (if any), then command-line flags on top."""
    base = load_settings(args.config) if args.config else Settings()
    overrides = {
        "gateway": args.gateway,
        "interface": args.interface,
        "default_gateway": args.default_gateway,
        "default_interface": args.default_interface,
        "route_files": args.routes,
        "default_route_files": args.default_routes,
        "worker_count": args.workers,
        "duplicates_dir": args.duplicates_dir,
        "debug": args.debug,
        "notify": args.notify,
    }
    return build_settings(overrides, base)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)


def _interrupt(signum: int, frame) -> None:
    raise KeyboardInterrupt(signal.Signals(signum).name)


def install_signal_handlers() -> Dict[int, object]:
    previous = {}
    for signum in _SHUTDOWN_SIGNALS:
        previous[signum] = signal.signal(signum, _interrupt)
    return previous


def ignore_shutdown_signals() -> None:
    """Ignore SIGINT/SIGTERM so a second signal cannot cut the final flush and report short."""
    for signum in _SHUTDOWN_SIGNALS:
        signal.signal(signum, signal.SIG_IGN)


def restore_signal_handlers(previous: Dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_group(group: RouteGroup, dispatcher: BatchDispatcher, worker_count: int) -> None:
    """
    Purpose: Install every route file of one group, one batch at a time.
    Side effects: Bad route files are logged and skipped; configuration errors propagate.
    """
    if not group.enabled:
        logger.info("No gateway/interface configured for %s routes, skipping", group.name)
        return
    if not group.files:
        logger.info("No route files given for %s routes, skipping", group.name)
        return

    logger.info("Adding routes for interface: %s", group.interface)
    for path in group.files:
        try:
            batch = load_batch(path)
        except RouteFileError as exc:
            logger.error("Skipping route file %s", exc)
            continue
        logger.info("Processing: %s (%d destinations)", batch.name, len(batch))
        dispatcher.run(batch, group.gateway, group.interface, worker_count)


def summary_line(recorder: OutcomeRecorder) -> str:
    counts = recorder.counts()
    return (f"{counts[OutcomeKind.SUCCESS]} added, {counts[OutcomeKind.ALREADY_EXISTS]} existed, "
            f"{recorder.total} processed")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = resolve_settings(args)
    except ConfigurationError as exc:
        configure_logging(False)
        logger.error("Error reading configuration: %s", exc)
        return 1
    configure_logging(settings.debug)

    backend = NetlinkRoutes()
    recorder = OutcomeRecorder(make_duplicates_path(settings.duplicates_dir))
    dispatcher = BatchDispatcher(RouteInstaller(backend), recorder, backend, debug=settings.debug)
    previous_handlers = install_signal_handlers()

    exit_code = 0
    try:
        for group in settings.groups():
            run_group(group, dispatcher, settings.worker_count)
    except KeyboardInterrupt:
        logger.warning("Received interrupt signal, shutting down...")
    except (ConfigurationError, DeviceVanishedError) as exc:
        logger.error("Configuration error: %s", exc)
        exit_code = 1
    finally:
        ignore_shutdown_signals()
        try:
            recorder.close()
            backend.close()
            logger.info(recorder.report())
        finally:
            restore_signal_handlers(previous_handlers)

    if settings.notify:
        notify(summary_line(recorder))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
