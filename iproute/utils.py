"""
Design (utils.py)
- Purpose: Reusable helpers: duplicate record formatting, duplicates log path, desktop notification.
- Inputs: Various helper parameters (destination, target, directory, message).
- Outputs: Helper results (strings, paths).
- Side effects: notify() shows an OS notification through plyer.
- Thread-safety: Stateless; safe to call from any thread.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from plyer import notification

from .config import (
    DUPLICATES_FILE_PREFIX,
    DUPLICATES_TIMESTAMP_FORMAT,
    NOTIFY_TIMEOUT_SEC,
    NOTIFY_TITLE,
)
from .models import RouteTarget

logger = logging.getLogger(__name__)


def format_duplicate(destination: str, target: RouteTarget) -> str:
    """
    Purpose: Describe a route that already existed, in `ip route` notation.
    Outputs: "<destination> via <gateway> dev <interface>"
    """
    return f"{destination} via {target.gateway} dev {target.interface}"


def make_duplicates_path(directory: str, now: Optional[datetime] = None) -> Path:
    """
    Purpose: Build a unique, timestamped path for the duplicates log.
    Inputs: directory, optional timestamp (defaults to now)
    Outputs: <directory>/route_duplicates_<timestamp>_<pid>.log
    Side effects: None (the file is created later, only if a duplicate is written).
    """
    stamp = (now or datetime.now()).strftime(DUPLICATES_TIMESTAMP_FORMAT)
    return Path(directory) / f"{DUPLICATES_FILE_PREFIX}{stamp}_{os.getpid()}.log"


def notify(message: str, title: str = NOTIFY_TITLE) -> bool:
    """
    Purpose: Show a desktop notification.
    Outputs: True if plyer delivered it, False otherwise (headless hosts have no notifier).
    """
    try:
        notification.notify(title=title, message=message, timeout=NOTIFY_TIMEOUT_SEC)
    except Exception as exc:
        logger.warning("Desktop notification failed: %s", exc)
        return False
    return True
