"""
Design (classifier.py)
- Purpose: Map an error raised by a route-add call to an OutcomeKind.
- Inputs: Any exception (pyroute2 NetlinkError, OSError, ...).
- Outputs: OutcomeKind (never raises; unknown errors map to UNKNOWN).
- Side effects: None.
- Thread-safety: Stateless; safe to call from any worker.
"""

import errno
from typing import Tuple

from .models import OutcomeKind

# Checked in order, first match wins. Each rule matches on errno or message text.
_RULES: Tuple[Tuple[int, str, OutcomeKind], ...] = (
    (errno.EEXIST, "file exists", OutcomeKind.ALREADY_EXISTS),
    (errno.ENETUNREACH, "network is unreachable", OutcomeKind.NETWORK_UNREACHABLE),
    (errno.ENODEV, "no such device", OutcomeKind.NO_SUCH_DEVICE),
    (errno.EPERM, "operation not permitted", OutcomeKind.OPERATION_NOT_PERMITTED),
    (errno.EINVAL, "invalid argument", OutcomeKind.INVALID_ARGUMENT),
    (errno.EHOSTUNREACH, "no route to host", OutcomeKind.NO_ROUTE_TO_HOST),
)


def _error_code(err: BaseException) -> int | None:
    # NetlinkError carries .code, OSError carries .errno
    for attr in ("code", "errno"):
        value = getattr(err, attr, None)
        if isinstance(value, int):
            return value
    return None


def _error_text(err: BaseException) -> str:
    try:
        return str(err).lower()
    except Exception:
        return ""


def classify(err: BaseException) -> OutcomeKind:
    """
    Purpose: Classify a failed route-add.
    Inputs: err (exception raised by the backend)
    Outputs: OutcomeKind
    """
    code = _error_code(err)
    text = _error_text(err)
    for rule_code, needle, kind in _RULES:
        if code == rule_code or needle in text:
            return kind
    return OutcomeKind.UNKNOWN
