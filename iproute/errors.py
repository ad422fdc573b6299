"""
Design (errors.py)
- Purpose: Exception hierarchy shared by the dispatcher, storage, recorder and main.
- Fatal: ConfigurationError (before any work) and DeviceVanishedError (mid-run).
- Recoverable: RouteFileError (file skipped). Per-destination failures are never exceptions;
  they are OutcomeKind values.
"""


class IprouteError(Exception):
    """Base for all route loader errors."""


class ConfigurationError(IprouteError):
    """Settings are invalid or cannot be resolved against the system."""


class InterfaceNotFoundError(ConfigurationError):
    def __init__(self, interface: str) -> None:
        self.interface = interface
        super().__init__(
            f"interface '{interface}' does not exist. "
            "Check 'interface' or 'default_interface' in config."
        )


class InvalidGatewayError(ConfigurationError):
    def __init__(self, gateway: str) -> None:
        self.gateway = gateway
        super().__init__(f"invalid gateway IP: '{gateway}'")


class DeviceVanishedError(IprouteError):
    """
    Raised out of a worker when the kernel reports "no such device".
    Every later attempt on the interface would fail the same way, so the run stops.
    """

    def __init__(self, interface: str) -> None:
        self.interface = interface
        super().__init__(f"interface '{interface}' disappeared while adding routes")


class RouteFileError(IprouteError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RecorderClosedError(IprouteError):
    """An outcome was recorded after OutcomeRecorder.close()."""
