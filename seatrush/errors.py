class SeatrushError(Exception):
    """Base class for all harness errors."""


class ConfigError(SeatrushError):
    """Run configuration is missing or invalid."""


class ProvisioningError(SeatrushError):
    """
    Login failed or did not yield a usable token.
    Fatal: the run must abort before any virtual client starts.
    """


class TransportError(SeatrushError):
    """A single request never produced an HTTP response (timeout, refused, reset)."""
