"""
Phase Errors

Errors that abort a startup run. Client and config errors live next to
the code that raises them (client.ClientError, config.ConfigError).
"""


class PhaseError(RuntimeError):
    """Raised when a startup phase cannot complete."""


class OpenTimeoutError(PhaseError):
    """Raised when launched applications do not show up in time."""


class LaunchError(PhaseError):
    """Raised when an application cannot be resolved or spawned."""
