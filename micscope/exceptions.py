"""Exceptions raised by micscope."""


class ConfigurationError(ValueError):
    """Raised when analyzer settings cannot start a session."""


class SessionError(RuntimeError):
    """Raised when a session operation is called in the wrong state."""
