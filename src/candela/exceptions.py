"""
Candela exceptions

Small hierarchy so the CLI can map failures to exit codes.
"""


class CandelaError(Exception):
    """Base exception for candela."""

    pass


class ConfigurationError(CandelaError):
    """Configuration is missing, malformed or out of range."""

    pass


class CommandError(CandelaError):
    """A control command or its argument was rejected."""

    pass


class SetterError(CandelaError):
    """The external temperature setter failed or timed out."""

    pass
