"""
Exception types raised by the CoordScout core.
"""


class CoordScoutError(Exception):
    """Base class for all CoordScout errors."""


class ConfigError(CoordScoutError):
    """Raised when the configuration file cannot be used."""


class Unreachable(CoordScoutError):
    """Connection refused, timed out, DNS failure or a non-2xx response."""


class ProtocolMismatch(CoordScoutError):
    """A 2xx response whose body is not the JSON the mod is expected to send."""


class ConnectFailure(CoordScoutError):
    """
    An explicit connect attempt failed.

    The underlying Unreachable or ProtocolMismatch is kept as __cause__.
    """
