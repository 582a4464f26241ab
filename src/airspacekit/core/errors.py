"""Exception hierarchy for airspacekit.

Malformed OpenAir input and degenerate geometry are never reported through
exceptions; they are skipped or filtered. These exceptions cover the
boundary concerns around the core: configuration, logging and caches.
"""


class AirspaceKitError(Exception):
    """Base class for all airspacekit errors."""


class ConfigError(AirspaceKitError):
    """Raised when configuration operations fail."""


class LoggingError(AirspaceKitError):
    """Raised when logging system operations fail."""


class CacheError(AirspaceKitError):
    """Raised when a cache store cannot read or write an entry."""


class ConsolidationTimeoutError(AirspaceKitError):
    """Raised when consolidation runs past its deadline."""
