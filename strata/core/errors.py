"""Exception taxonomy for strata.

Core code raises these; adapters wrap driver exceptions in SourceError
so callers only need to handle one family of errors.
"""


class StrataError(Exception):
    """Base class for every error raised by strata."""


class ConfigurationError(StrataError):
    """Invalid settings, unknown adapter type, or missing connection."""


class RelationshipError(StrataError):
    """Unknown relationship name or a target model that cannot be resolved."""


class SourceError(StrataError):
    """A backend operation failed.

    The original driver exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


__all__ = [
    "ConfigurationError",
    "RelationshipError",
    "SourceError",
    "StrataError",
]
