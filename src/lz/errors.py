"""Exception types for lz.

File-system problems are never raised past the snapshot builder; they end up
in ``Snapshot.error``. Everything here is either a startup problem or a
configuration mistake that must stop the run before any listing happens.
"""


class LzError(Exception):
    """Base class for all lz errors."""


class ConfigurationError(LzError):
    """Invalid combination of options, detected before any snapshot is built."""


class ConfigurationConflict(ConfigurationError):
    """Two mutually exclusive options were given together."""


class GlobSyntaxError(ConfigurationError):
    """The --filter pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid glob {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class InvalidRoot(LzError):
    """A root path that cannot be used and has no fallback."""


class PickerUnavailable(LzError):
    """The native folder picker could not be opened."""
