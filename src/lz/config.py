"""Option objects shared by the listing pipeline, the watch loop and the browser."""

from dataclasses import dataclass
from enum import Enum

from lz.errors import ConfigurationConflict
from lz.matching import GlobMatcher, compile_glob

DEFAULT_WATCH_INTERVAL = 2.0
MIN_WATCH_INTERVAL = 0.1


class SortKey(Enum):
    """Sort keys for listings."""

    NAME = "name"
    SIZE = "size"
    AGE = "age"

    @classmethod
    def parse(cls, value: str) -> "SortKey":
        """Parse a CLI value, accepting ``time`` and ``mtime`` for ``age``."""
        value = value.lower()
        if value in ("time", "mtime"):
            return cls.AGE
        return cls(value)


@dataclass(slots=True, frozen=True)
class SnapshotOptions:
    """What the snapshot builder reads and keeps."""

    recursive: bool = False
    include_hidden: bool = False
    filter_glob: str | None = None
    only_dirs: bool = False
    only_files: bool = False
    compute_du: bool = False
    follow_links: bool = False

    def validate(self) -> GlobMatcher | None:
        """
        Check the options once, before any snapshot is attempted.

        Returns:
            The compiled filter, or None when no filter was given.

        Raises:
            ConfigurationConflict: if both only_dirs and only_files are set.
            GlobSyntaxError: if filter_glob does not compile.
        """
        if self.only_dirs and self.only_files:
            raise ConfigurationConflict("--only-dirs and --only-files cannot be used together")
        if self.filter_glob is None:
            return None
        return compile_glob(self.filter_glob)


@dataclass(slots=True, frozen=True)
class ViewOptions:
    """How a snapshot is ordered and whether it is summarized."""

    sort_key: SortKey = SortKey.NAME
    reverse: bool = False
    dirs_first: bool = True
    summary: bool = False


@dataclass(slots=True, frozen=True)
class DisplayOptions:
    """Text/JSON presentation switches."""

    long: bool = False
    human: bool = False
    icons: bool = False
    rainbow: bool = False
    json: bool = False
    du: bool = False
    extensions: bool = False
