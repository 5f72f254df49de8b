"""Data models for lz."""

from dataclasses import dataclass, field
from enum import Enum


class EntryKind(Enum):
    """Kind of a file-system child, classified without following links."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(slots=True, frozen=True)
class Entry:
    """Immutable description of one file-system child."""

    name: str
    kind: EntryKind
    size_bytes: int  # Directories: 0, or the recursive total with --du
    modified_time: float  # Seconds since epoch
    relative_path: str  # '/'-separated, relative to the listing root
    target_is_dir: bool = False  # Symlinks pointing at a directory
    children: tuple["Entry", ...] | None = None  # Tree mode only
    readonly: bool = False  # No write permission bit set

    @property
    def is_dir(self) -> bool:
        """True for directories (not for symlinks to them)."""
        return self.kind is EntryKind.DIR

    @property
    def depth(self) -> int:
        """Number of directories between the listing root and this entry."""
        return self.relative_path.count("/")


@dataclass(slots=True, frozen=True)
class ExtensionStat:
    """Per-extension aggregation bucket."""

    count: int
    bytes: int


@dataclass(slots=True, frozen=True)
class Summary:
    """Aggregated size information over a set of entries."""

    total_bytes: int
    by_extension: dict[str, ExtensionStat] = field(default_factory=dict)
    file_count: int = 0
    dir_count: int = 0


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Result of one directory read: flat entries, or tree roots when ``tree`` is set."""

    root: str
    entries: tuple[Entry, ...] = ()
    summary: Summary | None = None
    error: str | None = None
    tree: bool = False

    @property
    def ok(self) -> bool:
        """True when the root could be read."""
        return self.error is None
