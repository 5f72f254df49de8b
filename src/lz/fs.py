"""File-system provider used by the snapshot builder."""

import os
import stat
from collections.abc import Hashable
from dataclasses import dataclass
from typing import Protocol

from lz.models import EntryKind


@dataclass(slots=True, frozen=True)
class ProviderEntry:
    """One raw directory child as enumerated by a provider."""

    name: str
    path: str


@dataclass(slots=True, frozen=True)
class Metadata:
    """Metadata of a path, read without following symlinks."""

    kind: EntryKind
    size: int
    modified_time: float
    hidden: bool = False  # Platform hidden attribute, independent of the name
    target_is_dir: bool = False
    readonly: bool = False

class FileSystemProvider(Protocol):
    """
    Raw file-system access.

    Every method raises OSError on failure; handles must not outlive a call.
    """

    def list_children(self, path: str) -> list[ProviderEntry]: ...

    def read_metadata(self, path: str) -> Metadata: ...

    def canonicalize(self, path: str) -> Hashable: ...


def _kind_from_mode(mode: int) -> EntryKind:
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat.S_ISDIR(mode):
        return EntryKind.DIR
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    return EntryKind.OTHER


class LocalFileSystem:
    """Provider backed by the local operating system."""

    def list_children(self, path: str) -> list[ProviderEntry]:
        """Enumerate direct children in the order the OS returns them."""
        with os.scandir(path) as it:
            return [ProviderEntry(name=entry.name, path=entry.path) for entry in it]

    def read_metadata(self, path: str) -> Metadata:
        """lstat a path; symlinks report their own metadata."""
        st = os.lstat(path)
        kind = _kind_from_mode(st.st_mode)
        hidden = bool(getattr(st, "st_file_attributes", 0) & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0))
        return Metadata(
            kind=kind,
            size=st.st_size if kind is EntryKind.FILE else 0,
            modified_time=st.st_mtime,
            hidden=hidden,
            # Broken links resolve to nothing and are not directories
            target_is_dir=kind is EntryKind.SYMLINK and os.path.isdir(path),
            readonly=not st.st_mode & (stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH),
        )

    def canonicalize(self, path: str) -> Hashable:
        """Identity of the directory a path resolves to, for loop detection."""
        st = os.stat(path)
        if st.st_ino:
            return (st.st_dev, st.st_ino)
        return os.path.realpath(path)


def count_children(provider: FileSystemProvider, path: str) -> tuple[int, int]:
    """
    Count the direct children of ``path`` as (directories, everything else).

    Hidden children are counted too; children that vanish while counting
    are not. Raises OSError if ``path`` itself cannot be listed.
    """
    dirs = files = 0
    for child in provider.list_children(path):
        try:
            kind = provider.read_metadata(child.path).kind
        except OSError:
            continue
        if kind is EntryKind.DIR:
            dirs += 1
        else:
            files += 1
    return dirs, files
