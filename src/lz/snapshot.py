"""Snapshot builder: turns a root path into a filtered list or tree of entries."""

import logging
import os
from collections.abc import Hashable
from dataclasses import replace

from lz.config import SnapshotOptions
from lz.fs import FileSystemProvider, LocalFileSystem, Metadata
from lz.matching import GlobMatcher
from lz.models import Entry, EntryKind, Snapshot

logger = logging.getLogger(__name__)


def is_hidden(name: str, metadata: Metadata | None = None) -> bool:
    """Dotfiles, and anything the platform flags as hidden."""
    if name.startswith("."):
        return True
    return metadata is not None and metadata.hidden


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class SnapshotBuilder:
    """
    Builds Snapshots through a file-system provider.

    File-system failures never escape: an unreadable root produces a Snapshot
    with ``error`` set, an unreadable child is left out. Only configuration
    errors (see SnapshotOptions.validate) are raised.
    """

    def __init__(self, provider: FileSystemProvider | None = None) -> None:
        """
        Initialize the SnapshotBuilder.

        Args:
            provider: File-system access; defaults to the local file system.
        """
        self._provider = provider if provider is not None else LocalFileSystem()

    @property
    def provider(self) -> FileSystemProvider:
        """The provider used for every read."""
        return self._provider

    def build(self, root: str, options: SnapshotOptions) -> Snapshot:
        """Read ``root`` once and return a fresh Snapshot."""
        matcher = options.validate()
        root = os.fspath(root)
        try:
            metadata = self._provider.read_metadata(root)
        except OSError as exc:
            logger.info("Cannot read %s: %s", root, _reason(exc))
            return Snapshot(root=root, error=f"Failed to read metadata for {root}: {_reason(exc)}")

        if metadata.kind is not EntryKind.DIR and not metadata.target_is_dir:
            # A single file is listed as itself
            name = os.path.basename(os.path.normpath(root)) or root
            entry = Entry(
                name=name,
                kind=metadata.kind,
                size_bytes=metadata.size,
                modified_time=metadata.modified_time,
                relative_path=name,
                readonly=metadata.readonly,
            )
            return Snapshot(root=root, entries=(entry,))

        walk = _Walk(self._provider, options, matcher)
        try:
            if options.recursive:
                identity = walk.identity(root)
                ancestors = frozenset() if identity is None else frozenset({identity})
                entries = walk.tree(root, "", ancestors)
            else:
                entries = walk.flat(root)
        except OSError as exc:
            logger.info("Cannot list %s: %s", root, _reason(exc))
            return Snapshot(root=root, error=f"Failed to read {root}: {_reason(exc)}", tree=options.recursive)
        return Snapshot(root=root, entries=entries, tree=options.recursive)


class _Walk:
    """State of one build: options, compiled filter and the du memo."""

    def __init__(
        self,
        provider: FileSystemProvider,
        options: SnapshotOptions,
        matcher: GlobMatcher | None,
    ) -> None:
        self._provider = provider
        self._options = options
        self._matcher = matcher
        self._du_cache: dict[str, int] = {}

    def identity(self, path: str) -> Hashable | None:
        try:
            return self._provider.canonicalize(path)
        except OSError:
            return None

    def read(self, path: str, prefix: str) -> list[tuple[Entry, str]]:
        """
        Read the visible children of ``path``.

        Raises OSError only when ``path`` itself cannot be listed.
        """
        include_hidden = self._options.include_hidden
        out: list[tuple[Entry, str]] = []
        for child in self._provider.list_children(path):
            if not include_hidden and is_hidden(child.name):
                continue
            try:
                metadata = self._provider.read_metadata(child.path)
            except OSError as exc:
                logger.debug("Skipping %s: %s", child.path, _reason(exc))
                continue
            if not include_hidden and is_hidden(child.name, metadata):
                continue
            entry = Entry(
                name=child.name,
                kind=metadata.kind,
                size_bytes=metadata.size,
                modified_time=metadata.modified_time,
                relative_path=prefix + child.name,
                target_is_dir=metadata.target_is_dir,
                readonly=metadata.readonly,
            )
            if self._options.compute_du and entry.kind is EntryKind.DIR:
                entry = replace(entry, size_bytes=self.disk_usage(child.path, frozenset()))
            out.append((entry, child.path))
        return out

    def keep(self, entry: Entry) -> bool:
        """Visibility filters and the glob, applied to one entry on its own."""
        if self._options.only_dirs and entry.kind is not EntryKind.DIR:
            return False
        if self._options.only_files and (entry.kind is EntryKind.DIR or entry.target_is_dir):
            return False
        if self._matcher is not None and not self._matcher.matches(entry.relative_path):
            return False
        return True

    def flat(self, root: str) -> tuple[Entry, ...]:
        return tuple(entry for entry, _ in self.read(root, "") if self.keep(entry))

    def _descends(self, entry: Entry) -> bool:
        if entry.kind is EntryKind.DIR:
            return True
        return entry.kind is EntryKind.SYMLINK and entry.target_is_dir and self._options.follow_links

    def tree(self, path: str, prefix: str, ancestors: frozenset[Hashable]) -> tuple[Entry, ...]:
        """
        Build tree nodes for the children of ``path``.

        ``ancestors`` holds the identities of the directories on the current
        descent path; a child already in it is kept as a leaf.
        """
        nodes: list[Entry] = []
        for entry, child_path in self.read(path, prefix):
            if not self._descends(entry):
                if self.keep(entry):
                    nodes.append(entry)
                continue

            children: tuple[Entry, ...] = ()
            identity = self.identity(child_path)
            if identity is None or identity in ancestors:
                logger.debug("Not descending into %s: directory loop", child_path)
            else:
                try:
                    children = self.tree(child_path, entry.relative_path + "/", ancestors | {identity})
                except OSError as exc:
                    logger.debug("Cannot list %s: %s", child_path, _reason(exc))

            if children or self.keep(entry):
                nodes.append(replace(entry, children=children))
        return tuple(nodes)

    def disk_usage(self, path: str, ancestors: frozenset[Hashable]) -> int:
        """Recursive size of the regular files below ``path``; links are not followed."""
        cached = self._du_cache.get(path)
        if cached is not None:
            return cached
        identity = self.identity(path)
        if identity is None or identity in ancestors:
            return 0
        ancestors = ancestors | {identity}

        include_hidden = self._options.include_hidden
        total = 0
        try:
            children = self._provider.list_children(path)
        except OSError as exc:
            logger.debug("du: cannot list %s: %s", path, _reason(exc))
            children = []
        for child in children:
            if not include_hidden and is_hidden(child.name):
                continue
            try:
                metadata = self._provider.read_metadata(child.path)
            except OSError:
                continue
            if not include_hidden and metadata.hidden:
                continue
            if metadata.kind is EntryKind.FILE:
                total += metadata.size
            elif metadata.kind is EntryKind.DIR:
                total += self.disk_usage(child.path, ancestors)
        self._du_cache[path] = total
        return total
