"""Ordering of entries.

Sorting and the directories-first grouping are separate steps: the sort key
alone never moves directories ahead of files.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace

from lz.config import SortKey
from lz.models import Entry

_KEY_FUNCS: dict[SortKey, Callable[[Entry], object]] = {
    SortKey.NAME: lambda e: e.name.lower(),
    SortKey.SIZE: lambda e: -e.size_bytes,  # Largest first
    SortKey.AGE: lambda e: e.modified_time,  # Oldest first
}


def sort_entries(entries: Iterable[Entry], key: SortKey, reverse: bool = False) -> tuple[Entry, ...]:
    """
    Stable sort by ``key``.

    ``reverse`` is the exact reversal of the forward order (ties included),
    not a flipped comparator.
    """
    ordered = sorted(entries, key=_KEY_FUNCS[key])
    if reverse:
        ordered.reverse()
    return tuple(ordered)


def partition_dirs_first(entries: Iterable[Entry]) -> tuple[Entry, ...]:
    """Stable partition putting directories before everything else."""
    entries = tuple(entries)
    return tuple(e for e in entries if e.is_dir) + tuple(e for e in entries if not e.is_dir)


def order_entries(
    entries: Iterable[Entry],
    key: SortKey,
    reverse: bool = False,
    dirs_first: bool = True,
) -> tuple[Entry, ...]:
    """Sort, then optionally group directories first."""
    ordered = sort_entries(entries, key, reverse)
    return partition_dirs_first(ordered) if dirs_first else ordered


def sort_tree(
    entries: Iterable[Entry],
    key: SortKey,
    reverse: bool = False,
    dirs_first: bool = True,
) -> tuple[Entry, ...]:
    """Apply order_entries at every level of a tree."""
    nodes = []
    for entry in entries:
        if entry.children:
            entry = replace(entry, children=sort_tree(entry.children, key, reverse, dirs_first))
        nodes.append(entry)
    return order_entries(nodes, key, reverse, dirs_first)
