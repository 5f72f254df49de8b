"""Size aggregation over entries."""

from collections.abc import Iterable, Iterator

from lz.models import Entry, ExtensionStat, Summary

NO_EXTENSION = ""


def extension_of(name: str) -> str:
    """Lower-cased text after the last '.', or NO_EXTENSION."""
    stem, dot, ext = name.rpartition(".")
    if not dot or not ext:
        return NO_EXTENSION
    return ext.lower()


def aggregation_entries(entries: Iterable[Entry]) -> Iterator[Entry]:
    """
    Flatten a tree depth-first for aggregation.

    A directory whose children are present is represented by them only, so
    its (du) size is not counted on top of theirs. Flat lists pass through.
    """
    for entry in entries:
        if entry.children:
            yield from aggregation_entries(entry.children)
        else:
            yield entry


def summarize(entries: Iterable[Entry]) -> Summary:
    """
    Aggregate a flat sequence of entries.

    Directories add only their size_bytes (non-zero with --du) and never
    appear in by_extension; every other entry is bucketed by extension.
    """
    total = 0
    files = 0
    dirs = 0
    buckets: dict[str, list[int]] = {}
    for entry in entries:
        total += entry.size_bytes
        if entry.is_dir:
            dirs += 1
            continue
        files += 1
        bucket = buckets.setdefault(extension_of(entry.name), [0, 0])
        bucket[0] += 1
        bucket[1] += entry.size_bytes

    ordered = sorted(buckets.items(), key=lambda item: (-item[1][1], item[0]))
    return Summary(
        total_bytes=total,
        by_extension={ext: ExtensionStat(count=count, bytes=size) for ext, (count, size) in ordered},
        file_count=files,
        dir_count=dirs,
    )
