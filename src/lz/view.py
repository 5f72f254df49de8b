"""Presentation-neutral view model and the listing pipeline that produces it."""

import json
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from lz.config import SnapshotOptions, ViewOptions
from lz.models import Entry, Snapshot, Summary
from lz.snapshot import SnapshotBuilder
from lz.sorting import order_entries, sort_tree
from lz.summary import aggregation_entries, summarize


@dataclass(slots=True, frozen=True)
class ViewModel:
    """Everything a renderer needs: root, ordered entries (or tree), summary, error."""

    root: str
    entries: tuple[Entry, ...]
    summary: Summary | None
    error: str | None
    tree: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "ViewModel":
        return cls(
            root=snapshot.root,
            entries=snapshot.entries,
            summary=snapshot.summary,
            error=snapshot.error,
            tree=snapshot.tree,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; tree nodes nest their children under "entries"."""
        return {
            "root": self.root,
            "entries": [entry_to_dict(entry) for entry in self.entries],
            "summary": summary_to_dict(self.summary) if self.summary is not None else None,
            "error": self.error,
        }

    def to_json(self, pretty: bool = True) -> str:
        if pretty:
            return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        return json.dumps(self.to_dict(), ensure_ascii=False)


def format_timestamp(seconds: float) -> str:
    """RFC 3339 UTC timestamp, e.g. 2024-05-01T12:00:00Z."""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def entry_to_dict(entry: Entry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": entry.name,
        "kind": entry.kind.value,
        "size": entry.size_bytes,
        "modified": format_timestamp(entry.modified_time),
        "path": entry.relative_path,
    }
    if entry.children is not None:
        data["entries"] = [entry_to_dict(child) for child in entry.children]
    return data


def summary_to_dict(summary: Summary) -> dict[str, Any]:
    return {
        "total_bytes": summary.total_bytes,
        "by_extension": {
            ext: {"count": stat.count, "bytes": stat.bytes} for ext, stat in summary.by_extension.items()
        },
    }


def build_snapshot(
    builder: SnapshotBuilder,
    root: str,
    snapshot_options: SnapshotOptions,
    view_options: ViewOptions,
) -> Snapshot:
    """Build, sort and (if requested) summarize one Snapshot."""
    snapshot = builder.build(root, snapshot_options)
    if not snapshot.ok:
        return snapshot

    if snapshot.tree:
        entries = sort_tree(snapshot.entries, view_options.sort_key, view_options.reverse, view_options.dirs_first)
    else:
        entries = order_entries(
            snapshot.entries, view_options.sort_key, view_options.reverse, view_options.dirs_first
        )
    summary = summarize(aggregation_entries(entries)) if view_options.summary else None
    return replace(snapshot, entries=entries, summary=summary)


def build_view_model(
    builder: SnapshotBuilder,
    root: str,
    snapshot_options: SnapshotOptions,
    view_options: ViewOptions,
) -> ViewModel:
    """Run the whole pipeline: path -> snapshot -> sort -> summary -> view model."""
    return ViewModel.from_snapshot(build_snapshot(builder, root, snapshot_options, view_options))


def flatten(entries: tuple[Entry, ...]) -> list[tuple[Entry, tuple[bool, ...]]]:
    """
    Depth-first walk of a tree for line-oriented renderers.

    Each entry comes with one flag per level, outermost first, telling
    whether the node on its path at that level is the last of its siblings.
    The final flag belongs to the entry itself.
    """
    out: list[tuple[Entry, tuple[bool, ...]]] = []

    def walk(nodes: tuple[Entry, ...], trail: tuple[bool, ...]) -> None:
        for index, node in enumerate(nodes):
            last = index == len(nodes) - 1
            out.append((node, trail + (last,)))
            if node.children:
                walk(node.children, trail + (last,))

    walk(entries, ())
    return out
