"""Post-scan analyses: largest files and stale (long-unmodified) files."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

from disksleuth.tree import FileTree

_SECONDS_PER_DAY = 86400


@dataclass
class StaleFile:
    """A file that has not been modified for a long time."""

    index: int
    path: str
    size: int
    last_modified: datetime
    age_days: int


@dataclass
class LargestFile:
    """One entry in the largest-files results."""

    index: int
    path: str
    size: int


def find_stale_files(tree: FileTree, min_age_days: int, max_results: int) -> List[StaleFile]:
    """Files not modified in the last ``min_age_days`` days, largest first.

    Files without a modification time, or with one in the future, are skipped.
    """
    now_naive = datetime.now()
    now_aware = datetime.now(timezone.utc)
    threshold = timedelta(days=min_age_days)

    stale: List[StaleFile] = []
    for i, node in enumerate(tree.nodes):
        if node.is_dir or node.modified is None:
            continue
        now = now_naive if node.modified.tzinfo is None else now_aware
        age = now - node.modified
        if age < timedelta(0) or age < threshold:
            continue
        stale.append(
            StaleFile(
                index=i,
                path=tree.full_path(i),
                size=node.size,
                last_modified=node.modified,
                age_days=int(age.total_seconds()) // _SECONDS_PER_DAY,
            )
        )

    stale.sort(key=lambda f: f.size, reverse=True)
    return stale[:max_results]


def top_files(tree: FileTree, n: int) -> List[LargestFile]:
    """The ``n`` largest files, read from the tree's aggregated cache."""
    return [
        LargestFile(index=idx, path=tree.full_path(idx), size=tree.node(idx).size)
        for idx in tree.largest_files[:n]
    ]