"""Directory-walking scanner that works on any filesystem without privileges.

Nodes are written into a shared :class:`LiveTree` as they are found, so a
reader can show the tree growing while the scan runs.
"""

from __future__ import annotations

import logging
import os
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePath
from typing import Callable, Dict, Iterator, Optional, Union

from disksleuth.live import LiveTree
from disksleuth.progress import (
    ScanCancelled,
    ScanComplete,
    ScanError,
    ScanProgress,
    ScanUpdate,
)
from disksleuth.tree import FileNode

log = logging.getLogger(__name__)

ProgressSink = Callable[[ScanProgress], None]
PathLike = Union[str, "os.PathLike[str]"]

_CANCEL_CHECK_INTERVAL = 1000
_UPDATE_INTERVAL = 5000
_DRIVE_ROOT = re.compile(r"[A-Za-z]:[\\/]*")


@dataclass(frozen=True)
class _Entry:
    path: str
    name: str
    parent: Optional[str]
    is_dir: bool


@dataclass(frozen=True)
class _WalkFailure:
    path: str
    parent: Optional[str]
    error: OSError


def root_display_name(path: PathLike) -> str:
    """Display name of a scan root: ``C:`` for a drive root, else the folder name."""
    text = os.fspath(path)
    if _DRIVE_ROOT.fullmatch(text):
        return text[:2]
    name = PurePath(text).name
    if name and name not in (".", ".."):
        return name
    return text.rstrip("\\")


def _walk(root: str) -> Iterator[Union[_Entry, _WalkFailure]]:
    """Yield the root, then every entry below it, parents before children.

    Symbolic links are not followed. A directory that cannot be listed
    yields a failure in place of its contents.
    """
    yield _Entry(path=root, name=root_display_name(root), parent=None, is_dir=True)
    pending = [(root, None)]
    while pending:
        directory, parent = pending.pop()
        try:
            with os.scandir(directory) as listing:
                entries = sorted(listing, key=lambda e: e.name)
        except OSError as exc:
            yield _WalkFailure(path=directory, parent=parent, error=exc)
            continue
        subdirs = []
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            yield _Entry(path=entry.path, name=entry.name, parent=directory, is_dir=is_dir)
            if is_dir:
                subdirs.append((entry.path, directory))
        pending.extend(reversed(subdirs))


def _modified(timestamp: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError):
        return None


def scan_parallel(
    root_path: PathLike,
    progress: ProgressSink,
    cancel: threading.Event,
    live_tree: LiveTree,
) -> None:
    """Walk ``root_path`` and add every entry to ``live_tree``.

    Entries that cannot be read become error placeholder nodes and are
    reported as :class:`ScanError`. Cancellation is checked every 1000
    entries; live sizes are aggregated and reported every 5000.
    """
    start = time.monotonic()
    root = os.fspath(root_path)
    error_count = 0

    with live_tree.write() as tree:
        root_idx = tree.add_root(root_display_name(root))

    dir_map: Dict[str, int] = {root: root_idx}
    files_found = 0
    dirs_found = 1
    total_size = 0
    counter = 0

    for item in _walk(root):
        counter += 1
        if counter % _CANCEL_CHECK_INTERVAL == 0 and cancel.is_set():
            progress(ScanCancelled())
            return

        if isinstance(item, _WalkFailure):
            error_count += 1
            parent_idx = dir_map.get(item.parent) if item.parent is not None else None
            if parent_idx is not None:
                name = os.path.basename(item.path.rstrip("\\/")) or "<access denied>"
                with live_tree.write() as tree:
                    idx = tree.add_node(FileNode.new_error(name, True, parent_idx))
                    tree.add_child(parent_idx, idx)
            progress(ScanError(path=item.path, message=str(item.error)))
            continue

        if item.parent is None:
            continue

        parent_idx = dir_map[item.parent]

        if item.is_dir:
            with live_tree.write() as tree:
                idx = tree.add_node(FileNode.new_dir(item.name, parent_idx))
                tree.add_child(parent_idx, idx)
            dir_map[item.path] = idx
            dirs_found += 1
        else:
            try:
                st = os.lstat(item.path)
            except OSError as exc:
                error_count += 1
                with live_tree.write() as tree:
                    idx = tree.add_node(FileNode.new_error(item.name, False, parent_idx))
                    tree.add_child(parent_idx, idx)
                progress(ScanError(path=item.path, message=str(exc)))
                continue

            node = FileNode.new_file(item.name, st.st_size, parent_idx)
            node.modified = _modified(st.st_mtime)
            with live_tree.write() as tree:
                idx = tree.add_node(node)
                tree.add_child(parent_idx, idx)
            files_found += 1
            total_size += st.st_size

        if counter % _UPDATE_INTERVAL == 0:
            with live_tree.write() as tree:
                tree.aggregate_sizes()
            progress(
                ScanUpdate(
                    files_found=files_found,
                    dirs_found=dirs_found,
                    total_size=total_size,
                    current_path=item.path,
                )
            )

    log.debug(
        "walk complete: %d files, %d dirs in %.3fs; aggregating",
        files_found, dirs_found, time.monotonic() - start,
    )
    with live_tree.write() as tree:
        tree.aggregate_sizes()

    duration = time.monotonic() - start
    log.debug("aggregation complete, total %.3fs", duration)
    progress(ScanComplete(duration=duration, error_count=error_count))