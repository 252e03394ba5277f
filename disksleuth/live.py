"""A file tree shared between the scanner thread and its readers."""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from disksleuth.tree import FileTree


class LiveTree:
    """Thread-safe holder of a :class:`FileTree` that grows during a scan.

    The scanner takes the lock briefly while adding nodes; readers take it
    while they look at the tree.
    """

    def __init__(self, tree: Optional[FileTree] = None) -> None:
        self._tree = tree if tree is not None else FileTree()
        self._lock = threading.RLock()

    @contextmanager
    def read(self) -> Iterator[FileTree]:
        """Hold the lock and yield the current tree for reading."""
        with self._lock:
            yield self._tree

    @contextmanager
    def write(self) -> Iterator[FileTree]:
        """Hold the lock and yield the current tree for modification."""
        with self._lock:
            yield self._tree

    def replace(self, tree: FileTree) -> None:
        """Swap in a completely built tree."""
        with self._lock:
            self._tree = tree

    def snapshot(self) -> FileTree:
        """Return an independent copy of the current tree."""
        with self._lock:
            return copy.deepcopy(self._tree)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tree)