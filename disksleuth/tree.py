"""Arena-backed file tree with bottom-up size aggregation.

Nodes live in a flat list and refer to each other by integer index.
Children of a node form a singly linked list through ``first_child`` and
``next_sibling``; new children are prepended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional

LARGEST_FILES_LIMIT = 100


@dataclass
class FileNode:
    """A single file or directory in the tree."""

    name: str
    size: int = 0
    allocated_size: int = 0
    is_dir: bool = False
    parent: Optional[int] = None
    first_child: Optional[int] = None
    next_sibling: Optional[int] = None
    descendant_count: int = 0
    modified: Optional[datetime] = None
    percent_of_parent: float = 0.0
    is_error: bool = False

    @classmethod
    def new_file(cls, name: str, size: int, parent: Optional[int]) -> "FileNode":
        """Create a file node whose allocated size equals its logical size."""
        return cls(name=name, size=size, allocated_size=size, parent=parent)

    @classmethod
    def new_dir(cls, name: str, parent: Optional[int]) -> "FileNode":
        """Create an empty directory node."""
        return cls(name=name, is_dir=True, parent=parent)

    @classmethod
    def new_error(cls, name: str, is_dir: bool, parent: Optional[int]) -> "FileNode":
        """Create a placeholder for an entry that could not be read."""
        return cls(name=name, is_dir=is_dir, parent=parent, is_error=True)


@dataclass
class FileTree:
    """The complete file tree produced by a scan."""

    nodes: List[FileNode] = field(default_factory=list)
    roots: List[int] = field(default_factory=list)
    total_size: int = 0
    largest_files: List[int] = field(default_factory=list)

    def _check(self, index: int) -> int:
        if not 0 <= index < len(self.nodes):
            raise IndexError(f"node index {index} out of range")
        return index

    def add_node(self, node: FileNode) -> int:
        """Append a node to the arena and return its index."""
        self.nodes.append(node)
        return len(self.nodes) - 1

    def add_root(self, name: str) -> int:
        """Add a root directory and return its index."""
        idx = self.add_node(FileNode.new_dir(name, None))
        self.roots.append(idx)
        return idx

    def add_child(self, parent: int, child: int) -> None:
        """Attach ``child`` to ``parent`` at the head of its child list."""
        parent_node = self.nodes[self._check(parent)]
        child_node = self.nodes[self._check(child)]
        child_node.next_sibling = parent_node.first_child
        child_node.parent = parent
        parent_node.first_child = child

    def aggregate_sizes(self) -> None:
        """Compute directory sizes, file counts, percentages and largest files.

        Children are always stored after their parent, so a reverse pass sees
        every child before its parent. Safe to call repeatedly.
        """
        for node in self.nodes:
            if node.is_dir:
                node.size = 0
                node.allocated_size = 0
                node.descendant_count = 0

        for node in reversed(self.nodes):
            if node.parent is None:
                continue
            parent = self.nodes[node.parent]
            parent.size += node.size
            parent.allocated_size += node.allocated_size
            parent.descendant_count += node.descendant_count if node.is_dir else 1

        for node in self.nodes:
            denominator = (
                self.nodes[node.parent].size if node.parent is not None else node.size
            )
            node.percent_of_parent = (
                node.size / denominator * 100.0 if denominator > 0 else 0.0
            )

        self.total_size = sum(self.nodes[r].size for r in self.roots)
        self._compute_largest_files(LARGEST_FILES_LIMIT)

    def _compute_largest_files(self, n: int) -> None:
        files = [i for i, node in enumerate(self.nodes) if not node.is_dir]
        files.sort(key=lambda i: self.nodes[i].size, reverse=True)
        self.largest_files = files[:n]

    def _ancestry(self, index: int) -> Iterator[int]:
        current: Optional[int] = self._check(index)
        while current is not None:
            yield current
            current = self.nodes[current].parent

    def full_path(self, index: int) -> str:
        """Rebuild a node's full path, joined with backslashes."""
        names = [self.nodes[i].name for i in self._ancestry(index)]
        return "\\".join(reversed(names))

    def _iter_children(self, parent: int) -> Iterator[int]:
        child = self.nodes[self._check(parent)].first_child
        while child is not None:
            yield child
            child = self.nodes[child].next_sibling

    def children(self, parent: int) -> List[int]:
        """Direct children in list order (most recently added first)."""
        return list(self._iter_children(parent))

    def children_sorted_by_size(self, parent: int) -> List[int]:
        """Direct children, directories first, then by size descending."""
        return sorted(
            self._iter_children(parent),
            key=lambda i: (not self.nodes[i].is_dir, -self.nodes[i].size),
        )

    def node(self, index: int) -> FileNode:
        """Return the node at ``index``."""
        return self.nodes[self._check(index)]

    def __len__(self) -> int:
        return len(self.nodes)