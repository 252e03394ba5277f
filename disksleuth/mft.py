"""Fast NTFS scanning from Master File Table enumeration records.

The volume's MFT is enumerated as a sequence of raw output buffers, each
holding an 8-byte "next start reference" header followed by packed
``USN_RECORD_V2`` entries. Records carry name, parent reference and
attributes but no size, so file sizes are read from the filesystem once
the tree has been wired up.
"""

from __future__ import annotations

import logging
import os
import struct
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import psutil

from disksleuth.live import LiveTree
from disksleuth.permissions import is_elevated
from disksleuth.progress import (
    ScanCancelled,
    ScanComplete,
    ScanError,
    ScanProgress,
    ScanUpdate,
)
from disksleuth.tree import FileNode, FileTree

log = logging.getLogger(__name__)

ProgressSink = Callable[[ScanProgress], None]
PathLike = Union[str, "os.PathLike[str]"]

FILE_ATTRIBUTE_DIRECTORY = 0x10
NTFS_ROOT_MFT_REF = 5
LAST_RESERVED_MFT_REF = 23
_REFERENCE_MASK = 0x0000_FFFF_FFFF_FFFF
_HEADER_LEN = 8
_MIN_RECORD_LEN = 60
_ENUM_UPDATE_INTERVAL = 50_000
_STAT_UPDATE_INTERVAL = 25_000


@dataclass(frozen=True)
class MftEntry:
    """One MFT record before it is placed in a tree."""

    file_ref: int
    parent_ref: int
    file_name: str
    is_dir: bool


def parse_usn_records(data: bytes) -> List[MftEntry]:
    """Decode the USN records in one enumeration output buffer.

    The first 8 bytes (the next start reference) are skipped. Malformed
    records are skipped; a zero or overrunning record length ends parsing.
    References are masked to their 48-bit record number.
    """
    entries: List[MftEntry] = []
    end = len(data)
    if end <= _HEADER_LEN:
        return entries

    offset = _HEADER_LEN
    while offset + 4 <= end:
        (record_len,) = struct.unpack_from("<I", data, offset)
        if record_len == 0 or offset + record_len > end:
            break
        if record_len < _MIN_RECORD_LEN:
            offset += record_len
            continue

        file_ref, parent_ref = struct.unpack_from("<QQ", data, offset + 8)
        (file_attrs,) = struct.unpack_from("<I", data, offset + 52)
        name_len, name_offset = struct.unpack_from("<HH", data, offset + 56)

        name_start = offset + name_offset
        name_end = name_start + name_len
        if name_len == 0 or name_end > offset + record_len:
            offset += record_len
            continue

        raw_name = data[name_start:name_start + (name_len // 2) * 2]
        entries.append(
            MftEntry(
                file_ref=file_ref & _REFERENCE_MASK,
                parent_ref=parent_ref & _REFERENCE_MASK,
                file_name=raw_name.decode("utf-16-le", errors="replace"),
                is_dir=bool(file_attrs & FILE_ATTRIBUTE_DIRECTORY),
            )
        )
        offset += record_len
    return entries


def _is_skipped(entry: MftEntry) -> bool:
    return entry.file_ref <= LAST_RESERVED_MFT_REF or entry.file_name.startswith("$")


def _disk_path(tree: FileTree, index: int, root_display: str, root_path: str) -> Optional[str]:
    """Filesystem path of a node, or None if its ancestry is cyclic."""
    names: List[str] = []
    seen = set()
    current = index
    while tree.nodes[current].parent is not None:
        if current in seen:
            return None
        seen.add(current)
        names.append(tree.nodes[current].name)
        current = tree.nodes[current].parent
    names.reverse()
    top = tree.nodes[current].name
    base = root_display if top == root_display else root_path
    base = base.rstrip("\\/") + os.sep
    return os.path.join(base, *names)


def build_tree_from_mft(
    records: Iterable[MftEntry],
    root_display: str,
    root_path: PathLike,
    progress: ProgressSink,
    cancel: threading.Event,
) -> Tuple[FileTree, int]:
    """Build and aggregate a tree from MFT records.

    Reserved records and ``$``-prefixed system files are left out; records
    whose parent is unknown are attached to the root. Returns the tree and
    the number of files whose metadata could not be read. If cancelled while
    reading sizes, the partly filled, unaggregated tree is returned.
    """
    records = list(records)
    tree = FileTree()
    root_idx = tree.add_root(root_display)
    ref_to_idx: Dict[int, int] = {NTFS_ROOT_MFT_REF: root_idx}

    for entry in records:
        if _is_skipped(entry):
            continue
        node = (
            FileNode.new_dir(entry.file_name, None)
            if entry.is_dir
            else FileNode.new_file(entry.file_name, 0, None)
        )
        ref_to_idx[entry.file_ref] = tree.add_node(node)

    for entry in records:
        if _is_skipped(entry):
            continue
        child_idx = ref_to_idx.get(entry.file_ref)
        if child_idx is None:
            continue
        parent_idx = ref_to_idx.get(entry.parent_ref, root_idx)
        tree.add_child(parent_idx, child_idx)

    root_path_str = os.fspath(root_path)
    total_files = sum(1 for node in tree.nodes if not node.is_dir)
    files_processed = 0
    error_count = 0

    for i, node in enumerate(tree.nodes):
        if cancel.is_set():
            return tree, error_count
        if node.is_dir:
            continue

        path = _disk_path(tree, i, root_display, root_path_str)
        try:
            if path is None:
                raise OSError(f"cyclic parent references at node {i}")
            st = os.stat(path)
        except OSError:
            error_count += 1
        else:
            node.size = st.st_size
            node.allocated_size = st.st_size
            node.modified = _mtime(st.st_mtime)

        files_processed += 1
        if files_processed % _STAT_UPDATE_INTERVAL == 0:
            percent = files_processed / max(total_files, 1) * 100.0
            progress(
                ScanUpdate(
                    files_found=files_processed,
                    dirs_found=0,
                    total_size=0,
                    current_path=(
                        f"Reading file sizes... {files_processed}/{total_files} "
                        f"({percent:.0f}%)"
                    ),
                )
            )

    tree.aggregate_sizes()
    return tree, error_count


def _mtime(timestamp: float):
    from datetime import datetime

    try:
        return datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError):
        return None


def _find_filesystem(root: str) -> Optional[str]:
    try:
        partitions = psutil.disk_partitions(all=True)
    except OSError:
        return None
    for part in partitions:
        if part.mountpoint.lower() == root.lower():
            return part.fstype
    return None


def is_mft_available(path: PathLike) -> bool:
    """Whether MFT scanning can be used for ``path``.

    Requires administrator privileges, a drive-letter path, an NTFS volume
    and that the raw volume can be opened.
    """
    path_str = os.fspath(path)
    if len(path_str) < 2 or not (path_str[0].isascii() and path_str[0].isalpha()):
        return False
    if path_str[1] != ":":
        return False
    if not is_elevated():
        log.debug("MFT not available: process is not elevated")
        return False

    root = f"{path_str[:2]}\\"
    fs_name = _find_filesystem(root)
    if fs_name != "NTFS":
        log.debug("MFT not available: filesystem is %s, not NTFS", fs_name)
        return False

    volume = f"\\\\.\\{path_str[0]}:"
    try:
        with open(volume, "rb"):
            pass
    except OSError as exc:
        log.debug("MFT not available: cannot open volume handle: %s", exc)
        return False
    log.info("MFT available for volume %s", path_str[:2])
    return True


def scan_mft(
    root_path: PathLike,
    buffers: Iterable[bytes],
    progress: ProgressSink,
    cancel: threading.Event,
    live_tree: LiveTree,
) -> None:
    """Scan a volume from its MFT enumeration buffers into ``live_tree``.

    ``buffers`` yields raw enumeration output buffers in order; a buffer of
    8 bytes or fewer ends the enumeration. An ``OSError`` while reading the
    buffers is reported as a :class:`ScanError` and leaves ``live_tree``
    untouched.
    """
    start = time.monotonic()
    path_str = os.fspath(root_path)
    if not path_str:
        raise ValueError("root path must not be empty")
    drive_letter = path_str[0]
    volume = f"\\\\.\\{drive_letter}:"

    records: List[MftEntry] = []
    files_found = 0
    dirs_found = 0

    try:
        for data in buffers:
            if cancel.is_set():
                progress(ScanCancelled())
                return
            if len(data) <= _HEADER_LEN:
                break
            for entry in parse_usn_records(data):
                records.append(entry)
                if entry.is_dir:
                    dirs_found += 1
                else:
                    files_found += 1
                if len(records) % _ENUM_UPDATE_INTERVAL == 0:
                    progress(
                        ScanUpdate(
                            files_found=files_found,
                            dirs_found=dirs_found,
                            total_size=0,
                            current_path=f"Reading MFT... {len(records)} records",
                        )
                    )
    except OSError as exc:
        log.error("failed to read MFT of %s: %s", volume, exc)
        progress(ScanError(path=volume, message=f"Failed to read volume: {exc}"))
        return

    log.info(
        "MFT enumeration complete: %d records (%d files, %d dirs)",
        len(records), files_found, dirs_found,
    )
    progress(
        ScanUpdate(
            files_found=files_found,
            dirs_found=dirs_found,
            total_size=0,
            current_path="Building file tree from MFT records...",
        )
    )

    root_display = f"{drive_letter.upper()}:"
    tree, error_count = build_tree_from_mft(records, root_display, Path(path_str), progress, cancel)

    if cancel.is_set():
        progress(ScanCancelled())
        return

    duration = time.monotonic() - start
    log.info("MFT scan complete. %d nodes in %.3fs", len(tree), duration)
    live_tree.replace(tree)
    progress(ScanComplete(duration=duration, error_count=error_count))