"""Start a filesystem scan on a background thread.

The MFT reader is used when enumeration data for an NTFS volume is
available and the process may use it; otherwise, or when it yields
nothing, the directory walker is used.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from typing import Iterable, Optional, Union

from disksleuth.live import LiveTree
from disksleuth.mft import is_mft_available, scan_mft
from disksleuth.parallel import scan_parallel
from disksleuth.permissions import is_elevated
from disksleuth.progress import ScanProgress, ScanTier

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class ScanHandle:
    """A running or finished scan: progress queue, live tree and cancellation."""

    def __init__(
        self,
        progress_queue: "queue.Queue[ScanProgress]",
        live_tree: LiveTree,
        cancel_event: threading.Event,
        thread: threading.Thread,
    ) -> None:
        self.progress_queue = progress_queue
        self.live_tree = live_tree
        self._cancel = cancel_event
        self._thread = thread

    def cancel(self) -> None:
        """Ask the scan to stop as soon as possible."""
        self._cancel.set()

    def is_cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._cancel.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the scan thread; return True if it has finished."""
        self._thread.join(timeout)
        return not self._thread.is_alive()


def _scan_worker(
    root_path: PathLike,
    progress,
    cancel: threading.Event,
    live_tree: LiveTree,
    mft_buffers: Optional[Iterable[bytes]] = None,
) -> None:
    log.info("starting scan of %s", os.fspath(root_path))
    elevated = is_elevated()

    if mft_buffers is not None and is_mft_available(root_path):
        log.info("using MFT reader")
        progress(ScanTier(is_mft=True, is_elevated=elevated))
        scan_mft(root_path, mft_buffers, progress, cancel, live_tree)
        if len(live_tree) == 0 and not cancel.is_set():
            log.info("MFT scan produced no results; falling back to directory walk")
            progress(ScanTier(is_mft=False, is_elevated=elevated))
            scan_parallel(root_path, progress, cancel, live_tree)
        return

    log.info("using directory walker")
    progress(ScanTier(is_mft=False, is_elevated=elevated))
    scan_parallel(root_path, progress, cancel, live_tree)


def start_scan(root_path: PathLike) -> ScanHandle:
    """Scan ``root_path`` on a background thread and return its handle."""
    progress_queue: "queue.Queue[ScanProgress]" = queue.Queue()
    cancel_event = threading.Event()
    live_tree = LiveTree()
    thread = threading.Thread(
        target=_scan_worker,
        args=(root_path, progress_queue.put, cancel_event, live_tree),
        name="disksleuth-scanner",
        daemon=True,
    )
    thread.start()
    return ScanHandle(progress_queue, live_tree, cancel_event, thread)