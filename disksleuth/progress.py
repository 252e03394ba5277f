"""Messages exchanged between the scanner thread and its consumer.

The scanned tree itself lives in a shared live tree; these messages carry
only counters and status flags.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class StartScan:
    """Command: start scanning a drive root or folder."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(os.fspath(self.path)))


@dataclass(frozen=True)
class CancelScan:
    """Command: cancel the current scan."""


@dataclass(frozen=True)
class ScanTier:
    """Which scanner is in use: MFT reader or parallel directory walk."""

    is_mft: bool
    is_elevated: bool


@dataclass(frozen=True)
class ScanUpdate:
    """Periodic update with running totals."""

    files_found: int
    dirs_found: int
    total_size: int
    current_path: str


@dataclass(frozen=True)
class ScanError:
    """A non-fatal error, such as access denied on one entry."""

    path: str
    message: str


@dataclass(frozen=True)
class ScanComplete:
    """The scan finished; ``duration`` is in seconds."""

    duration: float
    error_count: int


@dataclass(frozen=True)
class ScanCancelled:
    """The scan was cancelled."""


ScanCommand = Union[StartScan, CancelScan]
ScanProgress = Union[ScanTier, ScanUpdate, ScanError, ScanComplete, ScanCancelled]