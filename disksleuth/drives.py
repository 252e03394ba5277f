"""Enumeration of local drives with their capacity and usage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

import psutil

from disksleuth.size import format_size

log = logging.getLogger(__name__)

_NETWORK_FILESYSTEMS = {"nfs", "nfs4", "cifs", "smbfs", "smb3", "sshfs", "fuse.sshfs", "afs", "9p"}
_OPTICAL_FILESYSTEMS = {"iso9660", "udf", "cdfs"}


class DriveType(Enum):
    """Drive type classification."""

    FIXED = "Fixed"
    REMOVABLE = "Removable"
    NETWORK = "Network"
    CDROM = "CD-ROM"
    UNKNOWN = "Unknown"

    def label(self) -> str:
        """Human-readable label."""
        return self.value


@dataclass(frozen=True)
class DriveInfo:
    """Information about a single drive."""

    path: str
    letter: str
    drive_type: DriveType
    label: str
    filesystem: str
    total_bytes: int
    free_bytes: int
    used_bytes: int
    usage_percent: float
    total_display: str
    free_display: str
    used_display: str

    @classmethod
    def from_usage(
        cls,
        path: str,
        drive_type: DriveType,
        label: str,
        filesystem: str,
        total_bytes: int,
        free_bytes: int,
    ) -> "DriveInfo":
        """Build a record, deriving used space, percentage and display strings."""
        used_bytes = max(total_bytes - free_bytes, 0)
        usage_percent = used_bytes / total_bytes * 100.0 if total_bytes > 0 else 0.0
        return cls(
            path=path,
            letter=path.rstrip("\\") or path,
            drive_type=drive_type,
            label=label,
            filesystem=filesystem,
            total_bytes=total_bytes,
            free_bytes=free_bytes,
            used_bytes=used_bytes,
            usage_percent=usage_percent,
            total_display=format_size(total_bytes),
            free_display=format_size(free_bytes),
            used_display=format_size(used_bytes),
        )


def _classify(opts: str, fstype: str) -> DriveType:
    tokens = {t.strip().lower() for t in opts.split(",")}
    if "remote" in tokens:
        return DriveType.NETWORK
    if "cdrom" in tokens:
        return DriveType.CDROM
    if "removable" in tokens:
        return DriveType.REMOVABLE
    if "fixed" in tokens:
        return DriveType.FIXED
    fs = fstype.lower()
    if fs in _NETWORK_FILESYSTEMS:
        return DriveType.NETWORK
    if fs in _OPTICAL_FILESYSTEMS:
        return DriveType.CDROM
    if not fs:
        return DriveType.UNKNOWN
    return DriveType.FIXED


def enumerate_drives() -> List[DriveInfo]:
    """List local drives; network drives are left out.

    A drive whose usage cannot be read is reported with zero capacity.
    """
    drives: List[DriveInfo] = []
    try:
        partitions = psutil.disk_partitions(all=False)
    except OSError as exc:
        log.warning("cannot list partitions: %s", exc)
        return drives

    for part in partitions:
        drive_type = _classify(part.opts or "", part.fstype or "")
        if drive_type is DriveType.NETWORK:
            continue
        try:
            usage = psutil.disk_usage(part.mountpoint)
            total, free = usage.total, usage.free
        except OSError:
            total, free = 0, 0
        drives.append(
            DriveInfo.from_usage(
                path=part.mountpoint,
                drive_type=drive_type,
                label="",
                filesystem=part.fstype or "",
                total_bytes=total,
                free_bytes=free,
            )
        )
    return drives