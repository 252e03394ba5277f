"""Check whether the process runs with administrator privileges."""

from __future__ import annotations

import os


def is_elevated() -> bool:
    """Return True when running as root, or as an elevated Windows process.

    On Windows, elevation is detected by trying to open the system drive's
    raw volume, which only an elevated process may do.
    """
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None:
        return geteuid() == 0
    drive = os.environ.get("SystemDrive", "C:")
    try:
        with open(f"\\\\.\\{drive}", "rb"):
            return True
    except OSError:
        return False