"""Disk space scanning, size aggregation, usage analysis and icon generation."""

__version__ = "1.0.1"