"""Snapshot loader module."""

from .snapshot import ISnapshotLoader, LoadReport, SnapshotLoader

__all__ = ["ISnapshotLoader", "LoadReport", "SnapshotLoader"]
