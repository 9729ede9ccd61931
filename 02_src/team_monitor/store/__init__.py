"""Record store module."""

from .store import IRecordStore, RecordStore

__all__ = ["IRecordStore", "RecordStore"]
