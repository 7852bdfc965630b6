"""Persistence sinks for registry records."""

from pet_registry.sinks.json_file import JsonSnapshotSink

__all__ = ["JsonSnapshotSink"]
