"""Test doubles for sessions and writers."""

from .recorder import Call, RecordingWriter

__all__ = ["Call", "RecordingWriter"]
