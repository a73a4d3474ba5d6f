"""Adapters layer for Triage-Queue.

This module contains persistence adapters that implement Port interfaces
defined in the domain layer.
"""

from triage_queue.adapters.flat_file_codec import FlatFileCodec

__all__ = ["FlatFileCodec"]
