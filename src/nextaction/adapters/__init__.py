"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskStore, StoreError

__all__ = [
    "JsonTaskStore",
    "StoreError",
]
