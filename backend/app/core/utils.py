"""
Utility functions for the application.
"""
from contextlib import contextmanager
from typing import Any
import copy


def safe_filename(name: str, fallback: str = "file") -> str:
    """Strip path separators and control characters from a download name."""
    cleaned = "".join(ch for ch in name if ch not in '/\\:*?"<>|' and ord(ch) >= 32).strip()
    return cleaned or fallback


@contextmanager
def tentative_update(target: Any, *attrs: str):
    """
    Apply tentative state, roll back on failure.

    Snapshots the given attributes of ``target`` on entry. If the block
    raises, the attributes are restored to the snapshot and the exception
    propagates.
    """
    snapshot = {attr: copy.deepcopy(getattr(target, attr)) for attr in attrs}
    try:
        yield target
    except Exception:
        for attr, value in snapshot.items():
            setattr(target, attr, value)
        raise
