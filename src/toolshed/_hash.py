from __future__ import annotations

import hashlib


def hash_to_str(value: str) -> str:
    """Short stable digest of ``value``, safe to use as a file name."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:16]
