"""Deterministic hashing utilities"""

import hashlib
import json
from typing import Any


def hash_dict(obj: dict[str, Any]) -> str:
    """Create deterministic SHA256 hash from dict."""
    s = json.dumps(obj, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(s.encode()).hexdigest()
