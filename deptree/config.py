"""Runtime settings, read once from the environment."""

from __future__ import annotations

import os

from deptree.__version__ import __version__


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


REGISTRY_URL = os.environ.get("DEPTREE_REGISTRY_URL", "https://registry.npmjs.org").rstrip("/")
REQUEST_TIMEOUT = _env_float("DEPTREE_TIMEOUT", 10.0)
MAX_DEPTH = _env_int("DEPTREE_MAX_DEPTH", 3)
MAX_CONCURRENCY = max(1, _env_int("DEPTREE_CONCURRENCY", 20))

# 0 disables expiry / size bound respectively
CACHE_TTL = _env_float("DEPTREE_CACHE_TTL", 3600.0)
CACHE_MAX_ENTRIES = _env_int("DEPTREE_CACHE_MAX_ENTRIES", 10000)

USER_AGENT = f"deptree/{__version__}"
