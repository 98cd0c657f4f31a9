import logging
import threading
import time
from collections import OrderedDict
from typing import Optional, Tuple

from deptree import config
from deptree.core.model import PackageMetadata


class MetadataCache:
    """
    In-memory store of registry answers keyed by "name@version".

    Shared by every resolution in the process. Entries expire after `ttl`
    seconds and the oldest entries are dropped once `max_entries` is reached;
    pass 0 to either to disable that bound.
    """

    def __init__(self, ttl: float = config.CACHE_TTL, max_entries: int = config.CACHE_MAX_ENTRIES, clock=time.monotonic) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, PackageMetadata]]" = OrderedDict()
        self._lock = threading.RLock()

    @staticmethod
    def key(name: str, version: str) -> str:
        return f"{name}@{version}"

    def get(self, key: str) -> Optional[PackageMetadata]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            stored_at, metadata = entry
            if self.ttl and self._clock() - stored_at > self.ttl:
                logging.debug(f"Cache entry expired: {key}")
                del self._entries[key]
                return None
            return metadata

    def put(self, key: str, metadata: PackageMetadata) -> None:
        with self._lock:
            # Same key always carries the same answer, last write wins
            self._entries.pop(key, None)
            self._entries[key] = (self._clock(), metadata)

            if self.max_entries:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logging.debug(f"Cache full, evicted {evicted}")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
