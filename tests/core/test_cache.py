import threading
import unittest

from deptree.core.cache import MetadataCache
from deptree.core.model import PackageMetadata


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestMetadataCache(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.cache = MetadataCache(ttl=60, max_entries=3, clock=self.clock)
        self.react = PackageMetadata("react", "18.2.0", {"loose-envify": "^1.1.0"})

    def test_key_format(self):
        self.assertEqual(MetadataCache.key("react", "18.2.0"), "react@18.2.0")
        self.assertEqual(MetadataCache.key("@types/node", "20.1.0"), "@types/node@20.1.0")

    def test_get_returns_stored_value(self):
        self.assertIsNone(self.cache.get("react@18.2.0"))

        self.cache.put("react@18.2.0", self.react)

        self.assertIs(self.cache.get("react@18.2.0"), self.react)
        self.assertIn("react@18.2.0", self.cache)

    def test_put_overwrites(self):
        newer = PackageMetadata("react", "18.2.0")
        self.cache.put("react@18.2.0", self.react)
        self.cache.put("react@18.2.0", newer)

        self.assertIs(self.cache.get("react@18.2.0"), newer)
        self.assertEqual(len(self.cache), 1)

    def test_entries_expire_after_ttl(self):
        self.cache.put("react@18.2.0", self.react)

        self.clock.now = 59
        self.assertIsNotNone(self.cache.get("react@18.2.0"))

        self.clock.now = 61
        self.assertIsNone(self.cache.get("react@18.2.0"))
        self.assertEqual(len(self.cache), 0)

    def test_zero_ttl_never_expires(self):
        cache = MetadataCache(ttl=0, max_entries=0, clock=self.clock)
        cache.put("react@18.2.0", self.react)

        self.clock.now = 10 ** 9
        self.assertIs(cache.get("react@18.2.0"), self.react)

    def test_oldest_entry_is_evicted_when_full(self):
        for i in range(4):
            self.cache.put(f"pkg-{i}@1.0.0", PackageMetadata(f"pkg-{i}", "1.0.0"))

        self.assertEqual(len(self.cache), 3)
        self.assertIsNone(self.cache.get("pkg-0@1.0.0"))
        self.assertIsNotNone(self.cache.get("pkg-3@1.0.0"))

    def test_concurrent_writes_of_same_key(self):
        cache = MetadataCache(ttl=0, max_entries=0)
        threads = [
            threading.Thread(target=cache.put, args=("react@18.2.0", PackageMetadata("react", "18.2.0")))
            for _ in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(cache), 1)
        self.assertEqual(cache.get("react@18.2.0").version, "18.2.0")

    def test_clear(self):
        self.cache.put("react@18.2.0", self.react)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
