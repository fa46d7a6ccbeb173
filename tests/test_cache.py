"""
Unit tests for cache module
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from kube_diagnostics.cache import CacheManager


class TestCacheManager(unittest.TestCase):
    """Test cache manager functionality"""

    def setUp(self):
        """Set up test cache directory"""
        self.test_cache_dir = Path(tempfile.mkdtemp())
        self.cache = CacheManager(cache_dir=self.test_cache_dir, enabled=True)

    def tearDown(self):
        """Clean up test cache directory"""
        if self.test_cache_dir.exists():
            shutil.rmtree(self.test_cache_dir)

    def test_cache_disabled(self):
        """Test cache when disabled"""
        cache = CacheManager(enabled=False)

        cache.put("key", "explanation")
        result = cache.get("key")

        self.assertIsNone(result)
        self.assertTrue(cache.is_disabled())

    def test_disable_after_use(self):
        """Test disable() turns an enabled cache into a pass-through"""
        self.cache.put("key", "explanation")
        self.cache.disable()

        self.assertIsNone(self.cache.get("key"))
        self.cache.put("other", "value")
        self.cache.enable()
        self.assertIsNone(self.cache.get("other"))
        self.assertEqual(self.cache.get("key"), "explanation")

    def test_cache_put_and_get(self):
        """Test basic cache put and get"""
        self.cache.put("key", "Error: pod pending. Solution: add nodes.")

        self.assertEqual(self.cache.get("key"), "Error: pod pending. Solution: add nodes.")

    def test_cache_miss(self):
        """Test cache miss"""
        self.assertIsNone(self.cache.get("nonexistent"))

    def test_memory_only_cache(self):
        """Test cache without a directory keeps entries in memory"""
        cache = CacheManager()

        cache.put("key", "value")

        self.assertEqual(cache.get("key"), "value")
        self.assertIsNone(cache.get_stats()["cache_dir"])

    def test_make_key_is_deterministic(self):
        """Test keys depend only on their parts"""
        key = CacheManager.make_key("noop", "prompt text")

        self.assertEqual(key, CacheManager.make_key("noop", "prompt text"))
        self.assertNotEqual(key, CacheManager.make_key("anthropic", "prompt text"))
        self.assertEqual(len(key), 64)

    def test_cache_persistence(self):
        """Test cache persistence to file"""
        self.cache.put("key", "persisted explanation")

        # Create new cache manager with same directory
        new_cache = CacheManager(cache_dir=self.test_cache_dir, enabled=True)

        self.assertEqual(new_cache.get("key"), "persisted explanation")

    def test_corrupted_cache_file_is_a_miss(self):
        """Test unreadable cache files are treated as misses"""
        (self.test_cache_dir / "broken.json").write_text("{not json", encoding="utf-8")

        self.assertIsNone(self.cache.get("broken"))

    def test_cache_clear(self):
        """Test cache clearing"""
        entries = [("k1", "v1"), ("k2", "v2"), ("k3", "v3")]

        for key, value in entries:
            self.cache.put(key, value)

        self.cache.clear()

        for key, _ in entries:
            self.assertIsNone(self.cache.get(key))

    def test_get_stats(self):
        """Test cache statistics"""
        self.cache.put("k1", "v1")
        self.cache.put("k2", "v2")

        stats = self.cache.get_stats()

        self.assertTrue(stats["enabled"])
        self.assertEqual(stats["memory_entries"], 2)
        self.assertGreaterEqual(stats["file_entries"], 2)
        self.assertEqual(stats["cache_dir"], str(self.test_cache_dir))

    def test_salt_is_persisted(self):
        """Test the masking salt is shared by caches on the same directory"""
        salt = self.cache.load_salt()

        self.assertEqual(len(salt), 16)
        self.assertEqual(CacheManager(cache_dir=self.test_cache_dir).load_salt(), salt)
        mode = os.stat(self.test_cache_dir / "salt").st_mode & 0o777
        self.assertEqual(mode, 0o600)

    def test_salt_is_not_a_cache_entry(self):
        """Test the salt file survives clear and is not counted"""
        salt = self.cache.load_salt()

        self.cache.clear()

        self.assertEqual(self.cache.get_stats()["file_entries"], 0)
        self.assertEqual(self.cache.load_salt(), salt)

    def test_no_salt_without_persistence(self):
        """Test memory-only and disabled caches have no persisted salt"""
        self.assertIsNone(CacheManager().load_salt())
        self.assertIsNone(CacheManager(cache_dir=self.test_cache_dir, enabled=False).load_salt())

    def test_unreadable_salt(self):
        """Test a corrupted salt file is ignored"""
        (self.test_cache_dir / "salt").write_text("not hex", encoding="utf-8")

        with self.assertLogs("kube_diagnostics.cache", level="WARNING"):
            self.assertIsNone(self.cache.load_salt())


if __name__ == "__main__":
    unittest.main()
