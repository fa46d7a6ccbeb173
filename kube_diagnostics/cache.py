"""
Explanation cache keyed on sanitized prompt fingerprints, with optional file persistence
"""

import hashlib
import json
import logging
import os
import secrets
import threading
import time
from pathlib import Path
from typing import Optional

SALT_FILE_NAME = "salt"
SALT_BYTES = 16


class CacheManager:
    """Caches AI explanations in memory and, optionally, on disk"""

    def __init__(self, cache_dir: Optional[Path] = None, enabled: bool = True):
        """
        Initialize cache manager

        Args:
            cache_dir: Directory for cache files. Entries are kept in memory only when omitted
            enabled: Whether caching is enabled
        """
        self.enabled = enabled
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self._memory_cache = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger("kube_diagnostics.cache")

        if self.enabled and self.cache_dir:
            self._ensure_cache_dir()

    def _ensure_cache_dir(self):
        """Create cache directory if it doesn't exist"""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.warning(f"Failed to create cache directory, keeping entries in memory: {e}")
            self.cache_dir = None

    def load_salt(self) -> Optional[bytes]:
        """
        Load the masking salt kept beside the cache files, creating it on first use

        Explanations are keyed on sanitized prompts, so a persistent cache only
        serves hits across runs when every run masks with the same salt.

        Returns:
            Salt bytes, or None when entries are not persisted
        """
        if not self.enabled or not self.cache_dir:
            return None

        salt_file = self.cache_dir / SALT_FILE_NAME
        try:
            if salt_file.exists():
                salt = bytes.fromhex(salt_file.read_text(encoding="utf-8").strip())
                if not salt:
                    raise ValueError("salt file is empty")
                return salt

            salt = secrets.token_bytes(SALT_BYTES)
            fd = os.open(salt_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(salt.hex())
            self.logger.debug(f"Created masking salt: {salt_file}")
            return salt
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to load masking salt, cached explanations will not be reused: {e}")
            return None

    @staticmethod
    def make_key(*parts: str) -> str:
        """Generate a deterministic cache key from prompt parts"""
        return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()

    def _get_cache_file(self, key: str) -> Path:
        """Get cache file path for key"""
        return self.cache_dir / f"{key}.json"

    def disable(self):
        """Turn the cache into a pass-through"""
        self.enabled = False

    def enable(self):
        self.enabled = True
        if self.cache_dir:
            self._ensure_cache_dir()

    def is_disabled(self) -> bool:
        return not self.enabled

    def get(self, key: str) -> Optional[str]:
        """
        Get cached explanation

        Args:
            key: Prompt fingerprint

        Returns:
            Cached value if found, None otherwise (always None when disabled)
        """
        if not self.enabled:
            return None

        with self._lock:
            if key in self._memory_cache:
                self.logger.debug(f"Cache hit (memory): {key[:12]}")
                return self._memory_cache[key]

        if not self.cache_dir:
            return None

        cache_file = self._get_cache_file(key)
        if cache_file.exists():
            try:
                with open(cache_file, "r", encoding="utf-8") as f:
                    entry = json.load(f)
                value = entry["data"]
            except (OSError, ValueError, KeyError) as e:
                self.logger.warning(f"Failed to read cache file: {e}")
                return None

            with self._lock:
                self._memory_cache[key] = value
            self.logger.debug(f"Cache hit (file): {key[:12]}")
            return value

        return None

    def put(self, key: str, value: str):
        """
        Cache an explanation

        Args:
            key: Prompt fingerprint
            value: Explanation text
        """
        if not self.enabled:
            return

        with self._lock:
            self._memory_cache[key] = value

        if not self.cache_dir:
            return

        entry = {"data": value, "cached_at": time.time()}
        try:
            with open(self._get_cache_file(key), "w", encoding="utf-8") as f:
                json.dump(entry, f)
            self.logger.debug(f"Cached: {key[:12]}")
        except OSError as e:
            self.logger.warning(f"Failed to write cache file: {e}")

    def clear(self):
        """Clear all cache"""
        with self._lock:
            self._memory_cache.clear()

        if self.cache_dir and self.cache_dir.exists():
            try:
                for cache_file in self.cache_dir.glob("*.json"):
                    cache_file.unlink()
                self.logger.info("Cache cleared")
            except OSError as e:
                self.logger.warning(f"Failed to clear cache: {e}")

    def get_stats(self) -> dict:
        """Get cache statistics"""
        with self._lock:
            memory_entries = len(self._memory_cache)

        stats = {
            "enabled": self.enabled,
            "memory_entries": memory_entries,
            "file_entries": 0,
            "cache_dir": str(self.cache_dir) if self.cache_dir else None,
        }

        if self.cache_dir and self.cache_dir.exists():
            try:
                stats["file_entries"] = len(list(self.cache_dir.glob("*.json")))
            except OSError:
                pass

        return stats
