# src/cache/json_store.py - v1
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores each entry as an individual JSON file under CACHE_ROOT/<namespace>/.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from sproutintel.cache.base_cache_store import BaseCacheStore, Clock
from sproutintel.cache.models import CacheEntry
from sproutintel.core.errors import CacheUnavailable

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: Path | str, clock: Clock | None = None) -> None:
        super().__init__(clock)
        self._root = Path(cache_root).expanduser()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailable(f"cannot create cache root {self._root}: {e}") from e

    async def _read(self, key: str) -> CacheEntry | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", key, e)
            return None
        except OSError as e:
            raise CacheUnavailable(f"cannot read {path}: {e}") from e

    async def _write(self, key: str, entry: CacheEntry) -> None:
        path = self._entry_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise CacheUnavailable(f"cannot write {path}: {e}") from e

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key, grouped by namespace segment."""
        parts = key.split(":")
        folder = parts[1] if len(parts) > 2 else "default"
        safe_key = key.replace("/", "_").replace("\\", "_").replace(":", "_")
        return self._root / folder / f"{safe_key}.json"
