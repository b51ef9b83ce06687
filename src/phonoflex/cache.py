"""Bounded memo of resolved words, with optional JSON snapshots on disk."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from phonoflex.types import ResolutionResult

logger = logging.getLogger(__name__)

CACHE_DIR = Path(os.environ.get("PHONOFLEX_CACHE_DIR", "~/.cache/phonoflex")).expanduser()

DEFAULT_MAX_SIZE = 1000


def default_snapshot_path() -> Path:
    return CACHE_DIR / "results.json"


def _atomic_write(target: Path, data: bytes) -> None:
    """Write data to target atomically via temp file + rename."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except Exception:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


class ResultCache:
    """Insertion-ordered word -> ResolutionResult memo.

    Once ``max_size`` entries are held, each new key evicts the
    oldest-inserted one. Updating an existing key keeps its position.
    Negative results (transcription None) are stored like any other.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: dict[str, ResolutionResult] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: str) -> bool:
        return word in self._entries

    def get(self, word: str) -> ResolutionResult | None:
        """Return the cached result, or None on a miss."""
        return self._entries.get(word)

    def put(self, word: str, result: ResolutionResult) -> None:
        with self._lock:
            if word not in self._entries and len(self._entries) >= self.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"Evicted {oldest!r} from result cache")
            self._entries[word] = result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict:
        negative = sum(1 for r in self._entries.values() if not r.resolved)
        return {"size": len(self._entries), "max_size": self.max_size, "negative": negative}

    # --- Persistence ---

    def save(self, path: Path | None = None) -> Path:
        """Write a JSON snapshot, oldest entry first. Returns the path written."""
        path = Path(path) if path else default_snapshot_path()
        with self._lock:
            payload = {
                "max_size": self.max_size,
                "entries": [r.to_dict() for r in self._entries.values()],
            }
        _atomic_write(path, json.dumps(payload, ensure_ascii=False).encode("utf-8"))
        logger.info(f"Saved {len(payload['entries'])} cached results to {path}")
        return path

    def load(self, path: Path | None = None) -> int:
        """Merge a snapshot into this cache. Returns the number of entries read.

        Missing or unreadable snapshots are treated as empty.
        """
        path = Path(path) if path else default_snapshot_path()
        if not path.exists():
            return 0
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            results = [ResolutionResult.from_dict(e) for e in data.get("entries", [])]
        except (json.JSONDecodeError, OSError, KeyError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable cache snapshot {path}: {e}")
            return 0
        for result in results:
            self.put(result.word, result)
        logger.info(f"Cache hit: loaded {len(results)} results from {path}")
        return len(results)
