"""Transcription stores: word -> ``/ipa/`` lookups the resolver can sit on.

``MemoryStore`` answers synchronously from a resident dict.
``ChunkedStore`` keeps a small core dict resident and pulls the rest of
the dictionary in from alphabetical chunk files on demand.
"""

import asyncio
import inspect
import json
import logging
from pathlib import Path

from phonoflex.transcription import arpabet_to_transcription, is_well_formed

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> dict:
    """Read a JSON object from disk, returning {} if missing or corrupt."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"Dictionary file not found: {path}")
        return {}
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not read dictionary file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Dictionary file {path} is not a JSON object")
        return {}
    return data


class MemoryStore:
    """Fully resident dictionary with synchronous lookups."""

    def __init__(self, entries: dict[str, str] | None = None):
        self._entries = {k.lower(): v for k, v in (entries or {}).items()}

    @classmethod
    def from_json(cls, path: Path) -> "MemoryStore":
        store = cls(_read_json(Path(path)))
        logger.info(f"Loaded {len(store)} words from {path}")
        return store

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self._entries

    def lookup(self, word: str) -> str | None:
        return self._entries.get(word.lower().strip())

    __call__ = lookup


class ChunkedStore:
    """Core dictionary plus lazily loaded chunks.

    Layout under *root*::

        core.json           {"word": "/ipa/", ...}
        chunk-index.json    {"chunk-01": {"start": "aa", "end": "bz"}, ...}
        chunks/chunk-01.json
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._core: dict[str, str] | None = None
        self._index: dict[str, dict] | None = None
        self._chunks: dict[str, dict[str, str]] = {}
        self._load_lock = asyncio.Lock()

    async def _load_file(self, path: Path) -> dict:
        return await asyncio.to_thread(_read_json, path)

    async def _ensure_core(self) -> None:
        if self._core is None:
            self._core = await self._load_file(self.root / "core.json")
            logger.info(f"Loaded {len(self._core)} words from core dictionary")
        if self._index is None:
            self._index = await self._load_file(self.root / "chunk-index.json")
            logger.info(f"Loaded chunk index with {len(self._index)} chunks")

    def _chunk_for(self, word: str) -> str | None:
        for chunk_id, info in (self._index or {}).items():
            try:
                if info["start"] <= word <= info["end"]:
                    return chunk_id
            except (KeyError, TypeError):
                continue
        return None

    async def _load_chunk(self, chunk_id: str) -> dict[str, str]:
        if chunk_id not in self._chunks:
            data = await self._load_file(self.root / "chunks" / f"{chunk_id}.json")
            self._chunks[chunk_id] = data
            logger.info(f"Loaded chunk {chunk_id} with {len(data)} words")
        return self._chunks[chunk_id]

    async def lookup(self, word: str) -> str | None:
        normalized = word.lower().strip()
        if not normalized:
            return None
        async with self._load_lock:
            await self._ensure_core()
            if normalized in self._core:
                return self._core[normalized]
            chunk_id = self._chunk_for(normalized)
            if chunk_id is None:
                return None
            chunk = await self._load_chunk(chunk_id)
        return chunk.get(normalized)

    __call__ = lookup

    def stats(self) -> dict:
        return {
            "core_size": len(self._core or {}),
            "cached_chunks": len(self._chunks),
            "total_chunks": len(self._index or {}),
        }

    def clear(self) -> None:
        """Drop loaded chunks; the core stays resident."""
        self._chunks.clear()


class LayeredStore:
    """Chain of stores; the first one with an answer wins.

    Put hand-curated overrides first and the bulk dictionary last. A layer
    that raises or answers with a malformed transcription counts as a miss,
    so the layers behind it still get asked.
    """

    def __init__(self, *stores):
        self.stores = stores

    async def lookup(self, word: str) -> str | None:
        for store in self.stores:
            try:
                value = store(word)
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                logger.warning(f"{type(store).__name__} failed for {word!r}: {e}")
                continue
            if value is None:
                continue
            if not is_well_formed(value):
                logger.debug(f"Skipping malformed transcription for {word!r}: {value!r}")
                continue
            return value
        return None

    __call__ = lookup


def load_cmudict(path: Path) -> dict[str, str]:
    """Parse a CMU Pronouncing Dictionary file into word -> transcription.

    Only the first pronunciation of each word is kept; ``WORD(2)`` style
    variants are skipped. Lines with unknown phones are dropped.
    """
    entries: dict[str, str] = {}
    with open(path, encoding="latin-1") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith(";;;"):
                continue
            parts = line.split(None, 1)
            if len(parts) != 2:
                continue
            word, phones_str = parts
            if "(" in word:
                continue
            word = word.lower()
            if word in entries:
                continue
            transcription = arpabet_to_transcription(phones_str.split())
            if transcription:
                entries[word] = transcription
    logger.info(f"Parsed {len(entries)} words from CMU dict {path}")
    return entries
