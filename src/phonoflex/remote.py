"""Remote dictionary fallback, rate limited and failure tolerant.

The remote API (dictionaryapi.dev by default) returns a JSON array of
entries, each with optional ``phonetic`` and ``phonetics[].text`` fields.
Every failure mode comes back as None so callers can cache the miss.
"""

import asyncio
import logging
import os
import time
from urllib.parse import quote

import httpx

from phonoflex.transcription import normalize_phonetic_text

logger = logging.getLogger(__name__)

API_URL = os.environ.get(
    "PHONOFLEX_API_URL", "https://api.dictionaryapi.dev/api/v2/entries/en"
)

DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_CONCURRENCY = 2
DEFAULT_MIN_INTERVAL = 0.25  # seconds between request starts


class RateLimiter:
    """FIFO admission gate with a concurrency ceiling and start spacing.

    Waiters queue on a lock (FIFO). Only the head of the queue competes
    for a concurrency slot, and it is admitted once ``min_interval`` has
    passed since the previous admission.

    Usage::

        async with limiter:
            await do_request()
    """

    def __init__(
        self,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock=time.monotonic,
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self.min_interval = max(0.0, min_interval)
        self._clock = clock
        self._gate = asyncio.Lock()
        self._slots = asyncio.Semaphore(max_concurrency)
        self._last_start: float | None = None
        self.active = 0
        self.waiting = 0

    async def acquire(self) -> None:
        self.waiting += 1
        try:
            async with self._gate:
                await self._slots.acquire()
                try:
                    if self._last_start is not None:
                        delay = self._last_start + self.min_interval - self._clock()
                        if delay > 0:
                            await asyncio.sleep(delay)
                except BaseException:
                    self._slots.release()
                    raise
                self._last_start = self._clock()
        finally:
            self.waiting -= 1
        self.active += 1

    def release(self) -> None:
        self.active -= 1
        self._slots.release()

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()


def extract_phonetic(payload: object) -> str | None:
    """Pull the first phonetic string out of a dictionary API response."""
    if not isinstance(payload, list):
        return None
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        for phonetic in entry.get("phonetics") or []:
            if isinstance(phonetic, dict) and phonetic.get("text"):
                normalized = normalize_phonetic_text(phonetic["text"])
                if normalized:
                    return normalized
        if entry.get("phonetic"):
            normalized = normalize_phonetic_text(entry["phonetic"])
            if normalized:
                return normalized
    return None


class FreeDictionaryClient:
    """Async client for the free dictionary API.

    Args:
        base_url: Entries endpoint; the word is appended as a path segment.
        timeout: Per-request timeout in seconds.
        limiter: Shared RateLimiter; one is created if omitted.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.limiter = limiter or RateLimiter()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def query(self, word: str) -> str | None:
        """Look up *word* remotely. Returns ``/ipa/`` or None."""
        normalized = word.lower().strip()
        if not normalized:
            return None
        url = f"{self.base_url}/{quote(normalized)}"

        async with self.limiter:
            try:
                # Caps the whole request; httpx timeouts apply per phase
                response = await asyncio.wait_for(
                    self._get_client().get(url), timeout=self.timeout
                )
            except (httpx.TimeoutException, asyncio.TimeoutError):
                logger.warning(f"Dictionary API timeout for {normalized!r}")
                return None
            except httpx.HTTPError as e:
                logger.warning(f"Dictionary API error for {normalized!r}: {e}")
                return None

        if response.status_code != 200:
            logger.debug(f"Dictionary API returned {response.status_code} for {normalized!r}")
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Dictionary API sent invalid JSON for {normalized!r}")
            return None

        ipa = extract_phonetic(payload)
        if ipa:
            logger.debug(f"Dictionary API: {normalized} -> {ipa}")
        return ipa

    __call__ = query

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FreeDictionaryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
