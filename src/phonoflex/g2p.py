"""Offline fallback: grapheme-to-phoneme conversion with g2p_en."""

import asyncio
import logging
import threading

from phonoflex.transcription import arpabet_to_transcription

logger = logging.getLogger(__name__)

_g2p = None
_g2p_lock = threading.Lock()


def _get_g2p():
    global _g2p
    with _g2p_lock:
        if _g2p is None:
            from g2p_en import G2p
            logger.info("Loading g2p_en model")
            _g2p = G2p()
    return _g2p


def _predict(word: str) -> list[str]:
    return _get_g2p()(word)


class G2pFallback:
    """Drop-in replacement for the remote fallback that never touches the network.

    Predicted pronunciations are less reliable than dictionary ones, so
    this only runs after every suffix rule has failed. The model runs in
    a worker thread so other lookups keep going meanwhile.
    """

    async def query(self, word: str) -> str | None:
        if not word.strip():
            return None
        raw = await asyncio.to_thread(_predict, word)
        # g2p_en returns a mix of phonemes and spaces; keep phonemes only
        phones = [p for p in raw if p.strip() and p[0].isalpha()]
        if not phones:
            return None
        transcription = arpabet_to_transcription(phones)
        if transcription is None:
            logger.debug(f"g2p_en produced unknown phones for {word!r}: {phones}")
        return transcription

    __call__ = query
