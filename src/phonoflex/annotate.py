"""Annotate running text with per-word transcriptions."""

import asyncio
import re
from dataclasses import dataclass

from phonoflex.inflect import Resolver
from phonoflex.types import OriginKind, ResolutionResult

# Two or more letters; apostrophes and hyphens allowed inside a word.
WORD_RE = re.compile(r"[A-Za-z](?:[A-Za-z'-]*[A-Za-z])?")

DEFAULT_BATCH_SIZE = 10


@dataclass
class Annotation:
    """One word occurrence in the source text."""
    word: str                   # as written
    start: int                  # character offset
    end: int
    transcription: str | None
    origin: OriginKind


def tokenize(text: str) -> list[tuple[str, int, int]]:
    """Return (word, start, end) for each word of two or more letters."""
    return [
        (m.group(), m.start(), m.end())
        for m in WORD_RE.finditer(text)
        if len(m.group()) >= 2
    ]


async def resolve_many(
    words: list[str], resolver: Resolver, batch_size: int = DEFAULT_BATCH_SIZE
) -> dict[str, ResolutionResult]:
    """Resolve unique lowercased words in concurrent batches."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    unique = list(dict.fromkeys(w.lower() for w in words))
    results: dict[str, ResolutionResult] = {}
    for i in range(0, len(unique), batch_size):
        batch = unique[i:i + batch_size]
        resolved = await asyncio.gather(*(resolver.resolve(w) for w in batch))
        results.update(zip(batch, resolved))
    return results


async def annotate_text(
    text: str, resolver: Resolver, batch_size: int = DEFAULT_BATCH_SIZE
) -> list[Annotation]:
    tokens = tokenize(text)
    results = await resolve_many([t[0] for t in tokens], resolver, batch_size)
    annotations = []
    for word, start, end in tokens:
        result = results[word.lower()]
        annotations.append(Annotation(
            word=word,
            start=start,
            end=end,
            transcription=result.transcription,
            origin=result.origin,
        ))
    return annotations


def format_annotations(annotations: list[Annotation]) -> str:
    """Return a human-readable string for console output."""
    lines = []
    for a in annotations:
        lines.append(f"{a.word:16} {a.transcription or '-'}")
    return "\n".join(lines)
