"""Inflection resolver: dictionary lookup with suffix-stripping fallback.

Resolution order for one word:

1. direct dictionary lookup
2. result cache (negative entries included)
3. suffix rules in fixed priority order, primary then alternative base
4. remote fallback, if one is configured
"""

import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from phonoflex.cache import ResultCache
from phonoflex.inflect.suffixes import (
    detect_ed,
    detect_er,
    detect_est,
    detect_ing,
    detect_ity,
    detect_ly,
    detect_s,
    detect_y,
)
from phonoflex.inflect.transform import (
    transform_ed,
    transform_er,
    transform_est,
    transform_ing,
    transform_ity,
    transform_ly,
    transform_s,
    transform_y,
)
from phonoflex.transcription import is_well_formed
from phonoflex.types import (
    Category,
    InflectionCandidate,
    OriginKind,
    ResolutionResult,
    RuleId,
)

logger = logging.getLogger(__name__)

# A store lookup may answer directly or hand back an awaitable.
Lookup = Callable[[str], str | None | Awaitable[str | None]]
RemoteLookup = Callable[[str], Awaitable[str | None]]

MIN_INFLECTED_LENGTH = 3

_DISALLOWED = re.compile(r"[^a-z'-]")


@dataclass(frozen=True)
class SuffixRule:
    """A detect/transform pair for one suffix category."""
    category: Category
    detect: Callable[[str], InflectionCandidate | None]
    transform: Callable[[str, RuleId], str | None]


# -ity before -y and -ly; -est before -er; -s last since it clashes most.
SUFFIX_RULES: tuple[SuffixRule, ...] = (
    SuffixRule(Category.ITY, detect_ity, transform_ity),
    SuffixRule(Category.LY, detect_ly, transform_ly),
    SuffixRule(Category.EST, detect_est, transform_est),
    SuffixRule(Category.ER, detect_er, transform_er),
    SuffixRule(Category.ING, detect_ing, transform_ing),
    SuffixRule(Category.ED, detect_ed, transform_ed),
    SuffixRule(Category.Y, detect_y, transform_y),
    SuffixRule(Category.S, detect_s, transform_s),
)


def normalize_word(word: str) -> str:
    """Lowercase, drop characters outside a-z ' -, trim edge apostrophes/hyphens."""
    if not isinstance(word, str):
        return ""
    cleaned = _DISALLOWED.sub("", word.strip().lower())
    return cleaned.strip("'-")


class Resolver:
    """Resolve surface words to transcriptions.

    Args:
        lookup: Transcription store capability, sync or async.
        remote: Async last-resort lookup (e.g. FreeDictionaryClient).
        cache: Memo for inflected, external and unresolved results.
        rules: Suffix rules, tried in order.
    """

    def __init__(
        self,
        lookup: Lookup,
        remote: RemoteLookup | None = None,
        cache: ResultCache | None = None,
        rules: tuple[SuffixRule, ...] = SUFFIX_RULES,
    ):
        self.lookup = lookup
        self.remote = remote
        self.cache = cache
        self.rules = rules

    async def _lookup(self, word: str) -> str | None:
        """Query the store; malformed values and store errors count as misses."""
        try:
            value = self.lookup(word)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning(f"Store lookup failed for {word!r}: {e}")
            return None
        if value is None:
            return None
        if not is_well_formed(value):
            logger.debug(f"Ignoring malformed transcription for {word!r}: {value!r}")
            return None
        return value

    async def _try_rule(self, word: str, rule: SuffixRule) -> ResolutionResult | None:
        candidate = rule.detect(word)
        if candidate is None:
            return None
        attempts = [(candidate.base, OriginKind.INFLECTED_PRIMARY)]
        if candidate.alternative:
            attempts.append((candidate.alternative, OriginKind.INFLECTED_ALTERNATIVE))
        for base, origin in attempts:
            base_ipa = await self._lookup(base)
            if base_ipa is None:
                continue
            inflected = rule.transform(base_ipa, candidate.rule_id)
            if inflected is None:
                continue
            logger.debug(f"{word!r} -> {base!r} via {candidate.rule_id.value}: {inflected}")
            return ResolutionResult(
                word=word,
                transcription=inflected,
                origin=origin,
                matched_base=base,
                rule_id=candidate.rule_id,
            )
        return None

    async def _query_remote(self, word: str) -> str | None:
        try:
            value = await self.remote(word)
        except Exception as e:
            logger.warning(f"Remote lookup failed for {word!r}: {e}")
            return None
        return value if is_well_formed(value) else None

    async def resolve(self, word: str) -> ResolutionResult:
        """Resolve one word. Never raises; failures come back as UNRESOLVED."""
        normalized = normalize_word(word)
        if not normalized or not any(c.isalpha() for c in normalized):
            return ResolutionResult(word=normalized, transcription=None, origin=OriginKind.UNRESOLVED)

        direct = await self._lookup(normalized)
        if direct is not None:
            return ResolutionResult(
                word=normalized, transcription=direct, origin=OriginKind.DIRECT_DICTIONARY,
            )

        if self.cache is not None:
            cached = self.cache.get(normalized)
            if cached is not None:
                return cached

        if len(normalized) < MIN_INFLECTED_LENGTH:
            return ResolutionResult(word=normalized, transcription=None, origin=OriginKind.UNRESOLVED)

        result = None
        for rule in self.rules:
            result = await self._try_rule(normalized, rule)
            if result is not None:
                break

        if result is None and self.remote is not None:
            remote_ipa = await self._query_remote(normalized)
            if remote_ipa is not None:
                result = ResolutionResult(
                    word=normalized, transcription=remote_ipa, origin=OriginKind.EXTERNAL_LOOKUP,
                )

        if result is None:
            result = ResolutionResult(word=normalized, transcription=None, origin=OriginKind.UNRESOLVED)

        if self.cache is not None:
            self.cache.put(normalized, result)
        return result

    async def resolve_word(self, word: str) -> str | None:
        """Return just the transcription for *word*, or None."""
        result = await self.resolve(word)
        return result.transcription


async def resolve_word(
    word: str,
    lookup: Lookup,
    remote: RemoteLookup | None = None,
    cache: ResultCache | None = None,
) -> str | None:
    """One-off resolution without keeping a Resolver around."""
    return await Resolver(lookup, remote=remote, cache=cache).resolve_word(word)
