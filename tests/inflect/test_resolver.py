"""Tests for the resolution orchestrator."""

import asyncio

import pytest

from phonoflex.cache import ResultCache
from phonoflex.inflect import SUFFIX_RULES, Resolver, normalize_word, resolve_word
from phonoflex.types import Category, OriginKind, RuleId


def _resolve(resolver: Resolver, word: str):
    return asyncio.run(resolver.resolve(word))


class FakeRemote:
    """Async remote lookup that records every call."""

    def __init__(self, answers: dict[str, str] | None = None, error: Exception | None = None):
        self.answers = answers or {}
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, word: str) -> str | None:
        self.calls.append(word)
        if self.error is not None:
            raise self.error
        return self.answers.get(word)


class TestLiteralScenarios:
    def test_cats(self):
        assert asyncio.run(resolve_word("cats", {"cat": "/kæt/"}.get)) == "/kæts/"

    def test_dogs(self):
        assert asyncio.run(resolve_word("dogs", {"dog": "/dɒg/"}.get)) == "/dɒgz/"

    def test_boxes(self):
        result = _resolve(Resolver({"box": "/bɒks/"}.get), "boxes")
        assert result.transcription == "/bɒksɪz/"
        assert result.matched_base == "box"
        assert result.rule_id is RuleId.S_ES_SIBILANT

    def test_tried(self):
        result = _resolve(Resolver({"try": "/traɪ/"}.get), "tried")
        assert result.transcription == "/traɪd/"
        assert result.rule_id is RuleId.ED_Y_TO_I

    def test_knives(self):
        result = _resolve(Resolver({"knife": "/naɪf/"}.get), "knives")
        assert result.transcription == "/naɪvz/"
        assert result.origin is OriginKind.INFLECTED_PRIMARY
        assert result.matched_base == "knife"

    def test_quality_unresolved(self):
        remote = FakeRemote()
        result = _resolve(Resolver({"cat": "/kæt/"}.get, remote=remote), "quality")
        assert result.origin is OriginKind.UNRESOLVED
        assert result.transcription is None
        assert remote.calls == ["quality"]


class TestResolutionOrder:
    def test_direct_hit_wins(self):
        store = {"cats": "/kæts/", "cat": "/kæt/"}
        result = _resolve(Resolver(store.get), "cats")
        assert result.origin is OriginKind.DIRECT_DICTIONARY
        assert result.matched_base is None

    def test_alternative_base(self):
        result = _resolve(Resolver({"walk": "/wɔk/"}.get), "walking")
        assert result.transcription == "/wɔkɪŋ/"
        assert result.origin is OriginKind.INFLECTED_ALTERNATIVE
        assert result.matched_base == "walk"

    def test_primary_preferred_over_alternative(self):
        store = {"make": "/meɪk/", "mak": "/mæk/"}
        result = _resolve(Resolver(store.get), "making")
        assert result.transcription == "/meɪkɪŋ/"
        assert result.origin is OriginKind.INFLECTED_PRIMARY

    def test_est_category(self):
        store = {"happy": "/hæpi/"}
        result = _resolve(Resolver(store.get), "happiest")
        assert result.rule_id.category is Category.EST
        assert result.transcription == "/hæpiɪst/"

    def test_earlier_category_wins(self):
        # -ly (day) and -y (dail) both apply; -ly is tried first
        store = {"day": "/deɪ/", "dail": "/deɪl/"}
        result = _resolve(Resolver(store.get), "daily")
        assert result.rule_id is RuleId.LY_ILY
        assert result.transcription == "/deɪli/"

    def test_falls_through_to_later_category(self):
        # -ly proposes "cur" and "cure"; -y then finds "curl"
        store = {"curl": "/kɜrl/"}
        result = _resolve(Resolver(store.get), "curly")
        assert result.rule_id is RuleId.Y_E_DROPPED
        assert result.origin is OriginKind.INFLECTED_ALTERNATIVE
        assert result.transcription == "/kɜrli/"

    def test_rule_priority_order(self):
        assert [r.category for r in SUFFIX_RULES] == [
            Category.ITY, Category.LY, Category.EST, Category.ER,
            Category.ING, Category.ED, Category.Y, Category.S,
        ]

    def test_remote_skipped_when_rule_succeeds(self):
        remote = FakeRemote({"cats": "/kats/"})
        result = _resolve(Resolver({"cat": "/kæt/"}.get, remote=remote), "cats")
        assert result.transcription == "/kæts/"
        assert remote.calls == []

    def test_remote_fallback(self):
        remote = FakeRemote({"quality": "/ˈkwɒlɪti/"})
        result = _resolve(Resolver({}.get, remote=remote), "quality")
        assert result.origin is OriginKind.EXTERNAL_LOOKUP
        assert result.transcription == "/ˈkwɒlɪti/"


class TestInputHandling:
    def test_normalize_word(self):
        assert normalize_word("  Cats! ") == "cats"
        assert normalize_word("'tis") == "tis"
        assert normalize_word("well-known") == "well-known"
        assert normalize_word("--") == ""

    def test_case_insensitive(self):
        result = _resolve(Resolver({"cat": "/kæt/"}.get), "CATS")
        assert result.word == "cats"
        assert result.transcription == "/kæts/"

    @pytest.mark.parametrize("word", ["", "   ", "123", "--", "''"])
    def test_invalid_input_does_no_lookup(self, word):
        calls = []

        def lookup(w):
            calls.append(w)
            return None

        cache = ResultCache()
        result = _resolve(Resolver(lookup, cache=cache), word)
        assert result.origin is OriginKind.UNRESOLVED
        assert calls == []
        assert len(cache) == 0

    def test_short_word_skips_rules_and_remote(self):
        calls = []

        def lookup(w):
            calls.append(w)
            return None

        remote = FakeRemote({"ox": "/ɒks/"})
        result = _resolve(Resolver(lookup, remote=remote), "ox")
        assert result.origin is OriginKind.UNRESOLVED
        assert calls == ["ox"]
        assert remote.calls == []


class TestStoreShapes:
    def test_async_store(self):
        async def lookup(word):
            return {"dog": "/dɒg/"}.get(word)

        result = _resolve(Resolver(lookup), "dogs")
        assert result.transcription == "/dɒgz/"

    def test_malformed_store_value_is_a_miss(self):
        store = {"cat": "kæt"}
        result = _resolve(Resolver(store.get), "cats")
        assert result.origin is OriginKind.UNRESOLVED

    def test_malformed_primary_falls_back_to_alternative(self):
        store = {"make": "meɪk", "mak": "/mæk/"}
        result = _resolve(Resolver(store.get), "making")
        assert result.origin is OriginKind.INFLECTED_ALTERNATIVE
        assert result.transcription == "/mækɪŋ/"

    def test_store_error_is_a_miss(self):
        def lookup(word):
            if word == "cats":
                raise RuntimeError("store offline")
            return {"cat": "/kæt/"}.get(word)

        result = _resolve(Resolver(lookup), "cats")
        assert result.transcription == "/kæts/"


class TestRemoteFailures:
    def test_remote_error_becomes_unresolved(self):
        remote = FakeRemote(error=TimeoutError("slow"))
        result = _resolve(Resolver({}.get, remote=remote), "quality")
        assert result.origin is OriginKind.UNRESOLVED

    def test_malformed_remote_value_rejected(self):
        remote = FakeRemote({"quality": "kwɒlɪti"})
        result = _resolve(Resolver({}.get, remote=remote), "quality")
        assert result.origin is OriginKind.UNRESOLVED


class TestCaching:
    def test_negative_result_cached(self):
        remote = FakeRemote()
        resolver = Resolver({}.get, remote=remote, cache=ResultCache())
        first = _resolve(resolver, "quality")
        second = _resolve(resolver, "quality")
        assert first == second
        assert remote.calls == ["quality"]

    def test_remote_error_cached_as_negative(self):
        remote = FakeRemote(error=ConnectionError("down"))
        cache = ResultCache()
        resolver = Resolver({}.get, remote=remote, cache=cache)
        _resolve(resolver, "quality")
        _resolve(resolver, "quality")
        assert remote.calls == ["quality"]
        assert cache.get("quality").origin is OriginKind.UNRESOLVED

    def test_inflected_result_cached(self):
        calls = []

        def lookup(word):
            calls.append(word)
            return {"cat": "/kæt/"}.get(word)

        resolver = Resolver(lookup, cache=ResultCache())
        _resolve(resolver, "cats")
        calls.clear()
        result = _resolve(resolver, "cats")
        assert result.transcription == "/kæts/"
        # Only the direct lookup runs on a cache hit
        assert calls == ["cats"]

    def test_direct_hit_not_cached(self):
        cache = ResultCache()
        _resolve(Resolver({"cat": "/kæt/"}.get, cache=cache), "cat")
        assert "cat" not in cache

    def test_dictionary_wins_over_stale_cache(self):
        store = {}
        cache = ResultCache()
        resolver = Resolver(store.get, cache=cache)
        assert _resolve(resolver, "quality").origin is OriginKind.UNRESOLVED
        store["quality"] = "/ˈkwɒlɪti/"
        assert _resolve(resolver, "quality").origin is OriginKind.DIRECT_DICTIONARY

    def test_cache_bound_respected(self):
        cache = ResultCache(max_size=2)
        resolver = Resolver({}.get, cache=cache)
        for word in ("alpha", "bravo", "charlie"):
            _resolve(resolver, word)
        assert len(cache) == 2
        assert "alpha" not in cache
        assert "charlie" in cache


class TestResolveWord:
    def test_method_returns_transcription(self):
        resolver = Resolver({"cat": "/kæt/"}.get)
        assert asyncio.run(resolver.resolve_word("cats")) == "/kæts/"

    def test_unresolved_returns_none(self):
        assert asyncio.run(resolve_word("zzzq", {}.get)) is None
