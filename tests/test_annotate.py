"""Tests for running-text annotation."""

import asyncio

import pytest

from phonoflex.annotate import annotate_text, format_annotations, resolve_many, tokenize
from phonoflex.inflect import Resolver
from phonoflex.types import OriginKind

STORE = {"the": "/ðə/", "cat": "/kæt/", "dog": "/dɒg/", "play": "/pleɪ/"}


class CountingStore:
    def __init__(self, entries):
        self.entries = entries
        self.calls = []

    def __call__(self, word):
        self.calls.append(word)
        return self.entries.get(word)


class TestTokenize:
    def test_offsets(self):
        assert tokenize("The cats ran.") == [("The", 0, 3), ("cats", 4, 8), ("ran", 9, 12)]

    def test_single_letters_skipped(self):
        assert [t[0] for t in tokenize("I saw a cat")] == ["saw", "cat"]

    def test_internal_apostrophes_and_hyphens(self):
        assert [t[0] for t in tokenize("don't well-known 'quoted'")] == [
            "don't", "well-known", "quoted",
        ]

    def test_no_words(self):
        assert tokenize("123 -- !!") == []


class TestResolveMany:
    def test_deduplicates_case_insensitively(self):
        store = CountingStore(STORE)
        results = asyncio.run(resolve_many(["Cat", "cat", "CAT"], Resolver(store)))
        assert list(results) == ["cat"]
        assert store.calls == ["cat"]

    def test_batches(self):
        words = [f"w{chr(97 + i)}x" for i in range(25)]
        results = asyncio.run(resolve_many(words, Resolver({}.get), batch_size=10))
        assert len(results) == 25

    def test_rejects_bad_batch_size(self):
        with pytest.raises(ValueError):
            asyncio.run(resolve_many(["cat"], Resolver({}.get), batch_size=0))


class TestAnnotateText:
    def test_annotations(self):
        annotations = asyncio.run(annotate_text("The dogs played the cat", Resolver(STORE.get)))
        assert [(a.word, a.transcription) for a in annotations] == [
            ("The", "/ðə/"),
            ("dogs", "/dɒgz/"),
            ("played", "/pleɪd/"),
            ("the", "/ðə/"),
            ("cat", "/kæt/"),
        ]
        assert annotations[1].origin is OriginKind.INFLECTED_PRIMARY
        assert (annotations[1].start, annotations[1].end) == (4, 8)

    def test_unresolved_words_kept(self):
        annotations = asyncio.run(annotate_text("zzyzx cat", Resolver(STORE.get)))
        assert annotations[0].transcription is None
        assert annotations[0].origin is OriginKind.UNRESOLVED

    def test_format(self):
        annotations = asyncio.run(annotate_text("zzyzx cat", Resolver(STORE.get)))
        lines = format_annotations(annotations).splitlines()
        assert lines[0].split() == ["zzyzx", "-"]
        assert lines[1].split() == ["cat", "/kæt/"]
