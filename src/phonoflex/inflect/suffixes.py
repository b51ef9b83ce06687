"""Suffix detectors: guess an inflectional suffix and rebuild the base spelling.

Each ``detect_*`` function is pure and looks only at spelling. It returns
a single InflectionCandidate or None; no dictionary access happens here.
"""

from phonoflex.types import InflectionCandidate, RuleId

IRREGULAR_PAST_TENSE: frozenset[str] = frozenset({
    "went", "came", "saw", "made", "took", "got", "gave", "found", "thought",
    "told", "left", "kept", "felt", "brought", "began", "ran", "sat", "stood",
    "heard", "met", "read", "lost", "paid", "sent", "built", "spent", "caught",
    "taught", "bought", "fought", "sold", "wore", "won", "understood", "said",
    "ate", "wrote", "drove", "broke", "spoke", "chose", "fell", "knew", "grew",
    "threw", "drew", "flew", "sang", "rang", "swam", "drank", "sank",
})

IRREGULAR_PLURALS: frozenset[str] = frozenset({
    "men", "women", "children", "teeth", "feet", "geese", "mice", "lice",
    "people", "oxen", "analyses", "bases", "crises", "diagnoses", "hypotheses",
    "oases", "parentheses", "syntheses", "theses", "criteria", "phenomena",
    "data", "media", "bacteria", "alumni", "cacti", "foci", "fungi", "nuclei",
    "radii", "stimuli", "syllabi", "axes", "appendices", "indices", "matrices",
})

_VOWELS = "aeiou"

_SIBILANT_PAIRS = ("sh", "ch", "ss")


def _is_consonant(char: str) -> bool:
    return bool(char) and char not in _VOWELS


def _ends_in_double_consonant(stem: str) -> bool:
    return len(stem) >= 2 and stem[-1] == stem[-2] and _is_consonant(stem[-1])


def _candidate(
    base: str, rule_id: RuleId, alternative: str | None = None
) -> InflectionCandidate | None:
    """Build a candidate, refusing empty reconstructions."""
    if not base:
        return None
    return InflectionCandidate(base=base, rule_id=rule_id, alternative=alternative or None)


def _undouble_or_restore_y(
    stem: str, double: RuleId, y_to_i: RuleId, simple: RuleId
) -> InflectionCandidate | None:
    """Shared base repair for -est, -er and -ed."""
    if _ends_in_double_consonant(stem):
        return _candidate(stem[:-1], double)
    if stem.endswith("i"):
        return _candidate(stem[:-1] + "y", y_to_i)
    return _candidate(stem, simple)


def detect_ity(word: str) -> InflectionCandidate | None:
    """``readability`` -> readable, ``possibility`` -> possible, ``reality`` -> re/real."""
    if len(word) < 5 or not word.endswith("ity"):
        return None
    stem = word[:-3]
    if stem.endswith("abil"):
        return _candidate(stem[:-4] + "able", RuleId.ITY_ABILITY)
    if stem.endswith("ibil"):
        return _candidate(stem[:-4] + "ible", RuleId.ITY_IBILITY)
    if stem.endswith("al"):
        return _candidate(stem[:-2], RuleId.ITY_ALITY, alternative=stem)
    return _candidate(stem + "e", RuleId.ITY_SIMPLE, alternative=stem)


def detect_ly(word: str) -> InflectionCandidate | None:
    """``happily`` -> happy, ``quickly`` -> quick, ``possibly`` -> possible (alternative)."""
    if len(word) < 4 or not word.endswith("ly"):
        return None
    stem = word[:-2]
    if stem.endswith("i") and len(stem) > 1:
        return _candidate(stem[:-1] + "y", RuleId.LY_ILY)
    return _candidate(stem, RuleId.LY_SIMPLE, alternative=stem + "e")


def detect_est(word: str) -> InflectionCandidate | None:
    if len(word) < 5 or not word.endswith("est"):
        return None
    return _undouble_or_restore_y(
        word[:-3], RuleId.EST_DOUBLE, RuleId.EST_Y_TO_I, RuleId.EST_SIMPLE,
    )


def detect_er(word: str) -> InflectionCandidate | None:
    if len(word) < 4 or not word.endswith("er"):
        return None
    return _undouble_or_restore_y(
        word[:-2], RuleId.ER_DOUBLE, RuleId.ER_Y_TO_I, RuleId.ER_SIMPLE,
    )


def detect_ing(word: str) -> InflectionCandidate | None:
    """``running`` -> run; ``making`` -> make, falling back to ``walking`` -> walk."""
    if len(word) < 5 or not word.endswith("ing"):
        return None
    stem = word[:-3]
    if _ends_in_double_consonant(stem):
        return _candidate(stem[:-1], RuleId.ING_DOUBLE)
    return _candidate(stem + "e", RuleId.ING_E_DROPPED, alternative=stem)


def detect_ed(word: str) -> InflectionCandidate | None:
    if len(word) < 4 or word in IRREGULAR_PAST_TENSE or not word.endswith("ed"):
        return None
    return _undouble_or_restore_y(
        word[:-2], RuleId.ED_DOUBLE, RuleId.ED_Y_TO_I, RuleId.ED_SIMPLE,
    )


def detect_y(word: str) -> InflectionCandidate | None:
    """``sunny`` -> sun; ``noisy`` -> noise, falling back to ``rainy`` -> rain."""
    if len(word) < 3 or not word.endswith("y"):
        return None
    stem = word[:-1]
    if _ends_in_double_consonant(stem):
        return _candidate(stem[:-1], RuleId.Y_DOUBLE)
    return _candidate(stem + "e", RuleId.Y_E_DROPPED, alternative=stem)


def detect_s(word: str) -> InflectionCandidate | None:
    """Plural / third-person -s, including the -ies, -es, -oes and -ves spellings."""
    if len(word) < 3 or word in IRREGULAR_PLURALS or not word.endswith("s"):
        return None

    if word.endswith("ies") and len(word) > 3:
        return _candidate(word[:-3] + "y", RuleId.S_IES)

    if word.endswith("es"):
        # Inspect the letters in front of "es": watches, boxes, buzzes
        if word[-4:-2] in _SIBILANT_PAIRS or word[-3] in "xz":
            return _candidate(word[:-2], RuleId.S_ES_SIBILANT, alternative=word[:-1])

    if word.endswith("oes") and len(word) > 3:
        # goes -> go, shoes -> shoe
        return _candidate(word[:-2], RuleId.S_OES, alternative=word[:-1])

    if word.endswith("ves") and len(word) > 3:
        stem = word[:-3]
        return _candidate(stem + "fe", RuleId.S_VES, alternative=stem + "f")

    return _candidate(word[:-1], RuleId.S_SIMPLE)
