"""Phonemic transformers: derive an inflected transcription from its base.

Every ``transform_*`` takes the base transcription (``/kæt/``) and the
rule id that produced the base, and returns the inflected transcription,
or None when the base is malformed.
"""

from phonoflex.transcription import (
    ALVEOLAR_STOPS,
    interior,
    is_sibilant,
    is_voiceless,
    is_well_formed,
    last_sound,
    strip_diacritics,
    wrap,
)
from phonoflex.types import RuleId


def _append(base: str, suffix: str) -> str | None:
    if not is_well_formed(base):
        return None
    return wrap(interior(base) + suffix)


def _soften_final_f(phonemes: str) -> str:
    """knife /naɪf/ -> knive- /naɪv/ for the -ves plural."""
    if last_sound(phonemes) != "f":
        return phonemes
    # Any trailing diacritics sit after the f; keep them in place.
    idx = len(phonemes) - 1
    while idx >= 0 and phonemes[idx] != "f":
        idx -= 1
    return phonemes[:idx] + "v" + phonemes[idx + 1:]


def transform_ed(base: str, rule_id: RuleId | None = None) -> str | None:
    """wanted /ɪd/, walked /t/, played /d/."""
    if not is_well_formed(base):
        return None
    phonemes = interior(base)
    sound = last_sound(phonemes)
    if sound is None:
        return None
    if sound in ALVEOLAR_STOPS:
        suffix = "ɪd"
    elif is_voiceless(sound):
        suffix = "t"
    else:
        suffix = "d"
    return wrap(phonemes + suffix)


def transform_s(base: str, rule_id: RuleId | None = None) -> str | None:
    """boxes /ɪz/, cats /s/, dogs /z/."""
    if not is_well_formed(base):
        return None
    phonemes = interior(base)
    if rule_id is RuleId.S_VES:
        phonemes = _soften_final_f(phonemes)
    sound = last_sound(phonemes)
    if sound is None:
        return None
    cleaned = strip_diacritics(phonemes)
    if is_sibilant(sound) or cleaned.endswith(("tʃ", "dʒ")):
        suffix = "ɪz"
    elif is_voiceless(sound):
        suffix = "s"
    else:
        suffix = "z"
    return wrap(phonemes + suffix)


def transform_ing(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "ɪŋ")


def transform_ly(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "li")


def transform_er(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "ər")


def transform_est(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "ɪst")


def transform_ity(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "əti")


def transform_y(base: str, rule_id: RuleId | None = None) -> str | None:
    return _append(base, "i")
