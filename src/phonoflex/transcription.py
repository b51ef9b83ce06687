"""Phonemic transcription strings: boundary markers, sound classes, ARPABET conversion.

A transcription is an IPA string wrapped in a pair of boundary markers,
e.g. ``/kæt/``. The interior is a run of phoneme symbols; most are a
single code point, a few (affricates, diphthongs) are two.
"""

BOUNDARY = "/"

STRESS_MARKS = "ˈˌ"
LENGTH_MARKS = "ːˑ"
_DIACRITICS = str.maketrans("", "", STRESS_MARKS + LENGTH_MARKS)

# Two-code-point phonemes, checked before falling back to the last character.
DIGRAPHS: tuple[str, ...] = (
    "tʃ", "dʒ",
    "aɪ", "aʊ", "eɪ", "oʊ", "ɔɪ", "əʊ", "ɪə", "eə", "ʊə",
)

# Voiceless stops, fricatives, the voiceless affricate and /h/.
# Anything else (vowels, voiced consonants) counts as voiced.
# The affricates appear both as digraphs and as the ligatures ʧ ʤ.
VOICELESS: frozenset[str] = frozenset({"p", "t", "k", "f", "s", "θ", "ʃ", "tʃ", "ʧ", "h"})

SIBILANTS: frozenset[str] = frozenset({"s", "z", "ʃ", "ʒ", "tʃ", "dʒ", "ʧ", "ʤ"})

ALVEOLAR_STOPS: frozenset[str] = frozenset({"t", "d"})


def is_well_formed(transcription: object) -> bool:
    """Return True for a string with matching boundary markers and a non-empty interior."""
    if not isinstance(transcription, str) or len(transcription) < 3:
        return False
    if not (transcription.startswith(BOUNDARY) and transcription.endswith(BOUNDARY)):
        return False
    return bool(transcription[1:-1].strip())


def interior(transcription: str) -> str:
    """Strip the boundary markers. Caller must check is_well_formed first."""
    return transcription[1:-1]


def wrap(phonemes: str) -> str:
    return f"{BOUNDARY}{phonemes}{BOUNDARY}"


def strip_diacritics(phonemes: str) -> str:
    """Remove stress and length marks, leaving phoneme identity untouched."""
    return phonemes.translate(_DIACRITICS)


def last_sound(phonemes: str) -> str | None:
    """Return the final phoneme of a transcription interior.

    Diacritics are ignored. A trailing digraph wins over its last
    character, so ``tʃ`` is returned rather than ``ʃ``.
    """
    cleaned = strip_diacritics(phonemes).rstrip()
    if not cleaned:
        return None
    for digraph in DIGRAPHS:
        if cleaned.endswith(digraph):
            return digraph
    return cleaned[-1]


def is_voiceless(sound: str) -> bool:
    return sound in VOICELESS


def is_sibilant(sound: str) -> bool:
    return sound in SIBILANTS


def normalize_phonetic_text(text: str | None) -> str | None:
    """Coerce a free-form phonetic string (``həˈləʊ``, ``[kæt]``) to ``/.../``.

    Returns None when nothing is left after trimming.
    """
    if not text:
        return None
    cleaned = text.strip().strip("[]").strip()
    if not cleaned.startswith(BOUNDARY):
        cleaned = BOUNDARY + cleaned
    if not cleaned.endswith(BOUNDARY) or len(cleaned) == 1:
        cleaned = cleaned + BOUNDARY
    return cleaned if is_well_formed(cleaned) else None


# --- ARPABET ---

# Symbols follow the dictionary convention of plain "r" and "g".
ARPABET_TO_IPA: dict[str, str] = {
    "AA": "ɑ",  "AE": "æ",  "AH": "ʌ",  "AO": "ɔ",
    "AW": "aʊ", "AY": "aɪ",
    "B": "b",   "CH": "tʃ", "D": "d",   "DH": "ð",
    "EH": "ɛ",  "ER": "ɜr", "EY": "eɪ",
    "F": "f",   "G": "g",   "HH": "h",
    "IH": "ɪ",  "IY": "i",
    "JH": "dʒ", "K": "k",   "L": "l",   "M": "m",  "N": "n",  "NG": "ŋ",
    "OW": "oʊ", "OY": "ɔɪ",
    "P": "p",   "R": "r",   "S": "s",   "SH": "ʃ", "T": "t",  "TH": "θ",
    "UH": "ʊ",  "UW": "u",
    "V": "v",   "W": "w",   "Y": "j",   "Z": "z",  "ZH": "ʒ",
}

# Unstressed variants that differ from the stressed vowel.
_REDUCED = {"AH": "ə", "ER": "ər"}

_STRESS_PREFIX = {"1": "ˈ", "2": "ˌ"}


def arpabet_to_ipa(phones: list[str]) -> str | None:
    """Convert ARPABET phones (``["K", "AE1", "T"]``) to an IPA interior.

    Stress marks are placed directly before the stressed vowel. Returns
    None if any phone is unknown.
    """
    out = []
    for phone in phones:
        base, stress = phone, ""
        if phone and phone[-1] in "012":
            base, stress = phone[:-1], phone[-1]
        symbol = ARPABET_TO_IPA.get(base)
        if symbol is None:
            return None
        if stress == "0":
            symbol = _REDUCED.get(base, symbol)
        out.append(_STRESS_PREFIX.get(stress, "") + symbol)
    return "".join(out) or None


def arpabet_to_transcription(phones: list[str]) -> str | None:
    ipa = arpabet_to_ipa(phones)
    return wrap(ipa) if ipa else None
