"""Core data types for phonoflex."""

from dataclasses import dataclass
from enum import Enum


class OriginKind(str, Enum):
    """Where a resolved transcription came from."""
    DIRECT_DICTIONARY = "direct"
    INFLECTED_PRIMARY = "inflected-primary"
    INFLECTED_ALTERNATIVE = "inflected-alternative"
    EXTERNAL_LOOKUP = "external"
    UNRESOLVED = "unresolved"


class Category(str, Enum):
    """Inflectional suffix category."""
    ITY = "ity"
    LY = "ly"
    EST = "est"
    ER = "er"
    ING = "ing"
    ED = "ed"
    Y = "y"
    S = "s"


class RuleId(str, Enum):
    """Spelling rule that produced a reconstructed base."""
    ITY_ABILITY = "ity-ability"
    ITY_IBILITY = "ity-ibility"
    ITY_ALITY = "ity-ality"
    ITY_SIMPLE = "ity-simple"
    LY_ILY = "ly-ily"
    LY_SIMPLE = "ly-simple"
    EST_DOUBLE = "est-double"
    EST_Y_TO_I = "est-y-to-i"
    EST_SIMPLE = "est-simple"
    ER_DOUBLE = "er-double"
    ER_Y_TO_I = "er-y-to-i"
    ER_SIMPLE = "er-simple"
    ING_DOUBLE = "ing-double"
    ING_E_DROPPED = "ing-e-dropped"
    ED_DOUBLE = "ed-double"
    ED_Y_TO_I = "ed-y-to-i"
    ED_SIMPLE = "ed-simple"
    Y_DOUBLE = "y-double"
    Y_E_DROPPED = "y-e-dropped"
    S_IES = "s-ies"
    S_ES_SIBILANT = "s-es-sibilant"
    S_OES = "s-oes"
    S_VES = "s-ves"
    S_SIMPLE = "s-simple"

    @property
    def category(self) -> Category:
        return Category(self.value.split("-", 1)[0])


@dataclass(frozen=True)
class InflectionCandidate:
    """A reconstructed base spelling proposed by a suffix detector."""
    base: str                       # primary reconstructed base
    rule_id: RuleId
    alternative: str | None = None  # tried only if the primary base misses


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one surface word."""
    word: str
    transcription: str | None
    origin: OriginKind
    matched_base: str | None = None   # set for inflected origins
    rule_id: RuleId | None = None     # set for inflected origins

    @property
    def resolved(self) -> bool:
        return self.transcription is not None

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "word": self.word,
            "transcription": self.transcription,
            "origin": self.origin.value,
            "matched_base": self.matched_base,
            "rule_id": self.rule_id.value if self.rule_id else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResolutionResult":
        rule_id = data.get("rule_id")
        return cls(
            word=data["word"],
            transcription=data.get("transcription"),
            origin=OriginKind(data["origin"]),
            matched_base=data.get("matched_base"),
            rule_id=RuleId(rule_id) if rule_id else None,
        )
