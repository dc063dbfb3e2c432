# scd_core/text/ai_signatures.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple

EM_DASH_WEIGHT = 0.3
EMOJI_WEIGHT = 0.5
PHRASE_WEIGHT = 1.0
NUMERATION_WEIGHT = 0.05

AI_PHRASES: Tuple[str, ...] = (
    "as an ai language model",
    "i am an ai",
    "i am an artificial intelligence",
    "as an artificial intelligence",
)

_EMOJI = re.compile("[\U0001F600-\U0001F64F]")
_NUMERATION = re.compile(r"\b\d+\.")


@dataclass(frozen=True)
class SignatureBreakdown:
    em_dashes: int
    emojis: int
    phrases: int
    numerations: int

    @property
    def total(self) -> float:
        return (
            self.em_dashes * EM_DASH_WEIGHT
            + self.emojis * EMOJI_WEIGHT
            + self.phrases * PHRASE_WEIGHT
            + self.numerations * NUMERATION_WEIGHT
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "em_dashes": self.em_dashes,
            "emojis": self.emojis,
            "phrases": self.phrases,
            "numerations": self.numerations,
            "total": round(self.total, 4),
        }


def ai_signature_breakdown(text: str) -> SignatureBreakdown:
    lowered = text.lower()
    return SignatureBreakdown(
        em_dashes=text.count("—"),
        emojis=len(_EMOJI.findall(text)),
        phrases=sum(lowered.count(p) for p in AI_PHRASES),
        numerations=len(_NUMERATION.findall(text)),
    )


def ai_signature_score(text: str, threshold: float = 1.0) -> int:
    """1 when the weighted marker total exceeds `threshold`, else 0. Not a probability."""
    return 1 if ai_signature_breakdown(text).total > threshold else 0
