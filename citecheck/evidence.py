"""
Evidence — What the Verification Layers Hand Us

Every external layer (DOI lookup, title index, URL probe, AI review)
reports a LayerResult. The scorers consume nothing else.

A LayerResult's confidence is the signal. `passed` is carried along
for reporting only; no scoring path reads it.

Confidence must lie in [0, 1]. The core does NOT check this: callers
validate upstream (the API schemas do), so an upstream bug is never
silently clamped into a plausible-looking score.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


# --- Layer identifiers (stable across every domain) ---
LAYER_DOI = "doi"
LAYER_TITLE_SEARCH = "title_search"
LAYER_URL = "url"
LAYER_AI = "ai"

LAYER_IDS = (LAYER_DOI, LAYER_TITLE_SEARCH, LAYER_URL, LAYER_AI)


class Verdict(str, Enum):
    """Binary trust judgment produced by thresholding a score."""
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"

    @classmethod
    def from_threshold(cls, value: float, threshold: float) -> "Verdict":
        # Equality counts as VERIFIED.
        return cls.VERIFIED if value >= threshold else cls.FAILED


@dataclass(frozen=True)
class LayerResult:
    """Evidence from one verification layer."""
    layer_id: str
    passed: bool
    confidence: float     # 0.0 to 1.0

    def to_dict(self) -> dict:
        return {
            "layer_id": self.layer_id,
            "passed": self.passed,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Reference:
    """Identifying fields of a cited reference, as used for classification."""
    doi: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Reference":
        data = data or {}
        return cls(doi=data.get("doi"), url=data.get("url"), type=data.get("type"))


def index_evidence(evidence: Iterable[LayerResult]) -> dict[str, LayerResult]:
    """Map layer id → result. A repeated layer id keeps its last result."""
    return {result.layer_id: result for result in evidence}
