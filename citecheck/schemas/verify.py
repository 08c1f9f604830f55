"""
API Schemas — Request and Response Models

Pydantic models for the CiteCheck API. Evidence is validated HERE,
at the edge: the scoring core trusts its inputs.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from citecheck.evidence import LayerResult, Reference


# ============================================================
# INPUTS
# ============================================================

class ReferenceModel(BaseModel):
    """Identifying fields of a cited reference."""
    doi: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = Field(None, description="Reference type token, e.g. PAPER, ARTICLE, WEB.")

    def to_reference(self) -> Reference:
        return Reference(doi=self.doi, url=self.url, type=self.type)


class LayerResultModel(BaseModel):
    """Evidence reported by one verification layer."""
    layer_id: str = Field(..., min_length=1, max_length=64,
                          description="Layer id: doi, title_search, url, ai (or a custom layer).")
    passed: bool = False
    confidence: float = Field(..., ge=0.0, le=1.0,
                              description="Confidence that the reference is real, 0.0-1.0.")

    def to_layer_result(self) -> LayerResult:
        return LayerResult(layer_id=self.layer_id, passed=self.passed, confidence=self.confidence)


class ScoreRequest(BaseModel):
    """POST /score request body."""
    reference: Optional[ReferenceModel] = None
    domain: Optional[str] = Field(None, description="Score against this domain instead of classifying.")
    evidence: list[LayerResultModel] = Field(default_factory=list, max_length=32)
    model: Optional[str] = Field(None, pattern="^(linear|bayesian|both)$",
                                 description="Scoring model. Defaults to the server setting.")

    model_config = {"json_schema_extra": {"examples": [
        {
            "reference": {"url": "https://www.nytimes.com/2024/01/01/tech/ai.html", "type": "ARTICLE"},
            "evidence": [
                {"layer_id": "url", "passed": False, "confidence": 0.0},
                {"layer_id": "ai", "passed": True, "confidence": 0.85},
            ],
            "model": "both",
        },
    ]}}


class ScoreBatchRequest(BaseModel):
    """POST /score/batch request body."""
    items: list[ScoreRequest] = Field(..., min_length=1, max_length=100)


# ============================================================
# OUTPUTS
# ============================================================

class ClassifyResponse(BaseModel):
    domain: str
    registry_version: str


class LinearScoreResponse(BaseModel):
    model: str
    domain: str
    score: float
    threshold: float
    verdict: str
    breakdown: dict[str, float]
    registry_version: str


class BayesianScoreResponse(BaseModel):
    model: str
    domain: str
    posterior: float
    threshold: float
    verdict: str
    prior_log_odds: float
    log_odds: float
    log_odds_contributions: dict[str, float]
    registry_version: str


class ScoreResponse(BaseModel):
    """POST /score response body."""
    domain: str
    domain_source: str
    model: str
    registry_version: str
    reference: ReferenceModel
    evidence_layers: list[str]
    ignored_layers: list[str]
    linear: Optional[LinearScoreResponse] = None
    bayesian: Optional[BayesianScoreResponse] = None
    verdicts: dict[str, str]
    agreement: Optional[bool] = None


class ScoreBatchResponse(BaseModel):
    """POST /score/batch response body."""
    results: list[Optional[ScoreResponse]]
    errors: list[Optional[str]]
    total: int
    scored: int


class LayerDescription(BaseModel):
    id: str
    weight: float
    description: str
    sensitivity: float
    specificity: float
    lr_positive: float
    lr_negative: float


class DomainResponse(BaseModel):
    domain: str
    label: str
    description: str
    priority: int
    is_fallback: bool
    threshold: float
    prior: float
    bayesian_threshold: float
    ai_instruction: str
    url_patterns: list[str]
    type_patterns: list[str]
    layers: list[LayerDescription]
    guidance_prompt: Optional[str] = None


class DomainListResponse(BaseModel):
    registry_version: str
    fallback: str
    domains: list[DomainResponse]


class HealthResponse(BaseModel):
    status: str
    version: str
    registry_version: str
    domains: list[str]
    scoring_model: str
