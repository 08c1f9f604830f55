"""
Weighted-Sum Scorer (linear model)

Computes a 0-1 trust score as the weighted sum of layer confidences:

    score = Σ weight(layer) × confidence(layer)   over the domain's layers

A configured layer with no evidence contributes ZERO. Absence earns no
credit here; that is exactly what the Bayesian model (bayesian.py)
treats differently. Evidence for layers the domain does not configure
is ignored.

    verdict = VERIFIED if score >= domain.threshold else FAILED

Also home to ScoringStrategy, the common evidence-in / verdict-out
contract both models implement.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable

from citecheck.domains import REGISTRY_VERSION, DomainConfig, DomainRegistry
from citecheck.evidence import LayerResult, Verdict, index_evidence

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """A scoring model bound to a registry: (domain, evidence) → result with a verdict."""

    name: str = ""

    def __init__(self, registry: DomainRegistry):
        self._registry = registry

    @property
    def registry(self) -> DomainRegistry:
        return self._registry

    def score(self, domain: str, evidence: Iterable[LayerResult]):
        """Score `evidence` against `domain`. Raises UnknownDomainError for unconfigured tags."""
        config = self._registry.lookup(domain)
        return self.score_config(config, evidence)

    @abstractmethod
    def score_config(self, config: DomainConfig, evidence: Iterable[LayerResult]):
        """Score against an explicit domain config."""
        ...


@dataclass(frozen=True)
class LinearScore:
    """Result of the weighted-sum model."""
    domain: str
    score: float
    threshold: float
    verdict: Verdict
    breakdown: dict[str, float] = field(default_factory=dict)   # layer id → weight × confidence
    registry_version: str = REGISTRY_VERSION
    model: str = "linear"

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "domain": self.domain,
            "score": self.score,
            "threshold": self.threshold,
            "verdict": self.verdict.value,
            "breakdown": dict(self.breakdown),
            "registry_version": self.registry_version,
        }


def compute_linear_score(
    config: DomainConfig,
    evidence: Iterable[LayerResult],
    registry_version: str = REGISTRY_VERSION,
) -> LinearScore:
    """
    Weighted-sum score of `evidence` under `config`.

    Returns:
        LinearScore with the score, verdict, and a per-layer breakdown
        listing every configured layer (0.0 for layers with no evidence).
    """
    results = index_evidence(evidence)
    score = 0.0
    breakdown: dict[str, float] = {}

    for layer in config.layers:
        result = results.get(layer.id)
        contribution = layer.weight * result.confidence if result is not None else 0.0
        breakdown[layer.id] = contribution
        score += contribution

    verdict = Verdict.from_threshold(score, config.threshold)
    logger.debug(
        f"Linear score {score:.4f} for {config.domain}",
        extra={
            "domain": config.domain,
            "score": score,
            "verdict": verdict.value,
            "scoring_model": "linear",
        },
    )
    return LinearScore(
        domain=config.domain,
        score=score,
        threshold=config.threshold,
        verdict=verdict,
        breakdown=breakdown,
        registry_version=registry_version,
    )


class WeightedSumScorer(ScoringStrategy):
    """Linear model as a strategy object."""

    name = "linear"

    def score_config(
        self, config: DomainConfig, evidence: Iterable[LayerResult],
    ) -> LinearScore:
        return compute_linear_score(config, evidence, self._registry.version)
