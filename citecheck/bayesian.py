"""
Bayesian Scorer (log-odds fusion model)

Treats each layer as an independent diagnostic test and fuses them in
log-odds space:

    prior_log_odds = ln(prior / (1 - prior))

    For each layer the DOMAIN configures (caller evidence for other
    layers is ignored), with confidence c ∈ [0, 1]:
        LR+ = sensitivity / (1 - specificity)
        LR- = (1 - sensitivity) / specificity
        Δ   = c × ln(LR+) + (1 - c) × ln(LR-)

    posterior = sigmoid(prior_log_odds + Σ Δ)
    verdict   = VERIFIED if posterior >= bayesian_threshold else FAILED

A layer with no evidence is scored at c = 0.5, NOT skipped. Its Δ is
0.5 × ln(LR+ × LR-), which is zero only when sensitivity = 1 - specificity
(a layer with no discriminative power). For calibrated layers a missing
result still shifts the posterior. Absent evidence is uninformative
input, not a neutral no-op, and passing c = 0.5 explicitly gives the
same number as omitting the layer.

No clamping. A sensitivity or specificity of exactly 0 or 1 raises
ZeroDivisionError / ValueError out of here; the registry rejects such
values at construction, and anything that slips past must fail loudly.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable

from citecheck.domains import REGISTRY_VERSION, BayesianLayerParams, DomainConfig
from citecheck.evidence import LayerResult, Verdict, index_evidence
from citecheck.scorer import ScoringStrategy

logger = logging.getLogger(__name__)

UNINFORMATIVE_CONFIDENCE = 0.5


# ============================================================
# PROBABILITY HELPERS
# ============================================================

def prob_to_log_odds(p: float) -> float:
    return math.log(p / (1 - p))


def sigmoid(x: float) -> float:
    """σ(x) = 1 / (1 + e^(-x)), evaluated without overflow for large |x|."""
    if x >= 0:
        return 1 / (1 + math.exp(-x))
    z = math.exp(x)
    return z / (1 + z)


def likelihood_ratios(params: BayesianLayerParams) -> tuple[float, float]:
    """(LR+, LR-) for a layer."""
    lr_pos = params.sensitivity / (1 - params.specificity)
    lr_neg = (1 - params.sensitivity) / params.specificity
    return lr_pos, lr_neg


def log_odds_delta(params: BayesianLayerParams, confidence: float) -> float:
    """Log-odds shift contributed by one layer at confidence c."""
    lr_pos, lr_neg = likelihood_ratios(params)
    return confidence * math.log(lr_pos) + (1 - confidence) * math.log(lr_neg)


# ============================================================
# RESULT + ENGINE
# ============================================================

@dataclass(frozen=True)
class BayesianScore:
    """Result of the log-odds model."""
    domain: str
    posterior: float
    threshold: float
    verdict: Verdict
    prior_log_odds: float
    log_odds: float                                              # prior + Σ Δ
    log_odds_contributions: dict[str, float] = field(default_factory=dict)
    registry_version: str = REGISTRY_VERSION
    model: str = "bayesian"

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "domain": self.domain,
            "posterior": self.posterior,
            "threshold": self.threshold,
            "verdict": self.verdict.value,
            "prior_log_odds": self.prior_log_odds,
            "log_odds": self.log_odds,
            "log_odds_contributions": dict(self.log_odds_contributions),
            "registry_version": self.registry_version,
        }


def compute_bayesian_score(
    config: DomainConfig,
    evidence: Iterable[LayerResult],
    registry_version: str = REGISTRY_VERSION,
) -> BayesianScore:
    """
    Posterior probability that the reference is real.

    Returns:
        BayesianScore with the posterior, verdict, and a Δ log-odds entry
        for every configured layer (in configured order).
    """
    results = index_evidence(evidence)

    prior_log_odds = prob_to_log_odds(config.prior)
    running = prior_log_odds
    contributions: dict[str, float] = {}

    for layer in config.layers:
        result = results.get(layer.id)
        c = result.confidence if result is not None else UNINFORMATIVE_CONFIDENCE
        delta = log_odds_delta(layer.bayesian, c)
        contributions[layer.id] = delta
        running += delta

    posterior = sigmoid(running)
    verdict = Verdict.from_threshold(posterior, config.bayesian_threshold)
    logger.debug(
        f"Bayesian posterior {posterior:.4f} for {config.domain}",
        extra={
            "domain": config.domain,
            "posterior": posterior,
            "verdict": verdict.value,
            "scoring_model": "bayesian",
        },
    )
    return BayesianScore(
        domain=config.domain,
        posterior=posterior,
        threshold=config.bayesian_threshold,
        verdict=verdict,
        prior_log_odds=prior_log_odds,
        log_odds=running,
        log_odds_contributions=contributions,
        registry_version=registry_version,
    )


class BayesianScorer(ScoringStrategy):
    """Log-odds model as a strategy object."""

    name = "bayesian"

    def score_config(
        self, config: DomainConfig, evidence: Iterable[LayerResult],
    ) -> BayesianScore:
        return compute_bayesian_score(config, evidence, self._registry.version)
