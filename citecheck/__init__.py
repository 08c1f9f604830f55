"""
CiteCheck — Reference Trust Scoring

Decides whether a cited reference is genuine or fabricated from the
confidences reported by independent verification layers (DOI lookup,
title-index search, URL resolution, AI claim review).

Public API:
  - DomainRegistry:        Immutable per-domain calibration table
  - build_default_registry: Registry of the built-in domains
  - load_registry:         Registry from a JSON document
  - DomainClassifier:      Reference → content domain
  - compute_linear_score:  Weighted-sum model
  - compute_bayesian_score: Log-odds fusion model
  - WeightedSumScorer / BayesianScorer: Both models as strategies
  - ReferenceVerifier:     Classify + score in one call

Usage:
    from citecheck import build_default_registry, ReferenceVerifier, LayerResult, Reference
    registry = build_default_registry()
    verifier = ReferenceVerifier(registry)
    verifier.verify(Reference(url="https://www.reuters.com/..."), [LayerResult("ai", True, 0.9)])
"""

__version__ = "1.0.0"

from citecheck.evidence import (
    LAYER_AI,
    LAYER_DOI,
    LAYER_IDS,
    LAYER_TITLE_SEARCH,
    LAYER_URL,
    LayerResult,
    Reference,
    Verdict,
)
from citecheck.domains import (
    ACADEMIC,
    NEWS,
    GOVERNMENT,
    EDUCATIONAL,
    GENERAL,
    REGISTRY_VERSION,
    BUILTIN_DOMAINS,
    BayesianLayerParams,
    ConfigurationError,
    DomainConfig,
    DomainRegistry,
    LayerConfig,
    UnknownDomainError,
    UrlPattern,
    build_default_registry,
    load_registry,
    registry_from_dict,
)
from citecheck.classifier import DomainClassifier, classify_reference
from citecheck.scorer import (
    LinearScore,
    ScoringStrategy,
    WeightedSumScorer,
    compute_linear_score,
)
from citecheck.bayesian import BayesianScore, BayesianScorer, compute_bayesian_score
from citecheck.factory import get_scorer
from citecheck.verifier import ReferenceVerifier

__all__ = [
    "LAYER_AI",
    "LAYER_DOI",
    "LAYER_IDS",
    "LAYER_TITLE_SEARCH",
    "LAYER_URL",
    "LayerResult",
    "Reference",
    "Verdict",
    "ACADEMIC",
    "NEWS",
    "GOVERNMENT",
    "EDUCATIONAL",
    "GENERAL",
    "REGISTRY_VERSION",
    "BUILTIN_DOMAINS",
    "BayesianLayerParams",
    "ConfigurationError",
    "DomainConfig",
    "DomainRegistry",
    "LayerConfig",
    "UnknownDomainError",
    "UrlPattern",
    "build_default_registry",
    "load_registry",
    "registry_from_dict",
    "DomainClassifier",
    "classify_reference",
    "LinearScore",
    "ScoringStrategy",
    "WeightedSumScorer",
    "compute_linear_score",
    "BayesianScore",
    "BayesianScorer",
    "compute_bayesian_score",
    "get_scorer",
    "ReferenceVerifier",
]
