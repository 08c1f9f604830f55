"""
Scoring strategy factory — look up a model by name.
"""

from citecheck.domains import DomainRegistry
from citecheck.scorer import ScoringStrategy

SCORING_MODELS = ("linear", "bayesian")


def get_scorer(model: str, registry: DomainRegistry) -> ScoringStrategy:
    """Factory — returns the named scoring strategy bound to `registry`."""
    if model == "linear":
        from citecheck.scorer import WeightedSumScorer
        return WeightedSumScorer(registry)
    elif model == "bayesian":
        from citecheck.bayesian import BayesianScorer
        return BayesianScorer(registry)
    else:
        raise ValueError(f"Unknown scoring model: {model}")
