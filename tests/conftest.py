"""
Shared fixtures and factories.

Registries are built per test module from explicit domain lists, so
every test states which domain set it runs against.
"""

import pytest

from citecheck.domains import (
    ACADEMIC,
    GENERAL,
    GOVERNMENT,
    NEWS,
    BayesianLayerParams,
    DomainConfig,
    DomainRegistry,
    LayerConfig,
    build_default_registry,
)
from citecheck.evidence import LayerResult


FOUR_DOMAINS = [ACADEMIC, NEWS, GOVERNMENT, GENERAL]


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def make_layer(
    layer_id: str = "url",
    weight: float = 1.0,
    sensitivity: float = 0.8,
    specificity: float = 0.9,
    description: str = "test layer",
) -> LayerConfig:
    return LayerConfig(
        id=layer_id,
        weight=weight,
        description=description,
        bayesian=BayesianLayerParams(sensitivity=sensitivity, specificity=specificity),
    )


def make_domain(domain: str = GENERAL, **overrides) -> DomainConfig:
    """
    Build a DomainConfig with sensible defaults.

    Defaults: a single url layer carrying all the weight, mid-range
    thresholds and prior, no identification patterns.
    """
    fields = {
        "domain": domain,
        "label": domain.title(),
        "description": f"{domain} test domain",
        "layers": (make_layer(),),
        "threshold": 0.5,
        "prior": 0.6,
        "bayesian_threshold": 0.7,
        "ai_instruction": "Verify the source exists and supports the cited claim.",
        "url_patterns": (),
        "type_patterns": (),
    }
    fields.update(overrides)
    return DomainConfig(**fields)


def ev(layer_id: str, confidence: float, passed: bool | None = None) -> LayerResult:
    """Shorthand LayerResult; `passed` defaults to confidence >= 0.5."""
    if passed is None:
        passed = confidence >= 0.5
    return LayerResult(layer_id=layer_id, passed=passed, confidence=confidence)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope="module")
def registry() -> DomainRegistry:
    """All five built-in domains."""
    return build_default_registry()


@pytest.fixture(scope="module")
def four_domain_registry() -> DomainRegistry:
    """The four-domain set (no EDUCATIONAL)."""
    return build_default_registry(FOUR_DOMAINS)


@pytest.fixture
def boundary_registry() -> DomainRegistry:
    """
    One domain whose layer has zero discriminative power
    (sensitivity = 1 - specificity = 0.5), prior 0.5, both thresholds 0.5.
    """
    return DomainRegistry([
        make_domain(
            GENERAL,
            layers=(make_layer("url", 1.0, sensitivity=0.5, specificity=0.5),),
            threshold=0.5,
            prior=0.5,
            bayesian_threshold=0.5,
        ),
    ])
