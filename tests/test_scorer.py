"""
Tests for the weighted-sum (linear) scorer and the strategy factory.
"""

import pytest

from citecheck.bayesian import BayesianScorer
from citecheck.domains import (
    ACADEMIC,
    EDUCATIONAL,
    GENERAL,
    GOVERNMENT,
    NEWS,
    UnknownDomainError,
)
from citecheck.evidence import Verdict
from citecheck.factory import SCORING_MODELS, get_scorer
from citecheck.scorer import LinearScore, WeightedSumScorer, compute_linear_score
from conftest import ev


@pytest.fixture(scope="module")
def scorer(registry):
    return WeightedSumScorer(registry)


# ============================================================
# REALISTIC SCENARIOS
# ============================================================

class TestScenarios:

    def test_academic_strong(self, scorer):
        result = scorer.score(ACADEMIC, [
            ev("doi", 1.0), ev("title_search", 0.9), ev("url", 1.0), ev("ai", 0.8),
        ])
        assert result.score == pytest.approx(0.94)
        assert result.verdict == Verdict.VERIFIED

    def test_academic_fabricated(self, scorer):
        result = scorer.score(ACADEMIC, [
            ev("doi", 0.0), ev("title_search", 0.0), ev("url", 0.0), ev("ai", 0.4),
        ])
        assert result.score == pytest.approx(0.06)
        assert result.verdict == Verdict.FAILED

    def test_academic_doi_alone_is_not_enough(self, scorer):
        result = scorer.score(ACADEMIC, [ev("doi", 1.0)])
        assert result.score == pytest.approx(0.45)
        assert result.verdict == Verdict.FAILED

    def test_news_live_article(self, scorer):
        result = scorer.score(NEWS, [ev("url", 0.8), ev("ai", 0.9)])
        assert result.score == pytest.approx(0.865)
        assert result.verdict == Verdict.VERIFIED

    def test_news_paywalled_article_passes(self, scorer):
        """URL probe blocked by the paywall; AI confidence alone clears 0.50."""
        result = scorer.score(NEWS, [ev("url", 0.0), ev("ai", 0.85)])
        assert result.score == pytest.approx(0.5525)
        assert result.verdict == Verdict.VERIFIED

    def test_academic_concrete_scenario(self, scorer):
        result = scorer.score(ACADEMIC, [
            ev("doi", 0.95), ev("title_search", 0.9), ev("url", 0.6), ev("ai", 0.85),
        ])
        assert result.score == pytest.approx(0.885)
        assert result.verdict == Verdict.VERIFIED

    def test_news_fabricated(self, scorer):
        result = scorer.score(NEWS, [ev("url", 0.0), ev("ai", 0.3)])
        assert result.score == pytest.approx(0.195)
        assert result.verdict == Verdict.FAILED

    def test_government_report(self, scorer):
        result = scorer.score(GOVERNMENT, [ev("url", 1.0), ev("ai", 0.9)])
        assert result.score == pytest.approx(0.94)
        assert result.verdict == Verdict.VERIFIED

    def test_government_dead_link(self, scorer):
        result = scorer.score(GOVERNMENT, [ev("url", 0.0), ev("ai", 0.2)])
        assert result.score == pytest.approx(0.12)
        assert result.verdict == Verdict.FAILED

    def test_general_reference_page(self, scorer):
        result = scorer.score(GENERAL, [ev("url", 0.9), ev("ai", 0.85)])
        assert result.score == pytest.approx(0.78)
        assert result.verdict == Verdict.VERIFIED

    def test_general_dubious_blog(self, scorer):
        result = scorer.score(GENERAL, [ev("url", 0.4), ev("ai", 0.1)])
        assert result.score == pytest.approx(0.18)
        assert result.verdict == Verdict.FAILED

    def test_educational_course_page(self, scorer):
        result = scorer.score(EDUCATIONAL, [ev("url", 0.9), ev("ai", 0.85)])
        assert result.score == pytest.approx(0.74)
        assert result.verdict == Verdict.VERIFIED


# ============================================================
# SCORING RULES
# ============================================================

class TestLinearRules:

    @pytest.mark.parametrize("domain", [ACADEMIC, NEWS, GOVERNMENT, EDUCATIONAL, GENERAL])
    def test_empty_evidence_scores_zero(self, scorer, domain):
        result = scorer.score(domain, [])
        assert result.score == 0.0
        assert result.verdict == Verdict.FAILED

    @pytest.mark.parametrize("domain", [ACADEMIC, NEWS, GOVERNMENT, EDUCATIONAL, GENERAL])
    def test_full_confidence_scores_one(self, scorer, registry, domain):
        evidence = [ev(layer_id, 1.0) for layer_id in registry.lookup(domain).layer_ids]
        result = scorer.score(domain, evidence)
        assert result.score == pytest.approx(1.0)
        assert result.verdict == Verdict.VERIFIED

    def test_missing_layer_contributes_zero(self, scorer):
        result = scorer.score(NEWS, [ev("ai", 1.0)])
        assert result.breakdown == {"url": 0.0, "ai": pytest.approx(0.65)}

    def test_unconfigured_layers_ignored(self, scorer):
        """NEWS has no DOI layer; a perfect DOI result changes nothing."""
        with_doi = scorer.score(NEWS, [ev("doi", 1.0), ev("ai", 0.5)])
        without = scorer.score(NEWS, [ev("ai", 0.5)])
        assert with_doi.score == without.score
        assert "doi" not in with_doi.breakdown

    def test_passed_flag_is_not_read(self, scorer):
        a = scorer.score(NEWS, [ev("url", 0.7, passed=True), ev("ai", 0.7, passed=True)])
        b = scorer.score(NEWS, [ev("url", 0.7, passed=False), ev("ai", 0.7, passed=False)])
        assert a.score == b.score

    def test_duplicate_layer_last_wins(self, scorer):
        result = scorer.score(NEWS, [ev("ai", 0.1), ev("ai", 0.9)])
        assert result.score == pytest.approx(0.65 * 0.9)

    def test_evidence_order_irrelevant(self, scorer):
        evidence = [ev("doi", 0.9), ev("title_search", 0.6), ev("url", 0.3), ev("ai", 0.7)]
        forward = scorer.score(ACADEMIC, evidence)
        backward = scorer.score(ACADEMIC, list(reversed(evidence)))
        assert forward.score == pytest.approx(backward.score)

    def test_breakdown_lists_configured_layers_in_order(self, scorer, registry):
        result = scorer.score(ACADEMIC, [ev("ai", 1.0)])
        assert tuple(result.breakdown) == registry.lookup(ACADEMIC).layer_ids

    def test_breakdown_sums_to_score(self, scorer):
        result = scorer.score(ACADEMIC, [ev("doi", 0.7), ev("url", 0.2), ev("ai", 0.9)])
        assert sum(result.breakdown.values()) == pytest.approx(result.score)

    @pytest.mark.parametrize("layer_id", ["doi", "title_search", "url", "ai"])
    def test_monotone_in_each_layer(self, scorer, layer_id):
        base = [ev(l, 0.5) for l in ("doi", "title_search", "url", "ai") if l != layer_id]
        scores = [
            scorer.score(ACADEMIC, base + [ev(layer_id, c)]).score
            for c in (0.0, 0.25, 0.5, 0.75, 1.0)
        ]
        assert scores == sorted(scores)

    def test_score_stays_in_unit_interval(self, scorer):
        for c in (0.0, 0.3, 0.6, 1.0):
            result = scorer.score(GENERAL, [ev("url", c), ev("title_search", c), ev("ai", c)])
            assert 0.0 <= result.score <= 1.0 + 1e-9


class TestThresholdBoundary:

    def test_equality_is_verified(self, boundary_registry):
        result = WeightedSumScorer(boundary_registry).score(GENERAL, [ev("url", 0.5)])
        assert result.score == 0.5
        assert result.verdict == Verdict.VERIFIED

    def test_just_below_fails(self, boundary_registry):
        result = WeightedSumScorer(boundary_registry).score(GENERAL, [ev("url", 0.4999)])
        assert result.verdict == Verdict.FAILED

    def test_verdict_helper(self):
        assert Verdict.from_threshold(0.7, 0.7) == Verdict.VERIFIED
        assert Verdict.from_threshold(0.69, 0.7) == Verdict.FAILED


# ============================================================
# RESULT SHAPE
# ============================================================

class TestLinearResult:

    def test_result_carries_context(self, scorer, registry):
        result = scorer.score(GOVERNMENT, [ev("url", 1.0)])
        assert isinstance(result, LinearScore)
        assert result.domain == GOVERNMENT
        assert result.threshold == 0.55
        assert result.model == "linear"
        assert result.registry_version == registry.version

    def test_to_dict(self, scorer):
        data = scorer.score(NEWS, [ev("ai", 0.85)]).to_dict()
        assert data["model"] == "linear"
        assert data["verdict"] == "VERIFIED"
        assert set(data) == {
            "model", "domain", "score", "threshold", "verdict", "breakdown", "registry_version",
        }

    def test_pure_function_matches_strategy(self, scorer, registry):
        evidence = [ev("url", 0.6), ev("ai", 0.7)]
        direct = compute_linear_score(registry.lookup(NEWS), evidence, registry.version)
        assert direct == scorer.score(NEWS, evidence)

    def test_evidence_iterable_consumed_once(self, scorer):
        result = scorer.score(NEWS, (e for e in [ev("url", 1.0), ev("ai", 1.0)]))
        assert result.score == pytest.approx(1.0)


# ============================================================
# STRATEGY + FACTORY
# ============================================================

class TestStrategy:

    def test_unknown_domain(self, scorer):
        with pytest.raises(UnknownDomainError):
            scorer.score("PODCAST", [ev("ai", 1.0)])

    def test_educational_unknown_in_four_domain_registry(self, four_domain_registry):
        with pytest.raises(UnknownDomainError):
            WeightedSumScorer(four_domain_registry).score(EDUCATIONAL, [])

    def test_scorer_exposes_registry(self, scorer, registry):
        assert scorer.registry is registry


class TestFactory:

    def test_models(self):
        assert SCORING_MODELS == ("linear", "bayesian")

    def test_linear(self, registry):
        s = get_scorer("linear", registry)
        assert isinstance(s, WeightedSumScorer)
        assert s.name == "linear"

    def test_bayesian(self, registry):
        s = get_scorer("bayesian", registry)
        assert isinstance(s, BayesianScorer)
        assert s.name == "bayesian"

    def test_unknown_model(self, registry):
        with pytest.raises(ValueError, match="Unknown scoring model"):
            get_scorer("neural", registry)
