"""
Tests for ReferenceVerifier — classify-then-score orchestration and
side-by-side model comparison.
"""

import json

import pytest

from citecheck.domains import ACADEMIC, GENERAL, NEWS, UnknownDomainError
from citecheck.evidence import Reference
from citecheck.verifier import MODEL_CHOICES, ReferenceVerifier
from conftest import ev


@pytest.fixture(scope="module")
def verifier(registry):
    return ReferenceVerifier(registry)


class TestConstruction:

    def test_model_choices(self):
        assert MODEL_CHOICES == ("linear", "bayesian", "both")

    def test_default_model_is_both(self, verifier):
        assert verifier.default_model == "both"

    def test_rejects_unknown_default(self, registry):
        with pytest.raises(ValueError, match="Unknown scoring model"):
            ReferenceVerifier(registry, default_model="neural")

    def test_classifier_shares_registry(self, verifier, registry):
        assert verifier.classifier.registry is registry


class TestVerify:

    def test_classifies_when_no_domain_given(self, verifier):
        result = verifier.verify(
            Reference(url="https://www.reuters.com/world/x"),
            [ev("url", 0.8), ev("ai", 0.9)],
        )
        assert result["domain"] == NEWS
        assert result["domain_source"] == "classified"

    def test_given_domain_skips_classification(self, verifier):
        result = verifier.verify(
            Reference(doi="10.1000/xyz"), [ev("ai", 0.9)], domain=GENERAL,
        )
        assert result["domain"] == GENERAL
        assert result["domain_source"] == "given"

    def test_no_reference_scores_fallback(self, verifier):
        result = verifier.verify(None, [ev("ai", 0.9)])
        assert result["domain"] == GENERAL
        assert result["reference"] == {"doi": None, "url": None, "type": None}

    def test_unknown_given_domain(self, verifier):
        with pytest.raises(UnknownDomainError):
            verifier.verify(None, [], domain="PODCAST")

    def test_unknown_model(self, verifier):
        with pytest.raises(ValueError):
            verifier.verify(None, [], model="neural")

    def test_both_models_agree(self, verifier):
        result = verifier.verify(
            Reference(doi="10.1038/x"),
            [ev("doi", 1.0), ev("title_search", 0.9), ev("url", 1.0), ev("ai", 0.8)],
        )
        assert result["domain"] == ACADEMIC
        assert result["verdicts"] == {"linear": "VERIFIED", "bayesian": "VERIFIED"}
        assert result["agreement"] is True
        assert result["linear"]["score"] == pytest.approx(0.94)
        assert result["bayesian"]["posterior"] == pytest.approx(0.9995707795, rel=1e-9)

    def test_models_disagree_on_missing_evidence(self, verifier):
        """Linear gives absent layers nothing; Bayesian treats them as uninformative."""
        result = verifier.verify(None, [], domain=NEWS)
        assert result["verdicts"] == {"linear": "FAILED", "bayesian": "VERIFIED"}
        assert result["agreement"] is False

    def test_models_disagree_on_doi_alone(self, verifier):
        result = verifier.verify(Reference(doi="10.1000/xyz"), [ev("doi", 1.0)])
        assert result["verdicts"] == {"linear": "FAILED", "bayesian": "VERIFIED"}

    @pytest.mark.parametrize("model", ["linear", "bayesian"])
    def test_single_model(self, verifier, model):
        result = verifier.verify(None, [ev("ai", 0.9)], model=model)
        other = "bayesian" if model == "linear" else "linear"
        assert result["model"] == model
        assert result[model] is not None
        assert result[other] is None
        assert list(result["verdicts"]) == [model]
        assert result["agreement"] is None

    def test_ignored_layers_reported(self, verifier):
        result = verifier.verify(
            None, [ev("doi", 1.0), ev("ai", 0.9), ev("ai", 0.8)], domain=NEWS,
        )
        assert result["evidence_layers"] == ["doi", "ai"]
        assert result["ignored_layers"] == ["doi"]

    def test_evidence_generator_accepted(self, verifier):
        result = verifier.verify(None, (e for e in [ev("url", 0.8), ev("ai", 0.9)]), domain=NEWS)
        assert result["linear"]["score"] == pytest.approx(0.865)
        assert result["bayesian"]["posterior"] == pytest.approx(0.9581761031, rel=1e-9)

    def test_result_is_json_serialisable(self, verifier, registry):
        result = verifier.verify(Reference(url="https://arxiv.org/abs/1"), [ev("doi", 1.0)])
        assert json.loads(json.dumps(result))["registry_version"] == registry.version


class TestVerifyMany:

    def test_dict_items(self, verifier):
        results = verifier.verify_many([
            {
                "reference": {"url": "https://www.nytimes.com/a"},
                "evidence": [
                    {"layer_id": "url", "passed": False, "confidence": 0.0},
                    {"layer_id": "ai", "passed": True, "confidence": 0.85},
                ],
            },
            {"domain": "GOVERNMENT", "evidence": [{"layer_id": "url", "confidence": 1.0}]},
        ])
        assert [r["domain"] for r in results] == [NEWS, "GOVERNMENT"]
        assert results[0]["linear"]["score"] == pytest.approx(0.5525)

    def test_layer_result_items(self, verifier):
        results = verifier.verify_many(
            [{"reference": None, "evidence": [ev("ai", 0.9)]}], model="linear",
        )
        assert results[0]["model"] == "linear"
        assert results[0]["bayesian"] is None

    def test_per_item_model(self, verifier):
        results = verifier.verify_many([{"evidence": [], "model": "bayesian"}])
        assert results[0]["model"] == "bayesian"
