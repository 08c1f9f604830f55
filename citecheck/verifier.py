"""
Verifier — Classify, Then Score

Orchestrates one verification request:
  1. Resolve the domain (caller-supplied, or classified from the reference)
  2. Run the requested model(s): linear, bayesian, or both
  3. Merge into a single result dict

The two models are alternatives over the same inputs. Neither calls
the other, and "both" simply runs them side by side so callers can
compare (or migrate) and see whether they agree.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from citecheck.classifier import DomainClassifier
from citecheck.domains import DomainRegistry
from citecheck.evidence import LayerResult, Reference
from citecheck.factory import SCORING_MODELS, get_scorer
from citecheck.logging import verification_context

logger = logging.getLogger(__name__)

MODEL_CHOICES = SCORING_MODELS + ("both",)


class ReferenceVerifier:
    """Classifier + both scoring strategies over one registry."""

    def __init__(self, registry: DomainRegistry, default_model: str = "both"):
        if default_model not in MODEL_CHOICES:
            raise ValueError(f"Unknown scoring model: {default_model}")
        self.registry = registry
        self.default_model = default_model
        self.classifier = DomainClassifier(registry)
        self._scorers = {name: get_scorer(name, registry) for name in SCORING_MODELS}

    def verify(
        self,
        reference: Optional[Reference],
        evidence: Iterable[LayerResult],
        model: Optional[str] = None,
        domain: Optional[str] = None,
    ) -> dict:
        """
        Verify one reference.

        Args:
            reference: Identifying fields used for classification. May be None
                when `domain` is given.
            evidence: Layer results gathered by the external layers.
            model: "linear" | "bayesian" | "both". Defaults to the verifier's default.
            domain: Skip classification and score against this domain.

        Returns:
            Result dict with the domain, each model's result, their verdicts,
            and (for "both") whether the verdicts agree.
        """
        model = model or self.default_model
        if model not in MODEL_CHOICES:
            raise ValueError(f"Unknown scoring model: {model}")

        reference = reference or Reference()
        if domain is None:
            domain = self.classifier.classify(reference)
            domain_source = "classified"
        else:
            domain_source = "given"
        config = self.registry.lookup(domain)

        evidence = list(evidence)
        supplied = list(dict.fromkeys(r.layer_id for r in evidence))
        ignored = [layer_id for layer_id in supplied if config.get_layer(layer_id) is None]

        names = SCORING_MODELS if model == "both" else (model,)
        scored = {name: self._scorers[name].score_config(config, evidence) for name in names}
        verdicts = {name: result.verdict.value for name, result in scored.items()}

        result = {
            "domain": domain,
            "domain_source": domain_source,
            "model": model,
            "registry_version": self.registry.version,
            "reference": {"doi": reference.doi, "url": reference.url, "type": reference.type},
            "evidence_layers": supplied,
            "ignored_layers": ignored,
            "linear": scored["linear"].to_dict() if "linear" in scored else None,
            "bayesian": scored["bayesian"].to_dict() if "bayesian" in scored else None,
            "verdicts": verdicts,
            "agreement": (
                len(set(verdicts.values())) == 1 if len(verdicts) > 1 else None
            ),
        }

        logger.debug(f"Verified reference in {domain}: {verdicts}", extra=verification_context(result))
        return result

    def verify_many(self, items: Iterable[dict], model: Optional[str] = None) -> list[dict]:
        """
        Verify a batch of `{"reference", "evidence", "domain"?}` items.

        Evidence entries may be LayerResult objects or plain dicts with
        layer_id / passed / confidence keys.
        """
        return [
            self.verify(
                Reference.from_dict(item.get("reference")),
                [
                    e if isinstance(e, LayerResult) else LayerResult(
                        layer_id=e["layer_id"],
                        passed=bool(e.get("passed", False)),
                        confidence=e["confidence"],
                    )
                    for e in item.get("evidence", [])
                ],
                model=model or item.get("model"),
                domain=item.get("domain"),
            )
            for item in items
        ]
