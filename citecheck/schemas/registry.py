"""
Registry File Schema

Pydantic models for a JSON domain-registry document. These check
SHAPE only (types, required keys, no unknown keys). Range and
weight-sum invariants are enforced by DomainRegistry itself, so a
registry built from a file and one built in code pass the same gate.

Example document:

    {
      "version": "custom-1",
      "fallback": "GENERAL",
      "domains": [
        {
          "domain": "GENERAL",
          "label": "General",
          "description": "Everything else",
          "threshold": 0.55,
          "prior": 0.45,
          "bayesian_threshold": 0.68,
          "ai_instruction": "Verify the source exists and supports the claim.",
          "type_patterns": ["WEB"],
          "url_patterns": [],
          "layers": [
            {"id": "url", "weight": 0.4, "description": "URL resolves",
             "bayesian": {"sensitivity": 0.65, "specificity": 0.70}},
            {"id": "ai", "weight": 0.6, "description": "AI review",
             "bayesian": {"sensitivity": 0.72, "specificity": 0.78}}
          ]
        }
      ]
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from citecheck.domains import (
    GENERAL,
    REGISTRY_VERSION,
    BayesianLayerParams,
    DomainConfig,
    DomainRegistry,
    LayerConfig,
)


class BayesianParamsEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sensitivity: float
    specificity: float


class LayerEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    weight: float
    description: str = ""
    bayesian: BayesianParamsEntry


class DomainEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    domain: str = Field(..., min_length=1)
    label: str = ""
    description: str = ""
    layers: list[LayerEntry]
    threshold: float
    prior: float
    bayesian_threshold: float
    ai_instruction: str
    url_patterns: list[str] = Field(default_factory=list)
    type_patterns: list[str] = Field(default_factory=list)

    def to_domain_config(self) -> DomainConfig:
        return DomainConfig(
            domain=self.domain,
            label=self.label or self.domain.title(),
            description=self.description,
            layers=tuple(
                LayerConfig(
                    id=layer.id,
                    weight=layer.weight,
                    description=layer.description,
                    bayesian=BayesianLayerParams(
                        sensitivity=layer.bayesian.sensitivity,
                        specificity=layer.bayesian.specificity,
                    ),
                )
                for layer in self.layers
            ),
            threshold=self.threshold,
            prior=self.prior,
            bayesian_threshold=self.bayesian_threshold,
            ai_instruction=self.ai_instruction,
            url_patterns=tuple(self.url_patterns),
            type_patterns=tuple(self.type_patterns),
        )


class RegistryFile(BaseModel):
    """Top-level registry document. Domain order is priority order."""
    model_config = ConfigDict(extra="forbid")

    version: str = REGISTRY_VERSION
    fallback: str = GENERAL
    domains: list[DomainEntry] = Field(..., min_length=1)

    def to_registry(self) -> DomainRegistry:
        return DomainRegistry(
            (entry.to_domain_config() for entry in self.domains),
            fallback=self.fallback,
            version=self.version,
        )
