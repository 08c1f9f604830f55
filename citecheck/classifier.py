"""
Domain Classifier — Route a Reference to Its Content Domain

Deterministic and total: every reference gets a domain, never an error.

Precedence (strict):
  1. Any non-empty DOI → ACADEMIC. A DOI is definitive, whatever the URL or type says.
  2. URL patterns, domains tested in registry priority order. First match wins.
  3. Type tokens, same order. First match wins.
  4. The registry's fallback domain.

Missing or null fields are treated as empty and never match anything.
"""

from __future__ import annotations

import logging
from typing import Optional

from citecheck.domains import ACADEMIC, DomainRegistry
from citecheck.evidence import Reference

logger = logging.getLogger(__name__)


class DomainClassifier:
    """Classifies references against one registry's identification patterns."""

    def __init__(self, registry: DomainRegistry, doi_domain: str = ACADEMIC):
        self._registry = registry
        # A registry without an academic domain routes DOIs by URL/type like anything else.
        self._doi_domain: Optional[str] = doi_domain if doi_domain in registry else None

    @property
    def registry(self) -> DomainRegistry:
        return self._registry

    def classify(
        self,
        reference: Optional[Reference] = None,
        *,
        doi: Optional[str] = None,
        url: Optional[str] = None,
        type: Optional[str] = None,
    ) -> str:
        """
        Return the content domain tag for a reference.

        Accepts either a Reference or the individual fields as keywords.
        """
        if reference is not None:
            doi, url, type = reference.doi, reference.url, reference.type

        domain, rule = self._match(doi or "", url or "", type or "")
        logger.debug(
            f"Classified reference as {domain} by {rule}",
            extra={"domain": domain},
        )
        return domain

    def _match(self, doi: str, url: str, type_token: str) -> tuple[str, str]:
        # --- Rule 1: DOI ---
        if doi and self._doi_domain is not None:
            return self._doi_domain, "doi"

        # --- Rule 2: URL patterns (priority order) ---
        if url:
            for config in self._registry:
                if config.matches_url(url):
                    return config.domain, "url"

        # --- Rule 3: type tokens (priority order) ---
        if type_token:
            for config in self._registry:
                if config.matches_type(type_token):
                    return config.domain, "type"

        return self._registry.fallback, "fallback"


def classify_reference(
    registry: DomainRegistry,
    doi: Optional[str] = None,
    url: Optional[str] = None,
    type: Optional[str] = None,
) -> str:
    """One-shot classification without keeping a classifier around."""
    return DomainClassifier(registry).classify(doi=doi, url=url, type=type)
