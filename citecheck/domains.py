"""
Domain Registry — Immutable Per-Domain Calibration

The registry decides, for every content domain:
  1. Which verification layers apply (and in what reporting order)
  2. How much each layer weighs in the linear model
  3. Each layer's diagnostic power (sensitivity / specificity)
  4. The domain prior and both verdict thresholds
  5. How a reference is recognised as belonging to the domain

The registry is built once and never mutated. Scorers and the
classifier are handed a registry explicitly; nothing in the core
reads a module-level table at call time. Adding a domain means
adding a DomainConfig entry (or a JSON registry file), never
touching scorer code.

Every invariant is checked at construction. A registry that exists
is a valid registry.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from citecheck.evidence import LAYER_AI, LAYER_DOI, LAYER_TITLE_SEARCH, LAYER_URL

logger = logging.getLogger(__name__)

# --- Registry Version (stamped on every score result) ---
REGISTRY_VERSION = "2.0.0"

# --- Built-in domain tags ---
ACADEMIC = "ACADEMIC"
NEWS = "NEWS"
GOVERNMENT = "GOVERNMENT"
EDUCATIONAL = "EDUCATIONAL"
GENERAL = "GENERAL"

WEIGHT_TOLERANCE = 1e-5


class ConfigurationError(ValueError):
    """The domain configuration violates a registry invariant."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Invalid domain configuration: " + "; ".join(self.problems))


class UnknownDomainError(LookupError):
    """Lookup of a domain tag the registry does not configure."""

    def __init__(self, domain: str, known: Iterable[str] = ()):
        self.domain = domain
        known_list = ", ".join(known)
        super().__init__(
            f"Unknown content domain: {domain!r}"
            + (f" (configured: {known_list})" if known_list else "")
        )


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class BayesianLayerParams:
    """
    Diagnostic power of one layer within one domain.

    sensitivity = P(layer passes | reference is real)
    specificity = P(layer fails  | reference is fake)

    Both must lie strictly inside (0, 1) so that the likelihood
    ratios below are finite and nonzero.
    """
    sensitivity: float
    specificity: float

    @property
    def lr_positive(self) -> float:
        """LR+ — how far a pass shifts belief toward real."""
        return self.sensitivity / (1 - self.specificity)

    @property
    def lr_negative(self) -> float:
        """LR- — how far a fail shifts belief toward fake."""
        return (1 - self.sensitivity) / self.specificity


@dataclass(frozen=True)
class LayerConfig:
    """A verification layer as configured for one domain."""
    id: str
    weight: float                   # linear-model weight; a domain's weights sum to 1.0
    description: str
    bayesian: BayesianLayerParams


@dataclass(frozen=True)
class UrlPattern:
    """Declarative URL predicate: a regex searched anywhere in the URL."""
    pattern: str
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise ConfigurationError([f"invalid URL pattern {self.pattern!r}: {e}"]) from e
        object.__setattr__(self, "_regex", compiled)

    def matches(self, url: Optional[str]) -> bool:
        if not url:
            return False
        return self._regex.search(url) is not None


@dataclass(frozen=True)
class DomainConfig:
    """Everything the classifier and both scorers need to know about a domain."""
    domain: str
    label: str
    description: str
    layers: tuple[LayerConfig, ...]
    threshold: float                # linear verdict cutoff, in (0, 1]
    prior: float                    # P(real) before any evidence, in (0, 1)
    bayesian_threshold: float       # posterior verdict cutoff, in (0, 1)
    ai_instruction: str             # passed through to the AI layer, never interpreted
    url_patterns: tuple[UrlPattern, ...] = ()
    type_patterns: tuple[str, ...] = ()

    def __post_init__(self):
        # Accept lists and bare regex strings from callers; store tuples.
        object.__setattr__(self, "layers", tuple(self.layers))
        object.__setattr__(self, "url_patterns", tuple(
            p if isinstance(p, UrlPattern) else UrlPattern(p)
            for p in self.url_patterns
        ))
        object.__setattr__(self, "type_patterns", tuple(self.type_patterns))

    @property
    def layer_ids(self) -> tuple[str, ...]:
        return tuple(layer.id for layer in self.layers)

    def get_layer(self, layer_id: str) -> Optional[LayerConfig]:
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def matches_url(self, url: Optional[str]) -> bool:
        return any(p.matches(url) for p in self.url_patterns)

    def matches_type(self, type_token: Optional[str]) -> bool:
        if not type_token:
            return False
        return type_token in self.type_patterns

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "label": self.label,
            "description": self.description,
            "threshold": self.threshold,
            "prior": self.prior,
            "bayesian_threshold": self.bayesian_threshold,
            "ai_instruction": self.ai_instruction,
            "url_patterns": [p.pattern for p in self.url_patterns],
            "type_patterns": list(self.type_patterns),
            "layers": [
                {
                    "id": layer.id,
                    "weight": layer.weight,
                    "description": layer.description,
                    "sensitivity": layer.bayesian.sensitivity,
                    "specificity": layer.bayesian.specificity,
                    "lr_positive": layer.bayesian.lr_positive,
                    "lr_negative": layer.bayesian.lr_negative,
                }
                for layer in self.layers
            ],
        }


# ============================================================
# VALIDATION
# ============================================================

def _in_open_unit(value: float) -> bool:
    return 0 < value < 1


def validate_domain_config(config: DomainConfig) -> list[str]:
    """Return every invariant the config violates (empty list = valid)."""
    name = config.domain or "<unnamed>"
    problems: list[str] = []

    if not config.domain:
        problems.append("domain tag must be non-empty")
    if not config.layers:
        problems.append(f"{name}: at least one layer is required")

    seen: set[str] = set()
    for layer in config.layers:
        if layer.id in seen:
            problems.append(f"{name}: duplicate layer id {layer.id!r}")
        seen.add(layer.id)
        if layer.weight < 0:
            problems.append(f"{name}.{layer.id}: weight must be >= 0 (got {layer.weight})")
        if not _in_open_unit(layer.bayesian.sensitivity):
            problems.append(
                f"{name}.{layer.id}: sensitivity must be in (0, 1) "
                f"(got {layer.bayesian.sensitivity})"
            )
        if not _in_open_unit(layer.bayesian.specificity):
            problems.append(
                f"{name}.{layer.id}: specificity must be in (0, 1) "
                f"(got {layer.bayesian.specificity})"
            )

    if config.layers:
        total = math.fsum(layer.weight for layer in config.layers)
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_TOLERANCE):
            problems.append(f"{name}: layer weights must sum to 1.0 (got {total:.6f})")

    if not 0 < config.threshold <= 1:
        problems.append(f"{name}: threshold must be in (0, 1] (got {config.threshold})")
    if not _in_open_unit(config.prior):
        problems.append(f"{name}: prior must be in (0, 1) (got {config.prior})")
    if not _in_open_unit(config.bayesian_threshold):
        problems.append(
            f"{name}: bayesian_threshold must be in (0, 1) (got {config.bayesian_threshold})"
        )
    if not config.ai_instruction or not config.ai_instruction.strip():
        problems.append(f"{name}: ai_instruction must be non-empty")

    return problems


# ============================================================
# THE REGISTRY
# ============================================================

class DomainRegistry:
    """
    Read-only table of domain configurations, in classification priority order.

    The order configs are given in IS the priority order: the classifier
    tests domains first to last, and the first match wins. The fallback
    domain is returned when nothing matches and must itself be configured.
    """

    def __init__(
        self,
        configs: Iterable[DomainConfig],
        fallback: str = GENERAL,
        version: str = REGISTRY_VERSION,
    ):
        configs = tuple(configs)
        problems: list[str] = []
        if not configs:
            problems.append("at least one domain is required")

        table: dict[str, DomainConfig] = {}
        for config in configs:
            problems.extend(validate_domain_config(config))
            if config.domain in table:
                problems.append(f"duplicate domain {config.domain!r}")
            table[config.domain] = config

        if configs and fallback not in table:
            problems.append(f"fallback domain {fallback!r} is not configured")

        if problems:
            raise ConfigurationError(problems)

        self._configs: Mapping[str, DomainConfig] = MappingProxyType(table)
        self._order: tuple[str, ...] = tuple(c.domain for c in configs)
        self._fallback = fallback
        self._version = version

        logger.info(
            "Domain registry loaded",
            extra={"registry_version": version, "domain": ",".join(self._order)},
        )

    # --- Read access ---

    @property
    def domains(self) -> tuple[str, ...]:
        """Configured domain tags, in priority order."""
        return self._order

    @property
    def fallback(self) -> str:
        return self._fallback

    @property
    def version(self) -> str:
        return self._version

    @property
    def configs(self) -> Mapping[str, DomainConfig]:
        return self._configs

    def lookup(self, domain: str) -> DomainConfig:
        """Return the config for `domain`, or raise UnknownDomainError."""
        try:
            return self._configs[domain]
        except KeyError:
            raise UnknownDomainError(domain, self._order) from None

    def __contains__(self, domain: object) -> bool:
        return domain in self._configs

    def __iter__(self) -> Iterator[DomainConfig]:
        return (self._configs[d] for d in self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return (
            f"DomainRegistry(domains={list(self._order)!r}, "
            f"fallback={self._fallback!r}, version={self._version!r})"
        )

    # --- Derivation (never mutates self) ---

    def with_domain(
        self, config: DomainConfig, before: Optional[str] = None,
    ) -> "DomainRegistry":
        """
        Return a new registry with `config` added.

        The new domain is placed immediately before `before` when given,
        otherwise just ahead of the fallback (so the catch-all stays last).
        A config whose tag already exists replaces the old entry in place.
        """
        order = list(self._order)
        configs = dict(self._configs)

        if config.domain in configs:
            configs[config.domain] = config
        else:
            anchor = before if before is not None else self._fallback
            if anchor not in configs:
                raise UnknownDomainError(anchor, self._order)
            order.insert(order.index(anchor), config.domain)
            configs[config.domain] = config

        return DomainRegistry(
            (configs[d] for d in order), fallback=self._fallback, version=self._version,
        )

    # --- Presentation ---

    def describe(self, domain: str) -> dict:
        config = self.lookup(domain)
        data = config.to_dict()
        data["priority"] = self._order.index(domain)
        data["is_fallback"] = domain == self._fallback
        return data

    def describe_all(self) -> list[dict]:
        return [self.describe(d) for d in self._order]

    def guidance_prompt(self, domain: str) -> str:
        """
        Format a domain's AI instruction for the external AI evaluator.

        The instruction text is opaque here. It is copied verbatim next
        to the evidence layers the domain expects.
        """
        config = self.lookup(domain)
        lines = [f"## Verification Guidance: {config.label}\n"]
        lines.append(f"_{config.description}_\n")
        lines.append(config.ai_instruction)
        lines.append("")
        lines.append("### Evidence layers for this domain")
        for layer in config.layers:
            lines.append(f"- **{layer.id}** (weight {layer.weight:.2f}): {layer.description}")
        return "\n".join(lines)


# ============================================================
# BUILT-IN DOMAIN TABLE
# ============================================================

ACADEMIC_CONFIG = DomainConfig(
    domain=ACADEMIC,
    label="Academic",
    description="Peer-reviewed papers, preprints, books, technical reports",
    layers=(
        LayerConfig(
            id=LAYER_DOI,
            weight=0.45,
            description="DOI registered in CrossRef",
            # Real papers almost always carry a resolving DOI; fakes rarely do.
            bayesian=BayesianLayerParams(sensitivity=0.92, specificity=0.97),
        ),
        LayerConfig(
            id=LAYER_TITLE_SEARCH,
            weight=0.30,
            description="Indexed in OpenAlex / title search",
            # Preprints may lag the indexes.
            bayesian=BayesianLayerParams(sensitivity=0.80, specificity=0.88),
        ),
        LayerConfig(
            id=LAYER_URL,
            weight=0.10,
            description="URL resolves (journal site, arXiv, etc.)",
            # Links rot and paywalls return 403 for real papers.
            bayesian=BayesianLayerParams(sensitivity=0.70, specificity=0.72),
        ),
        LayerConfig(
            id=LAYER_AI,
            weight=0.15,
            description="AI claim-support evaluation",
            bayesian=BayesianLayerParams(sensitivity=0.78, specificity=0.82),
        ),
    ),
    threshold=0.70,
    prior=0.72,
    bayesian_threshold=0.82,
    ai_instruction=(
        "Verify the reference is a real academic work (paper, book, report) and "
        "that the cited claim is supported by it. Err toward REAL for indexed works."
    ),
    type_patterns=("PAPER", "BOOK", "REPORT"),
    url_patterns=(
        r"\bdoi\.org\b",
        r"\barxiv\.org\b",
        r"\bncbi\.nlm\.nih\.gov\b",
        r"\bpubmed\b",
        r"\bsciencedirect\b",
        r"\bspringer\b",
        r"\bnature\.com\b",
        r"\bjstor\.org\b",
        r"\bieee\.org\b",
    ),
)

NEWS_CONFIG = DomainConfig(
    domain=NEWS,
    label="News",
    description="News articles from established outlets (NYT, Reuters, BBC, etc.)",
    layers=(
        LayerConfig(
            id=LAYER_URL,
            weight=0.35,
            description=(
                "URL resolves to a live news article "
                "(403 from known outlets = partial credit)"
            ),
            # Paywalls keep sensitivity low; fabricated URLs rarely resolve.
            bayesian=BayesianLayerParams(sensitivity=0.55, specificity=0.85),
        ),
        LayerConfig(
            id=LAYER_AI,
            weight=0.65,
            description="AI confirms outlet credibility + claim support",
            bayesian=BayesianLayerParams(sensitivity=0.82, specificity=0.80),
        ),
    ),
    # AI alone (0.65 x 0.85 = 0.5525) clears this for paywalled outlets.
    threshold=0.50,
    prior=0.75,
    bayesian_threshold=0.65,
    ai_instruction=(
        "Verify this is from a credible news outlet (established newspapers, wire "
        "services, broadcasters) and that the cited claim appears in the article. "
        "DOI and academic indexing are NOT expected for news. Err toward REAL for "
        "known reputable outlets like NYT, Reuters, BBC, AP, Washington Post, "
        "Guardian, WSJ, Bloomberg, FT, NPR."
    ),
    type_patterns=("ARTICLE", "WEB"),
    url_patterns=(
        r"\bnytimes\.com\b",
        r"\bwashingtonpost\.com\b",
        r"\btheguardian\.com\b",
        r"\breuters\.com\b",
        r"\bapnews\.com\b",
        r"\bbbc\.(com|co\.uk)\b",
        r"\bnpr\.org\b",
        r"\bwsj\.com\b",
        r"\bbloomberg\.com\b",
        r"\bft\.com\b",
        r"\bpolitico\.com\b",
        r"\btheatlantic\.com\b",
    ),
)

GOVERNMENT_CONFIG = DomainConfig(
    domain=GOVERNMENT,
    label="Government",
    description="Official government reports, legislation, statistics",
    layers=(
        LayerConfig(
            id=LAYER_URL,
            weight=0.40,
            description="URL resolves to an official government domain",
            bayesian=BayesianLayerParams(sensitivity=0.85, specificity=0.93),
        ),
        LayerConfig(
            id=LAYER_AI,
            weight=0.60,
            description="AI verifies official source + claim support",
            bayesian=BayesianLayerParams(sensitivity=0.80, specificity=0.84),
        ),
    ),
    threshold=0.55,
    prior=0.82,
    bayesian_threshold=0.72,
    ai_instruction=(
        "Verify this is from an official government or intergovernmental source "
        "(agency websites, .gov, .gov.uk, UN, WHO, etc.) and that the cited claim "
        "is supported by the document. Err toward REAL for official government URLs."
    ),
    type_patterns=("REPORT", "WEB"),
    url_patterns=(
        r"\.gov\b",
        r"\.gov\.\w{2}\b",
        r"\bwho\.int\b",
        r"\bun\.org\b",
        r"\boecd\.org\b",
        r"\bworldbank\.org\b",
        r"\bimf\.org\b",
        r"\bcdc\.gov\b",
    ),
)

EDUCATIONAL_CONFIG = DomainConfig(
    domain=EDUCATIONAL,
    label="Educational",
    description="Course material, open textbooks, lecture notes, MOOC content",
    layers=(
        LayerConfig(
            id=LAYER_URL,
            weight=0.35,
            description="URL resolves on an institutional or courseware platform",
            # Course pages move between terms but rarely vanish outright.
            bayesian=BayesianLayerParams(sensitivity=0.75, specificity=0.80),
        ),
        LayerConfig(
            id=LAYER_TITLE_SEARCH,
            weight=0.15,
            description="Open textbook or course indexed in title search",
            # Most course material is not indexed at all.
            bayesian=BayesianLayerParams(sensitivity=0.40, specificity=0.80),
        ),
        LayerConfig(
            id=LAYER_AI,
            weight=0.50,
            description="AI confirms the platform or institution + claim support",
            bayesian=BayesianLayerParams(sensitivity=0.76, specificity=0.80),
        ),
    ),
    threshold=0.55,
    prior=0.70,
    bayesian_threshold=0.70,
    ai_instruction=(
        "Verify this is genuine educational material from a recognised institution "
        "or platform (university course pages, Khan Academy, OpenStax, Coursera, edX, "
        "other MOOC providers) and that the cited claim is supported by it. Err "
        "toward REAL for material hosted by accredited institutions."
    ),
    type_patterns=("COURSE", "LECTURE", "TEXTBOOK"),
    url_patterns=(
        r"\.edu\b",
        r"\.ac\.uk\b",
        r"\bkhanacademy\.org\b",
        r"\bopenstax\.org\b",
        r"\bcoursera\.org\b",
        r"\bedx\.org\b",
        r"\bfuturelearn\.com\b",
    ),
)

GENERAL_CONFIG = DomainConfig(
    domain=GENERAL,
    label="General",
    description="Blog posts, podcasts, videos, and other web content",
    layers=(
        LayerConfig(
            id=LAYER_URL,
            weight=0.30,
            description="URL resolves",
            # General URLs are easy to fabricate.
            bayesian=BayesianLayerParams(sensitivity=0.65, specificity=0.70),
        ),
        LayerConfig(
            id=LAYER_TITLE_SEARCH,
            weight=0.10,
            description="May be indexed in OpenAlex / title search",
            bayesian=BayesianLayerParams(sensitivity=0.30, specificity=0.75),
        ),
        LayerConfig(
            id=LAYER_AI,
            weight=0.60,
            description="AI evaluates source credibility + claim support",
            bayesian=BayesianLayerParams(sensitivity=0.72, specificity=0.78),
        ),
    ),
    threshold=0.55,
    # Catch-all: higher fabrication risk than any structured domain.
    prior=0.45,
    bayesian_threshold=0.68,
    ai_instruction=(
        "Verify the source exists and the cited claim is supported. Apply high "
        "scrutiny to blogs, social media, and anonymous sources. Err toward "
        "REJECTION for unverifiable anonymous sources."
    ),
    type_patterns=("WEB", "VIDEO", "ARTICLE"),
)

# Priority order: ACADEMIC > NEWS > GOVERNMENT > EDUCATIONAL > GENERAL
BUILTIN_DOMAINS: tuple[DomainConfig, ...] = (
    ACADEMIC_CONFIG,
    NEWS_CONFIG,
    GOVERNMENT_CONFIG,
    EDUCATIONAL_CONFIG,
    GENERAL_CONFIG,
)


def build_default_registry(domains: Optional[Iterable[str]] = None) -> DomainRegistry:
    """
    Build a registry from the built-in table.

    Args:
        domains: Subset of built-in tags to include. None (or empty) means
            all five. Built-in priority order is kept regardless of the
            order given here.
    """
    wanted = [d.strip().upper() for d in domains or () if d and d.strip()]
    if not wanted:
        return DomainRegistry(BUILTIN_DOMAINS)

    builtin_tags = {c.domain for c in BUILTIN_DOMAINS}
    unknown = [d for d in wanted if d not in builtin_tags]
    if unknown:
        raise ConfigurationError([f"not a built-in domain: {d!r}" for d in unknown])
    return DomainRegistry(c for c in BUILTIN_DOMAINS if c.domain in wanted)


def registry_from_dict(data: dict) -> DomainRegistry:
    """Build a registry from a parsed registry document (see schemas.registry)."""
    from citecheck.schemas.registry import RegistryFile

    document = RegistryFile.model_validate(data)
    return document.to_registry()


def load_registry(path: str | Path) -> DomainRegistry:
    """Load a JSON registry file. Raises ConfigurationError or pydantic.ValidationError."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError([f"{path}: invalid JSON: {e}"]) from e
    registry = registry_from_dict(data)
    logger.info(
        f"Domain registry read from {path}",
        extra={"registry_version": registry.version},
    )
    return registry
