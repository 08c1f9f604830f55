"""
CiteCheck Configuration

Central settings loaded from environment variables. Read by the
service and the command line runner only; the scoring core is
always handed its registry explicitly.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _split_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Scoring ---
    # "linear", "bayesian", or "both"
    SCORING_MODEL: str = os.getenv("CITECHECK_SCORING_MODEL", "both")

    # --- Domain registry ---
    # Comma-separated subset of built-in domains; empty = all built-ins
    DOMAINS: tuple[str, ...] = _split_list(os.getenv("CITECHECK_DOMAINS", ""))
    # JSON registry file; overrides DOMAINS when set
    REGISTRY_PATH: str = os.getenv("CITECHECK_REGISTRY_PATH", "")

    # --- Server ---
    HOST: str = os.getenv("CITECHECK_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("CITECHECK_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("CITECHECK_CORS_ORIGINS", "*")


settings = Settings()


def build_registry(config: Settings = settings):
    """Build the domain registry described by `config`."""
    from citecheck.domains import build_default_registry, load_registry

    if config.REGISTRY_PATH:
        return load_registry(config.REGISTRY_PATH)
    return build_default_registry(config.DOMAINS)
