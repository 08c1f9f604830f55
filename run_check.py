#!/usr/bin/env python3
"""
run_check.py — Score references from a JSON evidence file.

Usage:
    python run_check.py evidence.json                     # Both models, text report
    python run_check.py evidence.json --model bayesian    # One model
    python run_check.py evidence.json --domain NEWS       # Skip classification
    python run_check.py evidence.json --registry reg.json # Custom domain registry
    python run_check.py evidence.json --json              # JSON only (for CI)

The file holds one item, a list of items, or {"items": [...]}, where an
item is {"reference": {...}, "evidence": [...], "domain": optional}.

Exit codes: 0 every verdict VERIFIED, 1 at least one FAILED, 2 bad input.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import ValidationError

from citecheck.config import settings, build_registry
from citecheck.domains import ConfigurationError, UnknownDomainError, load_registry
from citecheck.logging import setup_logging
from citecheck.schemas.verify import ScoreRequest
from citecheck.verifier import MODEL_CHOICES, ReferenceVerifier


def _read_items(path: Path) -> list[ScoreRequest]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "items" in data:
        data = data["items"]
    if isinstance(data, dict):
        data = [data]
    return [ScoreRequest.model_validate(item) for item in data]


def format_result(index: int, result: dict) -> str:
    lines = [f"[{index}] {result['domain']} ({result['domain_source']})"]
    if result["linear"]:
        lin = result["linear"]
        lines.append(
            f"    linear:   score={lin['score']:.4f} threshold={lin['threshold']:.2f} → {lin['verdict']}"
        )
    if result["bayesian"]:
        bay = result["bayesian"]
        lines.append(
            f"    bayesian: posterior={bay['posterior']:.4f} "
            f"threshold={bay['threshold']:.2f} → {bay['verdict']}"
        )
        for layer_id, delta in bay["log_odds_contributions"].items():
            lines.append(f"              {layer_id:<14} Δ log-odds {delta:+.4f}")
    if result["agreement"] is False:
        lines.append("    ⚠️  models disagree")
    if result["ignored_layers"]:
        lines.append(f"    ignored layers: {', '.join(result['ignored_layers'])}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CiteCheck reference scorer")
    parser.add_argument("path", help="JSON file with reference(s) and evidence")
    parser.add_argument(
        "--model",
        choices=MODEL_CHOICES,
        default=None,
        help=f"Scoring model (default: {settings.SCORING_MODEL})",
    )
    parser.add_argument("--domain", default=None, help="Score against this domain tag")
    parser.add_argument("--registry", default=None, help="JSON domain registry file")
    parser.add_argument("--json", action="store_true", help="Output JSON only")
    args = parser.parse_args(argv)

    setup_logging(level="WARNING", fmt="text", stream=sys.stderr)

    path = Path(args.path)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 2

    try:
        registry = load_registry(args.registry) if args.registry else build_registry(settings)
        items = _read_items(path)
        verifier = ReferenceVerifier(registry, default_model=args.model or settings.SCORING_MODEL)
        results = [
            verifier.verify(
                item.reference.to_reference() if item.reference else None,
                [e.to_layer_result() for e in item.evidence],
                model=args.model or item.model,
                domain=args.domain or item.domain,
            )
            for item in items
        ]
    except (OSError, ValueError, ValidationError, ConfigurationError, UnknownDomainError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        print(f"Scored {len(results)} reference(s) against registry {registry.version}")
        for i, result in enumerate(results, 1):
            print(format_result(i, result))

    all_verified = all(
        verdict == "VERIFIED" for r in results for verdict in r["verdicts"].values()
    )
    return 0 if all_verified else 1


if __name__ == "__main__":
    sys.exit(main())
