"""
Structured Logging — JSON Output for Production

Configures Python logging to emit structured JSON logs.
Each log entry includes timestamp, level, module, and
any additional context fields.

Usage:
    from citecheck.logging import get_logger
    logger = get_logger("verifier")
    logger.info("Scored", extra={"domain": "NEWS", "posterior": 0.81})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


LOG_LEVEL = os.getenv("CITECHECK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("CITECHECK_LOG_FORMAT", "json")  # "json" or "text"

EXTRA_FIELDS = (
    "domain", "verdict", "score", "posterior", "scoring_model", "layers",
    "registry_version", "error", "error_type", "duration_ms", "status_code",
    "method", "path", "verdicts", "agreement",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT, stream=None):
    """Configure the citecheck logger. Call once at startup."""
    root = logging.getLogger("citecheck")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the citecheck namespace."""
    return logging.getLogger(f"citecheck.{name}")


def verification_context(result: dict) -> dict:
    """
    `extra` fields for a verifier result dict.

    Keeps score lines uniform across the service and the runner so a
    log query on `domain` or `verdicts` sees every scored reference.
    """
    context = {
        "domain": result["domain"],
        "scoring_model": result["model"],
        "layers": len(result["evidence_layers"]),
        "verdicts": result["verdicts"],
        "registry_version": result["registry_version"],
    }
    if result.get("agreement") is not None:
        context["agreement"] = result["agreement"]
    if result.get("linear"):
        context["score"] = result["linear"]["score"]
    if result.get("bayesian"):
        context["posterior"] = result["bayesian"]["posterior"]
    return context
