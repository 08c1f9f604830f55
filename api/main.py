"""
CiteCheck API — Main Application

POST /score          — Classify (optionally) and score one reference
POST /score/batch    — Score up to 100 references
POST /classify       — Route a reference to its content domain
GET  /domains        — Domain registry, in priority order
GET  /domains/{tag}  — One domain, with its AI guidance prompt
GET  /health         — Health check
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request

from citecheck import __version__
from citecheck.config import build_registry, settings
from citecheck.domains import UnknownDomainError
from citecheck.logging import get_logger, setup_logging, verification_context
from citecheck.verifier import ReferenceVerifier
from citecheck.schemas.verify import (
    ClassifyResponse,
    DomainListResponse,
    DomainResponse,
    HealthResponse,
    ReferenceModel,
    ScoreBatchRequest,
    ScoreBatchResponse,
    ScoreRequest,
    ScoreResponse,
)

logger = get_logger("api")


# ============================================================
# STARTUP / SHUTDOWN
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the registry and verifier once; handlers read them from app.state."""
    setup_logging()

    registry = build_registry(settings)
    app.state.registry = registry
    app.state.verifier = ReferenceVerifier(registry, default_model=settings.SCORING_MODEL)

    logger.info(
        "CiteCheck API starting",
        extra={"registry_version": registry.version, "scoring_model": settings.SCORING_MODEL},
    )
    yield
    logger.info("CiteCheck API shutting down")


app = FastAPI(
    title="CiteCheck API",
    description="Trust scoring for cited references from independent verification layers",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    allow_credentials=False,
)


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(UnknownDomainError)
async def unknown_domain_handler(request: Request, exc: UnknownDomainError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_error_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions — return structured error, don't leak internals."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}",
        extra={"error": str(exc), "path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. The reference could not be scored."},
    )


def _verifier(request: Request) -> ReferenceVerifier:
    return request.app.state.verifier


def _score_one(verifier: ReferenceVerifier, item: ScoreRequest) -> dict:
    reference = item.reference.to_reference() if item.reference else None
    return verifier.verify(
        reference,
        [e.to_layer_result() for e in item.evidence],
        model=item.model,
        domain=item.domain,
    )


# ============================================================
# ROUTES
# ============================================================

@app.post("/score", response_model=ScoreResponse)
async def score_reference(body: ScoreRequest, request: Request):
    """Score one reference with the linear model, the Bayesian model, or both."""
    start = time.time()
    result = _score_one(_verifier(request), body)

    duration = int((time.time() - start) * 1000)
    logger.info(
        f"Scored reference: domain={result['domain']} verdicts={result['verdicts']}",
        extra={**verification_context(result), "duration_ms": duration},
    )
    return result


@app.post("/score/batch", response_model=ScoreBatchResponse)
async def score_batch(body: ScoreBatchRequest, request: Request):
    """Score each item independently; an unknown domain fails only its own item."""
    verifier = _verifier(request)
    results: list = []
    errors: list = []

    for item in body.items:
        try:
            results.append(_score_one(verifier, item))
            errors.append(None)
        except UnknownDomainError as e:
            logger.warning(
                "Batch item failed",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            results.append(None)
            errors.append(str(e))

    scored = sum(1 for r in results if r is not None)
    logger.info(f"Batch complete: {scored}/{len(body.items)} scored")
    return {
        "results": results,
        "errors": errors,
        "total": len(body.items),
        "scored": scored,
    }


@app.post("/classify", response_model=ClassifyResponse)
async def classify(body: ReferenceModel, request: Request):
    """Route a reference to its content domain."""
    verifier = _verifier(request)
    domain = verifier.classifier.classify(body.to_reference())
    return {"domain": domain, "registry_version": verifier.registry.version}


@app.get("/domains", response_model=DomainListResponse)
async def list_domains(request: Request):
    """Return every configured domain in classification priority order."""
    registry = _verifier(request).registry
    return {
        "registry_version": registry.version,
        "fallback": registry.fallback,
        "domains": registry.describe_all(),
    }


@app.get("/domains/{domain}", response_model=DomainResponse)
async def get_domain(domain: str, request: Request):
    """Return one domain's configuration plus the guidance prompt for the AI layer."""
    registry = _verifier(request).registry
    tag = domain if domain in registry else domain.upper()
    if tag not in registry:
        raise HTTPException(404, f"Unknown content domain: {domain}")
    data = registry.describe(tag)
    data["guidance_prompt"] = registry.guidance_prompt(tag)
    return data


@app.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Health check."""
    verifier = _verifier(request)
    return {
        "status": "operational",
        "version": __version__,
        "registry_version": verifier.registry.version,
        "domains": list(verifier.registry.domains),
        "scoring_model": verifier.default_model,
    }


# --- Version Headers Middleware ---
@app.middleware("http")
async def add_version_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-CiteCheck-Version"] = __version__
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# --- Request Logging Middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with method, path, status, duration."""
    path = request.url.path
    if path == "/health":
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start) * 1000, 1)

    logger.info(
        f"{request.method} {path} → {response.status_code} ({duration_ms}ms)",
        extra={
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.HOST, port=settings.PORT)
