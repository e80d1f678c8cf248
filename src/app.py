"""Review moderation FastAPI application.

Processes commands synchronously via HTTP. Each request under ``/reviews``
is wrapped in the moderation domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay (e.g. "production" → PostgreSQL).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from moderation.domain import moderation
from moderation.utils.logging import clear_context
from protean.integrations.fastapi import register_exception_handlers

moderation.init()

_DOMAIN_PREFIXES = ("/reviews",)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Review Moderation API",
    description="Moderation queue, decisions and audit trail for venue reviews",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the moderation domain context for API requests."""
    clear_context()
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with moderation.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from moderation.api import register_moderation_exception_handlers, review_router  # noqa: E402

app.include_router(review_router)
register_exception_handlers(app)
register_moderation_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": moderation.name})
