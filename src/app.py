"""OrderDesk FastAPI application.

Web server that processes order desk commands synchronously via HTTP.
Each request under /orders runs inside the orderdesk domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (projectors fire in UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from orderdesk.domain import orderdesk
from orderdesk.utils.logging import bind_order_context, clear_order_context

orderdesk.init()

_DOMAIN_PREFIXES = ("/orders",)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="OrderDesk API",
    description="Order fulfillment back office: checklist, status workflow and live board",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the orderdesk domain context and bind request log context."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        # Health check, docs, etc.
        return await call_next(request)

    bind_order_context(
        path=request.url.path,
        method=request.method,
        actor_id=request.headers.get("x-actor-id", ""),
    )
    try:
        with orderdesk.domain_context():
            response = await call_next(request)
    finally:
        clear_order_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from orderdesk.api.routes import order_router  # noqa: E402

app.include_router(order_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"orderdesk": {"name": orderdesk.name}},
        }
    )
