# cartography/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cartography.api import router as api_router
from cartography.core.config import settings
from cartography.core.exceptions import NodeNotFoundException, MalformedDatasetError
from cartography.core.limiter import limiter
from cartography.services.graph_store import GraphStore
from cartography.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup Logic ---
    try:
        store = GraphStore.load_path(settings.DATASET_PATH)
    except (OSError, MalformedDatasetError) as exc:
        logger.error("Could not load dataset '%s': %s", settings.DATASET_PATH, exc)
        raise
    app.state.sessions = SessionRegistry(store)

    try:
        yield
    finally:
        # --- Shutdown Logic ---
        logger.info("Discarding %d workspace session(s).", len(app.state.sessions))
        app.state.sessions = None


app = FastAPI(
    title="Archive Cartography API",
    description="Progressive disclosure of a hierarchical archive graph.",
    version="1.0.0",
    lifespan=lifespan
)

# Add Limiter to the application state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Exempt all OPTIONS requests from rate limiting to prevent CORS preflight issues
app.state.limiter.exempt_methods = ["OPTIONS"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "X-User-ID"],
)

@app.exception_handler(NodeNotFoundException)
async def node_not_found_exception_handler(request: Request, exc: NodeNotFoundException):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message},
    )

app.include_router(api_router.router)

@app.get("/")
async def root():
    return {"message": "Welcome to the Archive Cartography API"}

@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """Reports whether the dataset is loaded and how many workspaces are open."""
    sessions = getattr(request.app.state, "sessions", None)
    return {
        "status": "ok",
        "dataset_loaded": sessions is not None,
        "sessions": len(sessions) if sessions is not None else 0,
    }
