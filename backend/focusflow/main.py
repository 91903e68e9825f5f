"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from focusflow.agent.llm import LLMClient
from focusflow.api.routes import ai, resume, roadmaps, topic_content
from focusflow.core.config import get_settings
from focusflow.core.database import close_db, init_db
from focusflow.core.logging import configure_logging, get_logger
from focusflow.services.chat_service import InMemorySessionStore
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import SqlContentStore
from focusflow.services.generation_queue import GenerationQueue

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    configure_logging(debug=settings.DEBUG)
    logger.info(
        "Starting FocusFlow",
        version=settings.APP_VERSION,
        env=settings.ENV,
        debug=settings.DEBUG,
    )
    await init_db()

    llm_client = LLMClient()
    app.state.llm_client = llm_client
    app.state.generation_queue = GenerationQueue(
        ContentGenerator(llm_client),
        SqlContentStore(),
        concurrency=settings.CONTENT_GENERATION_CONCURRENCY,
    )
    app.state.chat_sessions = InMemorySessionStore(
        max_sessions=settings.CHAT_MAX_SESSIONS,
        ttl_seconds=settings.CHAT_SESSION_TTL_SECONDS,
    )
    yield
    # Shutdown; queued topics are not persisted and will be generated on demand
    queue: GenerationQueue = app.state.generation_queue
    logger.info(
        "Shutting down FocusFlow",
        pending_topics=queue.pending_count,
        active_topics=queue.active_count,
    )
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="AI-powered personalized learning roadmaps",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(roadmaps.router, prefix="/api")
app.include_router(topic_content.router, prefix="/api")
app.include_router(ai.router, prefix="/api")
app.include_router(resume.router, prefix="/api")


@app.get("/api/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "env": settings.ENV,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "focusflow.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        reload=settings.is_development,
    )
