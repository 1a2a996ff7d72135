import asyncio
import inspect
import logging
import os
from contextlib import asynccontextmanager, suppress

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from dal.conversation_dal import ConversationDAL
from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from services.conversation.persistence import ConversationPersistence
from services.conversation.session_registry import ConversationRegistry
from services.waste.analysis_adapter import WasteAnalysisAdapter
from services.waste.image_classifier import WasteImageClassifier
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import analysis_timeout, load_timings, log_level, session_idle_timeout, waste_model

load_dotenv()  # Load environment variables from .env file if present
logging.basicConfig(level=log_level())
logger = logging.getLogger(__name__)


def _build_openai_client():
    """Return an AsyncOpenAI client, or None when no API key is configured."""
    if not os.getenv("OPENAI_API_KEY"):
        logger.warning("OPENAI_API_KEY is not set; waste image analysis will report failures")
        return None
    try:
        return AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc


async def _sweep_idle_sessions(registry: ConversationRegistry, max_idle: float) -> None:
    """Periodically close sessions whose client left without a socket goodbye."""
    interval = min(60.0, max_idle)
    while True:
        await asyncio.sleep(interval)
        try:
            await registry.sweep_idle(max_idle)
        except Exception as exc:
            logger.error("Idle session sweep failed: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite conversation store (at DATABASE_DIR/app.db)
      - the OpenAI async client backing waste image analysis
      - the registry of live conversations
    and attach them to `app.state`.
    """
    db_initializer = AsyncDatabaseInitializer()
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    openai_client = _build_openai_client()
    app.state.openai_client = openai_client

    classifier = WasteImageClassifier(openai_client, model=waste_model()) if openai_client else None
    app.state.conversations = ConversationRegistry(
        adapter=WasteAnalysisAdapter(classifier, timeout=analysis_timeout()),
        persistence=ConversationPersistence(ConversationDAL(db_initializer)),
        timings=load_timings(),
    )

    max_idle = session_idle_timeout()
    sweeper = asyncio.create_task(_sweep_idle_sessions(app.state.conversations, max_idle)) if max_idle else None

    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
        await app.state.conversations.close_all()
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.warning("Error while closing the OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Nagarsathi Municipal Assistant", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting the store, classifier, and live session count.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        registry = getattr(request.app.state, "conversations", None)
        return {
            "ok": True,
            "db_initialized": has_db,
            "waste_analysis_available": registry is not None and registry.adapter.available,
            "active_sessions": len(registry) if registry is not None else 0,
        }

    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()
