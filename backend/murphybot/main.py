"""
MurphyGPT - FastAPI Application
===============================
Main entry point configuring:
- uvloop for high-performance async (non-Windows)
- Application lifespan: build the assistant, initial knowledge refresh,
  periodic refresh task, clean shutdown
- Slack signature middleware and API routers (/slack, /api)
- Health check endpoints (/, /health, /health/knowledge)
"""

import sys
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from murphybot.config import Settings, settings as default_settings
from murphybot.api import chat, knowledge, slack
from murphybot.logging_config import setup_logging
from murphybot.middleware.slack_signature import SlackSignatureMiddleware
from murphybot.services.assistant import Assistant, build_assistant

logger = logging.getLogger(__name__)

# Use uvloop for better async performance (Linux/macOS)
# On Windows, uvloop is not supported, so we fall back to default
if sys.platform != "win32":
    try:
        import uvloop
        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
        logger.info("✅ Using uvloop for enhanced async performance")
    except ImportError:
        logger.warning("⚠️ uvloop not available, using default event loop")


def _check_environment(settings: Settings) -> None:
    """Log missing configuration; nothing here is fatal"""
    missing = [
        name for name, value in (
            ("SLACK_BOT_TOKEN", settings.slack_bot_token),
            ("SLACK_SIGNING_SECRET", settings.slack_signing_secret),
            ("GROQ_API_KEY", settings.groq_api_key),
            ("FAQ_SHEET_URL", settings.faq_sheet_url),
            ("PROCEDURES_DIR", settings.procedures_dir),
        ) if not value
    ]
    if missing:
        logger.warning(f"⚠️ Missing settings: {', '.join(missing)}")


def create_app(settings: Optional[Settings] = None, assistant: Optional[Assistant] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to the environment)
        assistant: Pre-built assistant; when given, the lifespan does not
            build or start one (tests)
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup: build the assistant (unless injected), run the first
        knowledge refresh and start the refresh timer.
        Shutdown: stop the timer and close the Slack HTTP client.
        """
        owned = getattr(app.state, "assistant", None) is None
        if owned:
            setup_logging(settings.log_level, settings.log_dir, settings.debug_mode)
            logger.info("🚀 Starting MurphyGPT...")
            _check_environment(settings)
            app.state.assistant = build_assistant(settings)
            await app.state.assistant.start()
            logger.info("✅ MurphyGPT is running")

        yield  # Application runs here

        if owned:
            logger.info("👋 Shutting down MurphyGPT...")
            await app.state.assistant.stop()

    app = FastAPI(
        title="MurphyGPT API",
        description="Slack assistant answering from the team FAQ and SOP library",
        version="1.0.0",
        lifespan=lifespan
    )
    if assistant is not None:
        app.state.assistant = assistant

    # Verifies Slack signatures on /slack/* when a signing secret is configured
    app.add_middleware(SlackSignatureMiddleware, signing_secret=settings.slack_signing_secret)

    app.include_router(slack.router, tags=["Slack"])
    app.include_router(chat.router, prefix="/api", tags=["Chat"])
    app.include_router(knowledge.router, prefix="/api", tags=["Knowledge"])

    @app.get("/")
    async def root():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "MurphyGPT",
            "version": "1.0.0"
        }

    @app.get("/health")
    async def health_check():
        """Detailed health check"""
        current: Optional[Assistant] = getattr(app.state, "assistant", None)
        collections = {}
        if current is not None:
            collections = {c.name: len(c) for c in current.knowledge.collections}
        return {
            "status": "healthy",
            "llm_model": settings.llm_model,
            "collections": collections,
        }

    @app.get("/health/knowledge")
    async def knowledge_health():
        """Refresh status of each knowledge collection"""
        current: Optional[Assistant] = getattr(app.state, "assistant", None)
        if current is None:
            return {"status": "starting", "collections": []}

        statuses = [c.status for c in current.knowledge.collections]
        stale = any(s.configured and not s.ok for s in statuses)
        return {
            "status": "degraded" if stale else "healthy",
            "collections": [s.model_dump(mode="json") for s in statuses],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "murphybot.main:app",
        host="0.0.0.0",
        port=8000,
    )
