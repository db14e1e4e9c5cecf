"""
FastAPI Application Entry Point

Exposes the transformation engine to the UI layer:
  - Ranked transformation batches for clipboard content
  - Custom instruction processing
  - Cancellation of a session's in-flight request
  - Backend status (cached, periodically re-probed)

Run: uvicorn main:app --reload --host 127.0.0.1 --port 8000
     or: python main.py   (AGENT_HOST / AGENT_PORT from .env)
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import Config
from engine import ContentCategory
from inference import BackendError, BackendUnavailable
from inference.types import MAX_MAX_TOKENS, MAX_TEMPERATURE, MIN_MAX_TOKENS, MIN_TEMPERATURE
from infra import EngineBootstrap, bootstrap_engine

# Setup logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class BatchRequest(BaseModel):
    session_id: str = "default"
    content: str = Field(..., min_length=1)
    category: Optional[ContentCategory] = None
    temperature: Optional[float] = Field(default=None, ge=MIN_TEMPERATURE, le=MAX_TEMPERATURE)
    max_tokens: Optional[int] = Field(default=None, ge=MIN_MAX_TOKENS, le=MAX_MAX_TOKENS)


class CustomRequest(BaseModel):
    session_id: str = "default"
    content: str = Field(..., min_length=1)
    instruction: str = Field(..., min_length=1)
    context_snippets: List[str] = Field(default_factory=list)


def create_app(services: Optional[EngineBootstrap] = None, start_monitor: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-wired service graph (tests inject one with a stub gateway)
        start_monitor: Run the periodic backend probe during the app's lifetime
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if getattr(app.state, "services", None) is None:
            app.state.services = bootstrap_engine()
        svc: EngineBootstrap = app.state.services
        logger.info("=" * 60)
        logger.info("Transformation service starting up...")
        logger.info(f"Environment: {Config.ENVIRONMENT}")
        logger.info(f"Services: {svc!r}")
        logger.info("=" * 60)
        if not Config.validate():
            logger.warning("Configuration incomplete, check .env")
        if start_monitor:
            svc.monitor.start()

        yield

        # Shutdown
        await svc.monitor.stop()
        logger.info("Transformation service shutting down...")

    app = FastAPI(
        title="Clipboard Transformation API",
        description="AI rewrites of clipboard content via a local model backend",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    @app.get("/health/live")
    async def health_live():
        """Liveness probe."""
        return {"status": "alive"}

    @app.get("/ai/status")
    async def ai_status(request: Request):
        """Backend status; served from cache while fresh."""
        svc: EngineBootstrap = request.app.state.services
        await svc.monitor.status()
        return svc.monitor.snapshot()

    @app.post("/ai/transformations")
    async def transformations(body: BatchRequest, request: Request):
        svc: EngineBootstrap = request.app.state.services
        config = svc.engine.config.with_overrides(
            temperature=body.temperature, max_tokens=body.max_tokens
        )
        session = svc.sessions.get(body.session_id)
        try:
            results = await session.generate(body.content, body.category, config)
        except BackendUnavailable as e:
            return JSONResponse(
                status_code=503,
                content={
                    "error": "backend_unavailable",
                    "detail": str(e),
                    "status": e.status.to_dict(),
                },
            )
        return {
            "transformations": [r.to_dict() for r in results],
            "count": len(results),
        }

    @app.post("/ai/custom")
    async def custom(body: CustomRequest, request: Request):
        svc: EngineBootstrap = request.app.state.services
        session = svc.sessions.get(body.session_id)
        try:
            result = await session.process_custom(
                body.content, body.instruction, body.context_snippets
            )
        except BackendError as e:
            return JSONResponse(
                status_code=502,
                content={"error": e.kind, "detail": f"AI processing failed: {e}"},
            )
        if result is None:
            return Response(status_code=204)
        return {"transformation": result.to_dict()}

    @app.delete("/ai/sessions/{session_id}/request")
    async def cancel_request(session_id: str, request: Request):
        """Cancel the session's in-flight batch or custom request."""
        svc: EngineBootstrap = request.app.state.services
        return {"cancelled": svc.sessions.cancel(session_id)}

    @app.delete("/ai/sessions/{session_id}")
    async def close_session(session_id: str, request: Request):
        """Drop a session, cancelling its in-flight request if any."""
        svc: EngineBootstrap = request.app.state.services
        return {"closed": svc.sessions.close(session_id)}

    @app.get("/ai/events")
    async def recent_events(request: Request, limit: int = 100, name: Optional[str] = None):
        """Recent diagnostic events (metadata only, TRACER_BACKEND=local)."""
        svc: EngineBootstrap = request.app.state.services
        return {
            "events": svc.store.get_recent_events(limit=limit, name=name),
            "stats": svc.store.get_stats(),
        }

    @app.get("/config/info")
    async def config_info(request: Request):
        """Get non-sensitive configuration info."""
        svc: EngineBootstrap = request.app.state.services
        cfg = svc.engine.config
        return {
            "environment": Config.ENVIRONMENT,
            "llm_backend": svc.config.llm_backend,
            "model": cfg.model_name,
            "base_url": cfg.base_url,
            "timeout_ms": cfg.timeout_ms,
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens,
        }

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Clipboard Transformation API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health_live": "GET /health/live",
                "ai_status": "GET /ai/status",
                "transformations": "POST /ai/transformations",
                "custom": "POST /ai/custom",
                "cancel": "DELETE /ai/sessions/{session_id}/request",
                "close_session": "DELETE /ai/sessions/{session_id}",
                "events": "GET /ai/events",
                "config_info": "GET /config/info",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=Config.AGENT_HOST,
        port=Config.AGENT_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
