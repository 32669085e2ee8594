import logging

from fastapi import Depends, FastAPI
from fastapi.responses import PlainTextResponse

from .api.sessions import router as sessions_router
from .config import ProofreadSettings, is_dev_environment
from .logging_config import configure_logging
from .services.sessions import SessionRegistry, get_session_registry
from .telemetry import emit_app_startup_event

configure_logging()

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Proofread API")
app.include_router(sessions_router)


@app.on_event("startup")
async def _startup_registry() -> None:
    """Build the shared checker clients and the session registry."""

    emit_app_startup_event()
    settings = ProofreadSettings.from_env()
    registry = SessionRegistry(settings)
    await registry.initialize()
    app.state.registry = registry
    LOGGER.info(
        "Proofread service started (mode=%s, dev=%s)", settings.checker_mode, is_dev_environment()
    )


@app.on_event("shutdown")
async def _shutdown_registry() -> None:
    registry = getattr(app.state, "registry", None)
    if registry is not None:
        await registry.aclose()
        app.state.registry = None


@app.get("/", response_class=PlainTextResponse)
def read_root() -> str:
    """Healthcheck endpoint for the service."""
    return "ok"


@app.get("/healthz", response_class=PlainTextResponse)
def healthcheck(registry: SessionRegistry = Depends(get_session_registry)) -> str:
    """Liveness probe; fails until the registry has been initialised."""
    del registry
    return "ok"
