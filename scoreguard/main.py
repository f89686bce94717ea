import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .errors import ScoreGuardError
from .models import now_ms
from .routes import router
from .service import ScoreService

logger = logging.getLogger("uvicorn")


async def sweep_forever(service: ScoreService, interval_sec: float):
    while True:
        await asyncio.sleep(interval_sec)
        service.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(
        sweep_forever(app.state.service, app.state.settings.sweep_interval_sec)
    )
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


async def handle_scoreguard_error(request: Request, exc: ScoreGuardError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(settings: Optional[Settings] = None, clock: Callable[[], int] = now_ms) -> FastAPI:
    settings = settings or load_settings()
    is_development = settings.is_development

    app = FastAPI(
        title="ScoreGuard API",
        version="1.0.0",
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if is_development else None,
        redoc_url="/redoc" if is_development else None,
        openapi_url="/openapi.json" if is_development else None,
    )
    app.state.settings = settings
    app.state.service = ScoreService(settings.secret, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ScoreGuardError, handle_scoreguard_error)
    app.include_router(router)
    return app


def run():
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "scoreguard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
