import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from .api import register_error_handlers, router
from .config import Settings, get_settings
from .core.backend import RecognitionBackend
from .core.readiness import ReadinessState
from .utils.image import ImageFetcher
from .utils.observability import setup_logging

logger = logging.getLogger(__name__)


async def load_models(backend: RecognitionBackend, readiness: ReadinessState, settings: Settings) -> None:
    """Load the recognition models, then flip the readiness flag.

    On failure the service stays in "loading" and keeps answering 503.
    """
    if settings.load_models_on_startup:
        logger.info("Loading recognition models...")
        try:
            await run_in_threadpool(backend.load)
        except Exception:
            logger.exception("Failed to load recognition models")
            return
    readiness.mark_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)

    client = None
    if app.state.fetcher is None:
        client = httpx.AsyncClient(timeout=settings.fetch_timeout_seconds)
        app.state.fetcher = ImageFetcher(
            client, settings.max_image_bytes, settings.allow_private_image_hosts,
        )

    loader = None
    if not app.state.readiness.is_ready:
        loader = asyncio.create_task(
            load_models(app.state.backend, app.state.readiness, settings)
        )

    logger.info("Face compare API started")
    yield
    logger.info("Face compare API shutting down")

    if loader is not None and not loader.done():
        loader.cancel()
        with suppress(asyncio.CancelledError):
            await loader
    if client is not None:
        await client.aclose()


def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[RecognitionBackend] = None,
    fetcher: Optional[ImageFetcher] = None,
    readiness: Optional[ReadinessState] = None,
) -> FastAPI:
    """Build the FastAPI app.

    Collaborators default to the production ones: the dlib backend and an
    httpx-backed fetcher created on startup.
    """
    settings = settings or get_settings()
    if backend is None:
        from .core.face_detection import FaceRecognitionBackend
        backend = FaceRecognitionBackend(
            threshold=settings.match_threshold, model=settings.detection_model
        )

    app = FastAPI(title="Face Compare API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = backend
    app.state.fetcher = fetcher
    app.state.readiness = readiness or ReadinessState()

    # Enable CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    register_error_handlers(app)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
