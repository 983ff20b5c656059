"""FastAPI entrypoint and application wiring."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from imagelab import __version__
from imagelab.api.routes import router
from imagelab.chat.bot import ChatBot
from imagelab.config.settings import get_settings
from imagelab.inference.client import ReplicateClient
from imagelab.inference.fetcher import HttpFetcher
from imagelab.monitoring.logging import configure_logging
from imagelab.services.tools import ImageToolService
from imagelab.storage.uploads import UploadStorage


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    settings = get_settings()
    configure_logging()

    client = ReplicateClient(settings)
    fetcher = HttpFetcher(timeout=settings.request_timeout)
    storage = UploadStorage(Path(settings.uploads_dir))
    storage.ensure_root()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await fetcher.close()
        await client.close()

    app = FastAPI(
        title="Image Lab API",
        version=__version__,
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.tools = ImageToolService(client, fetcher, storage)
    app.state.chat_bot = ChatBot(client, settings)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""

    import uvicorn

    settings = get_settings()
    uvicorn.run("imagelab.api.main:app", host=settings.host, port=settings.port)
