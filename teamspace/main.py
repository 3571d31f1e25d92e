"""ASGI application: REST API under /api plus the Socket.IO server."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from teamspace.api.v1 import api_router
from teamspace.config import settings
from teamspace.database import Base, SessionLocal
from teamspace.errors import register_exception_handlers
from teamspace.ratelimit import RateLimitMiddleware, default_rules
from teamspace.realtime import Broadcaster, SocketGateway
from teamspace.services.storage import LocalFileStorage

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(session_factory=SessionLocal, broadcaster=None, file_storage=None, sio=None) -> FastAPI:
    """Build the FastAPI app.

    ``broadcaster`` and ``file_storage`` default to the Socket.IO-backed
    broadcaster and local disk storage under ``UPLOAD_DIR``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=session_factory.kw["bind"])
        Path(app.state.file_storage.root).mkdir(parents=True, exist_ok=True)
        logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
        yield
        logger.info("%s shutting down", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    if sio is None:
        sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=settings.cors_origins_list)
    SocketGateway(sio, session_factory).register()

    app.state.sio = sio
    app.state.session_factory = session_factory
    app.state.broadcaster = broadcaster or Broadcaster(sio)
    app.state.file_storage = file_storage or LocalFileStorage(settings.UPLOAD_DIR, settings.MAX_FILE_SIZE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.RATE_LIMIT_ENABLED:
        app.add_middleware(RateLimitMiddleware, rules=default_rules(settings))

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    app.mount(
        "/uploads",
        StaticFiles(directory=str(app.state.file_storage.root), check_dir=False),
        name="uploads",
    )

    return app


app = create_app()
asgi_app = socketio.ASGIApp(app.state.sio, other_asgi_app=app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(asgi_app, host=settings.HOST, port=settings.PORT)
