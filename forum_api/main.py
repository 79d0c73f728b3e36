import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forum_api import __version__
from forum_api.config import settings
from forum_api.database import engine
from forum_api.exceptions import install_exception_handlers
from forum_api.log import configure_logging
from forum_api.middleware import RequestLogMiddleware
from forum_api.routers import threads

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.LOG_LEVEL)
    logger.info("Forum API %s starting (%s)", __version__, settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Forum API",
    description="Threads and comments with soft delete",
    version=__version__,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Routers
app.include_router(threads.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": __version__}
