import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from leadflow.api.routes import (
    analytics, events, funnel, leads, pages, products, progress, roadmaps, split_tests, webhooks
)
from leadflow.core.config import settings
from leadflow.db.bootstrap import init_db
from leadflow.db.session import engine

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        logger.info("Incoming request: %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
            logger.info("Response: %s %s -> %d", request.method, request.url.path, response.status_code)
            return response
        except Exception as e:
            logger.exception("Request failed: %s %s -> %s", request.method, request.url.path, e)
            raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_production:
        missing = settings.missing_production_settings()
        if missing:
            raise RuntimeError(f"Missing required production settings: {', '.join(missing)}")
    init_db(engine)
    logger.info("🚀 Lead Flow API ready (environment=%s, llm=%s)", settings.ENVIRONMENT, settings.LLM_PROVIDER)
    yield


app = FastAPI(title="Lead Flow API", version=VERSION, lifespan=lifespan)

# Before CORS so every request is logged
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(roadmaps.router, prefix="/api", tags=["roadmaps"])
app.include_router(progress.router, prefix="/api", tags=["progress"])
app.include_router(leads.router, prefix="/api", tags=["leads"])
app.include_router(products.router, prefix="/api", tags=["products"])
app.include_router(pages.admin_router, prefix="/api", tags=["pages"])
app.include_router(pages.public_router, prefix="/api", tags=["pages"])
app.include_router(split_tests.admin_router, prefix="/api", tags=["split-tests"])
app.include_router(split_tests.public_router, prefix="/api", tags=["split-tests"])
app.include_router(funnel.router, prefix="/api", tags=["funnel"])
app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(analytics.router, prefix="/api", tags=["analytics"])
app.include_router(webhooks.router, prefix="/api", tags=["webhooks"])


@app.get("/")
def root():
    return {"status": "ok", "version": VERSION}


@app.get("/api/health")
def health():
    return {"status": "healthy"}
