import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from intake.api.v1.api import api_router
from intake.core.config import settings
from intake.core.errors import IntakeError
from intake.core.logging import configure_logging
from intake.services.responses import write_error

configure_logging(settings.LOG_LEVEL, settings.PIPELINE_LOG_LEVEL)

logger = logging.getLogger("intake")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "starting %s env=%s upload_dir=%s",
        settings.PROJECT_NAME,
        settings.ENV,
        settings.UPLOAD_DIR,
    )
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IntakeError)
async def intake_error_handler(request: Request, exc: IntakeError):
    return write_error(exc, exc.status_code)


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}
