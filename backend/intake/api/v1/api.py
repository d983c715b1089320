from fastapi import APIRouter

from intake.api.v1.endpoints import ingest, uploads

api_router = APIRouter()

api_router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
api_router.include_router(ingest.router, prefix="/ingest", tags=["ingest"])
