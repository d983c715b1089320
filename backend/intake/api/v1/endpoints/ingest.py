from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from intake.core.config import get_ingestion_config
from intake.schemas.envelope import JsonEnvelope
from intake.schemas.ingestion import IngestionConfig
from intake.schemas.manifest import UploadManifest
from intake.services.json_body import read_json
from intake.services.responses import write_json


router = APIRouter()


@router.post("/manifest", status_code=status.HTTP_202_ACCEPTED)
async def ingest_manifest(
    request: Request,
    config: IngestionConfig = Depends(get_ingestion_config),
) -> JSONResponse:
    # The body is read by hand so every malformed payload gets a classified
    # error instead of FastAPI's generic 422.
    manifest = await read_json(request, UploadManifest, config)
    return write_json(
        status.HTTP_202_ACCEPTED,
        JsonEnvelope(message="manifest accepted", data=manifest),
    )
