from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import FileResponse, JSONResponse

from intake.core.config import get_ingestion_config, get_upload_dir
from intake.schemas.envelope import JsonEnvelope
from intake.schemas.ingestion import IngestionConfig
from intake.services.responses import download_static_file, write_error, write_json
from intake.services.uploads import upload_many, upload_one


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def upload_files(
    request: Request,
    rename: bool = Query(default=True),
    config: IngestionConfig = Depends(get_ingestion_config),
    upload_dir: Path = Depends(get_upload_dir),
) -> JSONResponse:
    outcome = await upload_many(request, upload_dir, config, rename=rename)
    records = [record.model_dump() for record in outcome.records]
    if outcome.error is not None:
        # partial result: whatever was stored before the failing part
        return write_error(outcome.error, outcome.error.status_code, data=records)
    return write_json(
        status.HTTP_201_CREATED,
        JsonEnvelope(message=f"{len(records)} file(s) uploaded", data=records),
    )


@router.post("/single", status_code=status.HTTP_201_CREATED)
async def upload_single_file(
    request: Request,
    rename: bool = Query(default=True),
    config: IngestionConfig = Depends(get_ingestion_config),
    upload_dir: Path = Depends(get_upload_dir),
) -> JSONResponse:
    record = await upload_one(request, upload_dir, config, rename=rename)
    return write_json(
        status.HTTP_201_CREATED,
        JsonEnvelope(message="file uploaded", data=record.model_dump()),
    )


@router.get("/{stored_name}/download")
def download_file(
    stored_name: str,
    display_name: str | None = Query(default=None),
    upload_dir: Path = Depends(get_upload_dir),
) -> FileResponse:
    return download_static_file(upload_dir, stored_name, display_name or stored_name)
