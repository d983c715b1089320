from __future__ import annotations

import os

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from intake.schemas.ingestion import IngestionConfig
from intake.schemas.upload import UploadOutcome, UploadRecord
from intake.services.uploads.multipart import SpooledFilePart, read_file_parts
from intake.services.uploads.pipeline import store_one, store_parts


async def _close_all(parts: list[SpooledFilePart]) -> None:
    # parts after a failure are never opened by the pipeline
    for part in parts:
        await part.upload.close()


async def upload_many(
    request: Request,
    destination: str | os.PathLike,
    config: IngestionConfig,
    *,
    rename: bool = True,
) -> UploadOutcome:
    parts = await read_file_parts(request, config)
    try:
        return await run_in_threadpool(store_parts, parts, destination, config, rename=rename)
    finally:
        await _close_all(parts)


async def upload_one(
    request: Request,
    destination: str | os.PathLike,
    config: IngestionConfig,
    *,
    rename: bool = True,
) -> UploadRecord:
    parts = await read_file_parts(request, config)
    try:
        return await run_in_threadpool(store_one, parts, destination, config, rename=rename)
    finally:
        await _close_all(parts)
