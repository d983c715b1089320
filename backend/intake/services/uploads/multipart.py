from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import BinaryIO

from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import Request

from intake.schemas.ingestion import IngestionConfig
from intake.services.uploads.errors import MultipartError, UploadTooLarge

MAX_FILES_PER_REQUEST = 1000


@dataclass
class SpooledFilePart:
    """A parsed multipart file whose bytes are already spooled by Starlette."""

    upload: UploadFile

    @property
    def filename(self) -> str:
        return self.upload.filename or ""

    def open(self) -> BinaryIO:
        stream = self.upload.file
        stream.seek(0)
        return stream


async def _bounded_stream(request: Request, limit: int) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise UploadTooLarge(limit)
        yield chunk


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


async def read_file_parts(request: Request, config: IngestionConfig) -> list[SpooledFilePart]:
    """
    Parse a multipart/form-data body into file parts, in wire order.

    The size ceiling applies to the raw body as a whole and is enforced before
    any part is looked at.
    """
    limit = config.effective_max_upload_bytes
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise MultipartError("request is not multipart/form-data")

    declared = _declared_length(request)
    if declared is not None and declared > limit:
        raise UploadTooLarge(limit)

    parser = MultiPartParser(
        request.headers,
        _bounded_stream(request, limit),
        max_files=MAX_FILES_PER_REQUEST,
    )
    try:
        form = await parser.parse()
    except MultiPartException as exc:
        raise MultipartError(f"malformed multipart body: {exc.message}") from exc

    return [SpooledFilePart(value) for _, value in form.multi_items() if isinstance(value, UploadFile)]
