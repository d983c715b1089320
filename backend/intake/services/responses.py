from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import FileResponse, JSONResponse

from intake.schemas.envelope import JsonEnvelope


def write_json(
    status_code: int,
    payload: Any,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    extra = {k: v for k, v in (headers or {}).items() if k.lower() != "content-type"}
    return JSONResponse(
        content=jsonable_encoder(payload),
        status_code=status_code,
        headers=extra,
        media_type="application/json",
    )


def write_error(
    error: Exception,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    data: Any = None,
) -> JSONResponse:
    envelope = JsonEnvelope(error=True, message=str(error), data=data)
    return write_json(status_code, envelope)


_UNSAFE_HEADER_CHARS = re.compile(r'["\\\x00-\x1f\x7f]')


def _header_safe_name(name: str) -> str:
    # quotes, backslashes and control characters would break the
    # Content-Disposition filename parameter
    return _UNSAFE_HEADER_CHARS.sub("", name).strip()


def download_static_file(
    directory: str | os.PathLike,
    stored_name: str,
    display_name: str,
) -> FileResponse:
    """
    Stream a stored file as an attachment so browsers save it instead of
    rendering it, under `display_name` rather than the stored name.
    """
    root = Path(directory).resolve()
    path = (root / stored_name).resolve()
    if path.parent != root or not path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found",
        )
    return FileResponse(
        path,
        filename=_header_safe_name(display_name) or path.name,
        content_disposition_type="attachment",
    )
