from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO, Protocol

from intake.schemas.ingestion import IngestionConfig
from intake.schemas.upload import UploadOutcome, UploadRecord
from intake.services.uploads.errors import (
    FileTypeNotPermitted,
    NoFileUploaded,
    TooManyFiles,
    UploadDirectoryError,
    UploadError,
    UploadReadError,
    UploadWriteError,
)
from intake.services.uploads.naming import assign_name
from intake.services.uploads.sniff import SNIFF_LENGTH, is_allowed, sniff_content_type
from intake.services.utils import ensure_dir

logger = logging.getLogger(__name__)

COPY_CHUNK_BYTES = 64 * 1024


class FilePart(Protocol):
    filename: str

    def open(self) -> BinaryIO: ...


def _destination_path(directory: Path, assigned_name: str) -> Path:
    target = (directory / assigned_name).resolve()
    if target.parent != directory.resolve():
        raise UploadWriteError(assigned_name, reason="refusing to store file outside upload directory")
    return target


def _copy_counting(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    while True:
        chunk = src.read(COPY_CHUNK_BYTES)
        if not chunk:
            return written
        dst.write(chunk)
        written += len(chunk)


def _store_part(part: FilePart, directory: Path, config: IngestionConfig, rename: bool) -> UploadRecord:
    original_name = part.filename or ""
    try:
        infile = part.open()
    except OSError as exc:
        raise UploadReadError(original_name) from exc

    with infile:
        try:
            prefix = infile.read(SNIFF_LENGTH)
        except OSError as exc:
            raise UploadReadError(original_name) from exc

        content_type = sniff_content_type(prefix)
        if not is_allowed(content_type, config.allowed_content_types):
            raise FileTypeNotPermitted(original_name, content_type)

        try:
            infile.seek(0)
        except OSError as exc:
            raise UploadReadError(original_name) from exc

        assigned_name = assign_name(original_name, rename=rename)
        target = _destination_path(directory, assigned_name)
        try:
            with open(target, "wb") as outfile:
                byte_count = _copy_counting(infile, outfile)
        except OSError as exc:
            raise UploadWriteError(original_name) from exc

    return UploadRecord(
        original_name=original_name,
        assigned_name=assigned_name,
        byte_count=byte_count,
        content_type=content_type,
    )


def store_parts(
    parts: Iterable[FilePart],
    destination: str | os.PathLike,
    config: IngestionConfig,
    *,
    rename: bool = True,
) -> UploadOutcome:
    """
    Validate and persist each part in order.

    Processing stops at the first failing part; the records stored before it
    are returned together with the error.

    :param rename: replace client filenames with a random token that keeps
        the original extension (default). When False the client filename is
        used verbatim.
    """
    try:
        directory = ensure_dir(destination)
    except OSError as exc:
        logger.warning("upload directory %s unavailable: %s", destination, exc)
        error = UploadDirectoryError(str(destination))
        error.__cause__ = exc
        return UploadOutcome(error=error)

    records: tuple[UploadRecord, ...] = ()
    for part in parts:
        try:
            record = _store_part(part, directory, config, rename)
        except UploadError as exc:
            logger.info(
                "upload stopped at %r after %d stored file(s): %s",
                part.filename,
                len(records),
                exc,
            )
            return UploadOutcome(records=records, error=exc)
        records = records + (record,)

    logger.info("upload successful: %d file(s) stored in %s", len(records), directory)
    return UploadOutcome(records=records)


def store_one(
    parts: Iterable[FilePart],
    destination: str | os.PathLike,
    config: IngestionConfig,
    *,
    rename: bool = True,
) -> UploadRecord:
    parts = list(parts)
    if not parts:
        raise NoFileUploaded()
    if len(parts) > 1:
        raise TooManyFiles(len(parts))

    outcome = store_parts(parts, destination, config, rename=rename)
    if outcome.error is not None:
        raise outcome.error
    return outcome.records[0]
