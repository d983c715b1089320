from __future__ import annotations

from fastapi import status

from intake.core.errors import IntakeError


class UploadError(IntakeError):
    pass


class UploadDirectoryError(UploadError):
    def __init__(self, directory: str):
        super().__init__(f"could not create upload directory {directory}")
        self.directory = directory


class UploadReadError(UploadError):
    def __init__(self, filename: str):
        super().__init__(f"could not read uploaded file {filename!r}")
        self.filename = filename


class FileTypeNotPermitted(UploadError):
    def __init__(self, filename: str, content_type: str):
        super().__init__("the uploaded file type is not permitted")
        self.filename = filename
        self.content_type = content_type


class UploadWriteError(UploadError):
    def __init__(self, filename: str, reason: str = "could not store uploaded file"):
        super().__init__(f"{reason} {filename!r}")
        self.filename = filename


class UploadTooLarge(UploadError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, limit: int):
        super().__init__(f"upload must not be larger than {limit} bytes")
        self.limit = limit


class MultipartError(UploadError):
    pass


class NoFileUploaded(UploadError):
    def __init__(self):
        super().__init__("no file was uploaded")


class TooManyFiles(UploadError):
    def __init__(self, count: int):
        super().__init__(f"expected exactly one file, got {count}")
        self.count = count
