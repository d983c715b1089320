from intake.services.uploads.errors import (  # noqa: F401
    FileTypeNotPermitted,
    MultipartError,
    NoFileUploaded,
    TooManyFiles,
    UploadDirectoryError,
    UploadError,
    UploadReadError,
    UploadTooLarge,
    UploadWriteError,
)
from intake.services.uploads.multipart import SpooledFilePart, read_file_parts  # noqa: F401
from intake.services.uploads.pipeline import FilePart, store_one, store_parts  # noqa: F401
from intake.services.uploads.request import upload_many, upload_one  # noqa: F401
