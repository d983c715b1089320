from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_UPLOAD_BYTES = 1024 * 1024 * 1024  # 1 GiB
DEFAULT_MAX_JSON_BYTES = 1024 * 1024  # 1 MiB


class IngestionConfig(BaseModel):
    """
    Per-call ingestion settings. Zero ceilings mean "use the default"; the
    default is resolved on read, the stored value is left as given.
    """

    model_config = ConfigDict(frozen=True)

    max_upload_bytes: int = 0
    allowed_content_types: frozenset[str] = Field(default_factory=frozenset)
    max_json_bytes: int = 0
    allow_unknown_json_fields: bool = False

    @property
    def effective_max_upload_bytes(self) -> int:
        if self.max_upload_bytes > 0:
            return self.max_upload_bytes
        return DEFAULT_MAX_UPLOAD_BYTES

    @property
    def effective_max_json_bytes(self) -> int:
        if self.max_json_bytes > 0:
            return self.max_json_bytes
        return DEFAULT_MAX_JSON_BYTES
