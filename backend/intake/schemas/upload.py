from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from intake.services.uploads.errors import UploadError


class UploadRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_name: str  # as declared by the client, untrusted
    assigned_name: str
    byte_count: int
    content_type: str


@dataclass(frozen=True)
class UploadOutcome:
    records: tuple[UploadRecord, ...] = field(default_factory=tuple)
    error: Optional["UploadError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None
