from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ManifestFile(BaseModel):
    stored_name: str
    label: Optional[str] = None


class UploadManifest(BaseModel):
    title: str
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    files: list[ManifestFile] = Field(default_factory=list)
