from __future__ import annotations

from typing import Any

from pydantic import BaseModel, model_serializer


class JsonEnvelope(BaseModel):
    error: bool = False
    message: str = ""
    data: Any = None

    @model_serializer(mode="wrap")
    def _omit_missing_data(self, handler):
        payload = handler(self)
        if self.data is None:
            payload.pop("data", None)
        return payload
