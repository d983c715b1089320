from __future__ import annotations

from typing import Optional

from fastapi import status

from intake.core.errors import IntakeError


class JsonError(IntakeError):
    kind: str = "other"


class JsonBadSyntax(JsonError):
    kind = "bad_syntax"

    def __init__(self, offset: int):
        super().__init__(f"body contains badly-formed JSON (at character {offset})")
        self.offset = offset


class JsonTruncatedBody(JsonError):
    kind = "truncated_body"

    def __init__(self):
        super().__init__("body contains badly-formed JSON")


class JsonEmptyBody(JsonError):
    kind = "empty_body"

    def __init__(self):
        super().__init__("body must not be empty")


class JsonTypeMismatch(JsonError):
    kind = "type_mismatch"

    def __init__(self, field: Optional[str] = None, offset: Optional[int] = None):
        if field:
            message = f'body contains incorrect JSON type for field "{field}"'
        else:
            message = f"body contains incorrect JSON type (at character {offset})"
        super().__init__(message)
        self.field = field
        self.offset = offset


class JsonUnknownField(JsonError):
    kind = "unknown_field"

    def __init__(self, name: str):
        super().__init__(f'body contains unknown key "{name}"')
        self.name = name


class JsonTooLarge(JsonError):
    kind = "too_large"
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, limit: int):
        super().__init__(f"body must not be larger than {limit} bytes")
        self.limit = limit


class JsonMalformedTarget(JsonError):
    kind = "malformed_target"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(f"error unmarshalling JSON: {detail}")
        self.detail = detail


class JsonMultipleDocuments(JsonError):
    kind = "multiple_documents"

    def __init__(self):
        super().__init__("body must contain only one JSON value")


class JsonOtherError(JsonError):
    kind = "other"
