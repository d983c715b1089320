from __future__ import annotations

import dataclasses
import json
import logging
import re
import types
import typing
from collections import abc
from functools import lru_cache
from typing import Annotated, Any, BinaryIO, Optional, Union, get_args, get_origin

from pydantic import (
    BaseModel,
    PydanticSchemaGenerationError,
    PydanticUndefinedAnnotation,
    TypeAdapter,
    ValidationError,
)
from starlette.requests import Request

from intake.schemas.ingestion import IngestionConfig
from intake.services.json_body.errors import (
    JsonBadSyntax,
    JsonEmptyBody,
    JsonError,
    JsonMalformedTarget,
    JsonMultipleDocuments,
    JsonOtherError,
    JsonTooLarge,
    JsonTruncatedBody,
    JsonTypeMismatch,
    JsonUnknownField,
)

logger = logging.getLogger(__name__)

READ_CHUNK_BYTES = 64 * 1024
JSON_WHITESPACE = " \t\n\r"
JSON_LITERALS = ("true", "false", "null")
_PARTIAL_NUMBER = re.compile(r"-?\d*(\.\d*)?([eE][+-]?\d*)?")

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_decoder = json.JSONDecoder()

_MISMATCH_TYPES = {"enum", "literal_error", "none_required", "is_instance_of", "union_tag_invalid"}
_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, abc.Sequence, abc.MutableSequence, abc.Set)
_MAPPING_ORIGINS = (dict, abc.Mapping, abc.MutableMapping)


class BoundedReader:
    """Reads a binary stream, raising JsonTooLarge once more than `limit` bytes arrive."""

    def __init__(self, stream: BinaryIO, limit: int):
        self.stream = stream
        self.limit = limit
        self.received = 0

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            chunks = []
            while True:
                chunk = self.read(READ_CHUNK_BYTES)
                if not chunk:
                    return b"".join(chunks)
                chunks.append(chunk)
        chunk = self.stream.read(size)
        self.received += len(chunk)
        if self.received > self.limit:
            raise JsonTooLarge(self.limit)
        return chunk


def _byte_offset(text: str, pos: int) -> int:
    return len(text[:pos].encode("utf-8"))


def _ends_mid_token(rest: str) -> bool:
    if any(literal.startswith(rest) and literal != rest for literal in JSON_LITERALS):
        return True
    # a number the scanner stopped short of: "-", "1.", "2e", "2e+"
    return bool(_PARTIAL_NUMBER.fullmatch(rest)) and rest[-1] in "-+.eE"


def classify_decode_error(exc: json.JSONDecodeError, text: str) -> JsonError:
    """
    Map a stdlib decoder failure onto a classified error.

    json.JSONDecodeError only exposes a message and a position, so telling a
    truncated body from a malformed one depends on both. This is the single
    place that relies on the decoder's wording; keep it in sync with the
    tests in test_json_decoder.py when upgrading Python.
    """
    rest = text[exc.pos :].rstrip(JSON_WHITESPACE)
    if exc.msg.startswith("Unterminated string") or not rest or _ends_mid_token(rest):
        return JsonTruncatedBody()
    return JsonBadSyntax(_byte_offset(text, exc.pos) + 1)


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _resolve_adapter(target: Any) -> TypeAdapter:
    if target is None or not (isinstance(target, type) or get_origin(target) is not None):
        raise JsonMalformedTarget(f"cannot decode into {target!r}")
    try:
        return _adapter_for(target)
    except (TypeError, PydanticSchemaGenerationError, PydanticUndefinedAnnotation) as exc:
        raise JsonMalformedTarget(str(exc)) from exc


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _is_type_mismatch(error_type: str) -> bool:
    return error_type.endswith("_type") or error_type.endswith("_parsing") or error_type in _MISMATCH_TYPES


def _classify_validation_error(exc: ValidationError, offset: int) -> JsonError:
    errors = exc.errors()
    for error in errors:
        if _is_type_mismatch(error["type"]):
            field = _field_path(error["loc"])
            return JsonTypeMismatch(field=field) if field else JsonTypeMismatch(offset=offset)
    for error in errors:
        if error["type"] == "extra_forbidden":
            return JsonUnknownField(_field_path(error["loc"]))
    for error in errors:
        if error["type"] == "missing":
            return JsonOtherError(f'body is missing required field "{_field_path(error["loc"])}"')
    first = errors[0]
    field = _field_path(first["loc"])
    if field:
        return JsonOtherError(f'body contains invalid value for field "{field}": {first["msg"]}')
    return JsonOtherError(f"body contains invalid value: {first['msg']}")


def _is_class(annotation: Any) -> bool:
    # parametrised generics such as list[int] pass isinstance(..., type) on 3.10
    return isinstance(annotation, type) and get_origin(annotation) is None


def _object_fields(annotation: Any) -> Optional[dict[str, Any]]:
    if _is_class(annotation) and issubclass(annotation, BaseModel):
        if annotation.model_config.get("extra") == "allow":
            return None
        fields: dict[str, Any] = {}
        for name, info in annotation.model_fields.items():
            fields[name] = info.annotation
            for alias in (info.alias, info.validation_alias):
                if isinstance(alias, str):
                    fields[alias] = info.annotation
        return fields
    if _is_class(annotation) and dataclasses.is_dataclass(annotation):
        hints = typing.get_type_hints(annotation)
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(annotation)}
    if typing.is_typeddict(annotation):
        return typing.get_type_hints(annotation)
    return None


def find_unknown_field(value: Any, annotation: Any, path: tuple[str, ...] = ()) -> Optional[str]:
    """
    Return the dotted path of the first object key in `value` that the
    `annotation` does not declare, walking nested models, lists and dicts.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return find_unknown_field(value, get_args(annotation)[0], path)
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if value is None or not members:
            return None
        found = [find_unknown_field(value, member, path) for member in members]
        # a key is unknown only if no member of the union declares it
        if any(item is None for item in found):
            return None
        return found[0]

    if isinstance(value, dict):
        fields = _object_fields(annotation)
        if fields is not None:
            for key, item in value.items():
                if key not in fields:
                    return _field_path(path + (key,))
                found = find_unknown_field(item, fields[key], path + (key,))
                if found:
                    return found
            return None
        if origin in _MAPPING_ORIGINS:
            args = get_args(annotation)
            value_type = args[1] if len(args) == 2 else Any
            for key, item in value.items():
                found = find_unknown_field(item, value_type, path + (key,))
                if found:
                    return found
        return None

    if isinstance(value, list) and origin in _SEQUENCE_ORIGINS:
        args = get_args(annotation)
        if origin is tuple and args and args[-1] is not Ellipsis:
            item_types = list(args)
        else:
            item_types = [args[0] if args else Any] * len(value)
        for index, (item, item_type) in enumerate(zip(value, item_types)):
            found = find_unknown_field(item, item_type, path + (str(index),))
            if found:
                return found
    return None


def _decode(data: bytes, target: Any, config: IngestionConfig) -> Any:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise JsonBadSyntax(exc.start + 1) from exc

    start = _WHITESPACE.match(text).end()
    if start == len(text):
        raise JsonEmptyBody()

    try:
        parsed, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        raise classify_decode_error(exc, text) from exc
    except RecursionError as exc:
        raise JsonOtherError("body is nested too deeply") from exc

    adapter = _resolve_adapter(target)
    strict_fields = not config.allow_unknown_json_fields
    try:
        value = adapter.validate_json(text[start:end], strict=True)
    except ValidationError as exc:
        error = _classify_validation_error(exc, _byte_offset(text, start) + 1)
        if strict_fields and not isinstance(error, (JsonTypeMismatch, JsonUnknownField)):
            unknown = find_unknown_field(parsed, target)
            if unknown:
                error = JsonUnknownField(unknown)
        raise error from exc

    if strict_fields:
        unknown = find_unknown_field(parsed, target)
        if unknown:
            raise JsonUnknownField(unknown)

    if _WHITESPACE.match(text, end).end() != len(text):
        raise JsonMultipleDocuments()
    return value


def decode_json(body: bytes | BinaryIO, target: Any, config: IngestionConfig) -> Any:
    """
    Decode exactly one JSON document from `body` into `target`.

    `body` is either the raw bytes or a binary stream; `target` is anything
    pydantic can validate into (usually a BaseModel subclass). Raises a
    JsonError subclass describing the first problem found; no partially
    decoded value is ever returned.
    """
    limit = config.effective_max_json_bytes
    try:
        if isinstance(body, (bytes, bytearray, memoryview)):
            data = bytes(body)
            if len(data) > limit:
                raise JsonTooLarge(limit)
        else:
            data = BoundedReader(body, limit).read()
        return _decode(data, target, config)
    except JsonError as exc:
        logger.info("rejected JSON body (%s): %s", exc.kind, exc)
        raise


async def _read_request_body(request: Request, limit: int) -> bytes:
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise JsonTooLarge(limit)
    return bytes(body)


async def read_json(request: Request, target: Any, config: IngestionConfig) -> Any:
    limit = config.effective_max_json_bytes
    try:
        body = await _read_request_body(request, limit)
    except JsonTooLarge as exc:
        logger.info("rejected JSON body (%s): %s", exc.kind, exc)
        raise
    return decode_json(body, target, config)
