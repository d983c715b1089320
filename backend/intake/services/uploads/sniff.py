from __future__ import annotations

import logging
from collections.abc import Iterable

import magic

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 512
FALLBACK_CONTENT_TYPE = "application/octet-stream"


def sniff_content_type(prefix: bytes) -> str:
    """
    Detect the MIME type from the leading bytes with libmagic.
    Client-declared types are never an input here.
    """
    try:
        detected = magic.from_buffer(prefix[:SNIFF_LENGTH], mime=True)
    except magic.MagicException as exc:
        logger.warning("libmagic failed to detect content type: %s", exc)
        return FALLBACK_CONTENT_TYPE
    return detected or FALLBACK_CONTENT_TYPE


def _essence(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def is_allowed(content_type: str, allowed: Iterable[str]) -> bool:
    # Empty allow-list means any type is accepted.
    allowed_essences = {_essence(item) for item in allowed if item.strip()}
    if not allowed_essences:
        return True
    return _essence(content_type) in allowed_essences
