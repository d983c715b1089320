from __future__ import annotations

import os
import re
import secrets
import unicodedata
from pathlib import Path


RANDOM_STRING_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOP0123456789-+"
DIR_MODE = 0o755

_NOT_SLUG = re.compile(r"[^a-z\d]+")


class SlugifyError(ValueError):
    pass


def random_string(length: int) -> str:
    """Return `length` characters drawn from the alphabet with a CSPRNG."""
    if length < 0:
        raise ValueError("length must not be negative")
    return "".join(secrets.choice(RANDOM_STRING_ALPHABET) for _ in range(length))


def ensure_dir(path: str | os.PathLike) -> Path:
    directory = Path(path)
    directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    return directory


def slugify(value: str) -> str:
    """
    Best-effort URL slug: accents are folded to ASCII, anything else that is
    not a lowercase letter or digit collapses into a single dash.
    Example: 'Relatório Anual 2025!' -> 'relatorio-anual-2025'
    """
    if not value:
        raise SlugifyError("empty string not permitted")
    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = _NOT_SLUG.sub("-", folded.lower()).strip("-")
    if not slug:
        raise SlugifyError("after removing characters, slug is zero length")
    return slug
