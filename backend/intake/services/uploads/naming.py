from __future__ import annotations

import ntpath
import posixpath

from intake.services.utils import random_string

RANDOM_NAME_LENGTH = 25


def original_extension(filename: str) -> str:
    # Client names may carry either separator; only the final component counts.
    basename = ntpath.basename(posixpath.basename(filename or ""))
    _, ext = posixpath.splitext(basename)
    return ext


def assign_name(original_name: str, *, rename: bool = True) -> str:
    if rename:
        return f"{random_string(RANDOM_NAME_LENGTH)}{original_extension(original_name)}"
    return original_name
