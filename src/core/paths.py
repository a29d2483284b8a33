"""Path normalization shared by keys and loaders."""

from __future__ import annotations

from core.errors import ValidationError


def normalize_path(path: str) -> str:
    # Keep upstream paths stable and OS-independent:
    # - Convert "\" to "/"
    # - Drop leading "/" and repeated "./"
    # - Require a non-empty relative path
    s = (path or "").strip().replace("\\", "/").lstrip("/")
    while s.startswith("./"):
        s = s[2:]
    if not s:
        raise ValidationError("path must be non-empty")
    return s
