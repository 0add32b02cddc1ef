from __future__ import annotations

import re

_ZIP_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")

UNKNOWN = "unknown"


def extract_zip(location: str) -> str | None:
    if not location:
        return None
    match = _ZIP_RE.search(location)
    return match.group(1) if match else None


def derive_jurisdiction(location: str) -> str:
    """Whitespace-normalized event location handed to tax providers.

    Providers pick out what they need (ZIP code, state) themselves.
    """
    cleaned = " ".join(location.split()) if location else ""
    return cleaned or UNKNOWN
