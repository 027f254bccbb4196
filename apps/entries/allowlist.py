from __future__ import annotations

from typing import Optional


def parse_allowlist(raw: Optional[str]) -> frozenset[str]:
    """Split a comma-separated email list, dropping blanks."""
    return frozenset(part.strip() for part in (raw or '').split(',') if part.strip())
