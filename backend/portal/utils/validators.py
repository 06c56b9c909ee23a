"""
Validators — Input normalisation for identifiers and names.
"""
import re


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an `Authorization: Bearer <token>` header.

    Returns None when the header is absent or not exactly two parts with the
    Bearer scheme.
    """
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def unique_ids(ids: list[str]) -> list[str]:
    """Strip and de-duplicate ids, preserving first-seen order; blanks are dropped."""
    seen: dict[str, None] = {}
    for raw in ids:
        cleaned = raw.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def sanitize_name(name: str | None, default: str = "") -> str:
    """Collapse whitespace in a display name; fall back to `default` if empty."""
    if not name:
        return default
    cleaned = re.sub(r"\s+", " ", name).strip()
    return cleaned or default


def receipt_for(student_id: str, epoch_ms: int) -> str:
    """Gateway receipt string: at most 40 characters."""
    slug = re.sub(r"[^A-Za-z0-9]", "", student_id)[:16] or "anon"
    return f"rcpt_{slug}_{epoch_ms}"[:40]
