# backend/tutorcenter/utils/url_validation.py
"""
URL validation utilities.

Shared helper for normalizing the optional meeting link attached to
generated sessions.
"""

from urllib.parse import urlparse

ALLOWED_LINK_SCHEMES: frozenset[str] = frozenset({"http", "https"})


def normalize_meeting_link(candidate: str | None) -> str | None:
    """
    Normalize an optional meeting URL.

    Args:
        candidate: Raw link as submitted (may be None or blank)

    Returns:
        The trimmed link, or None when nothing was supplied

    Raises:
        ValueError: If the link is present but not an absolute http(s) URL
    """
    if candidate is None:
        return None
    cleaned = candidate.strip()
    if not cleaned:
        return None

    parsed = urlparse(cleaned)
    scheme = (parsed.scheme or "").lower()
    if scheme not in ALLOWED_LINK_SCHEMES or not parsed.hostname:
        raise ValueError(f"invalid meeting link: {cleaned!r}")
    return cleaned
