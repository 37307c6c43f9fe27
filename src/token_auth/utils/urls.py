from __future__ import annotations

from typing import Optional

import httpx


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """Join a (possibly relative) endpoint onto base_url."""
    if base_url:
        return str(httpx.URL(base_url).join(url))
    return url


def is_secure_url(url: str, base_url: Optional[str] = None) -> bool:
    """
    Pre-flight check: does `url` travel over HTTPS?

    Relative URLs are judged by the base URL they will be resolved against;
    with no base they are considered insecure.
    """
    try:
        resolved = httpx.URL(resolve_url(url, base_url))
    except httpx.InvalidURL:
        return False
    return resolved.scheme == "https"
