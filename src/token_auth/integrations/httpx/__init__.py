from __future__ import annotations

from .auth import SessionBearerAuth

__all__ = ["SessionBearerAuth"]
