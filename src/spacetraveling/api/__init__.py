"""Web layer for the spacetraveling blog."""

from __future__ import annotations

from .app import create_app  # noqa: F401
from .routes import BlogServices, router  # noqa: F401

__all__ = ["BlogServices", "create_app", "router"]
