"""ASGI entrypoint for running the spacetraveling blog with Uvicorn."""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the spacetraveling package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from spacetraveling.api.app import create_app  # noqa: E402  (import after path setup)

app = create_app(prerender=os.environ.get("SPACETRAVELING_PRERENDER", "").lower() in {"1", "true", "yes"})

__all__ = ("app",)
