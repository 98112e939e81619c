"""
Environment configuration.

Values come from the process environment after `.env` and `.env.local` in
the working directory are loaded (`.env.local` wins).
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

_cwd = Path.cwd()
if (_cwd / ".env").exists():
    load_dotenv(dotenv_path=_cwd / ".env", override=False)
if (_cwd / ".env.local").exists():
    load_dotenv(dotenv_path=_cwd / ".env.local", override=True)


def _is_truthy(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


HOST = os.getenv("STUDYGRAPH_HOST", "127.0.0.1")
PORT = int(os.getenv("STUDYGRAPH_PORT", "8765"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "STUDYGRAPH_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("STUDYGRAPH_LOG_LEVEL", "INFO").upper()

# Upper bound on live diagram instances held by the server
MAX_INSTANCES = int(os.getenv("STUDYGRAPH_MAX_INSTANCES", "100"))

# Serve the static SVG and export routes
ENABLE_EXPORT = _is_truthy(os.getenv("STUDYGRAPH_ENABLE_EXPORT", "true"))


def configure_logging(level: str | None = None):
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
