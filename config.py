"""
Paths and runtime settings for the material selection page.

Every path is resolved against the repository root so the page works no
matter which directory ``streamlit run`` is launched from. Each setting can be
overridden through a ``MATSEL_*`` environment variable.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

REPO_ROOT: Path = Path(__file__).resolve().parent


def get_resource_path(relative_path: str) -> str:
    return str(REPO_ROOT / relative_path)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or default


def log_level(default: int = logging.WARNING) -> int:
    """Level from MATSEL_LOG_LEVEL (name or number); quiet by default."""
    raw = _env("MATSEL_LOG_LEVEL")
    if raw is None:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def app_version(version_file: Optional[str] = None) -> str:
    path = version_file or get_resource_path("VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip() or "unversioned"
    except OSError:
        return "unversioned"


DATA_PATH: str = _env("MATSEL_DATA_PATH", get_resource_path(os.path.join("data", "matDb.csv")))
DOCS_PATH: str = get_resource_path("docs")
LOG_LEVEL: int = log_level()
LOG_FILE: Optional[str] = _env("MATSEL_LOG_FILE")
