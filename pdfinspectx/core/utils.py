"""Utilities shared by pdfinspectx modules."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LEVEL_ENV_VAR = "PDFINSPECTX_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
        level = os.getenv(_LEVEL_ENV_VAR)
        if level:
            logger.setLevel(level.strip().upper())
        else:
            logger.setLevel(logging.WARNING)
    return logger


def resolve_path(path: str | Path | None) -> Path:
    if path is None:
        raise ValueError("Path must not be None")
    resolved = Path(path).expanduser().resolve()
    return resolved


def format_file_size(size_bytes: int) -> str:
    """Format a byte count in human-readable form."""

    value = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024.0:
            return f"{value:.2f} {unit}"
        value /= 1024.0
    return f"{value:.2f} TB"
