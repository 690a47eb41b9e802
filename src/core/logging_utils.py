"""
Logging helpers.

Segmentation runs inside a host application, so logs go to a stable file
location by default. The CLI can additionally mirror them to stderr.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from pathlib import Path
from typing import Optional

ENV_LOG_LEVEL = "MESHPARTSPLIT_LOG_LEVEL"

_LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LOG_ONCE_KEYS: set[str] = set()
_LOG_ONCE_LOCK = threading.Lock()


def default_log_dir() -> Path:
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
        return Path(base) / "MeshPartSplit" / "logs"

    xdg_state_home = os.environ.get("XDG_STATE_HOME")
    if xdg_state_home:
        return Path(xdg_state_home) / "meshpartsplit" / "logs"

    return Path.home() / ".local" / "state" / "meshpartsplit" / "logs"


def _parse_log_level(level: str | int) -> int:
    if isinstance(level, int):
        return int(level)
    value = str(level).strip().upper()
    if not value:
        return logging.INFO
    resolved = getattr(logging, value, logging.INFO)
    return int(resolved) if isinstance(resolved, int) else logging.INFO


def setup_logging(
    *,
    log_level: str | int = "INFO",
    log_dir: Optional[str | Path] = None,
    filename: str = "meshpartsplit.log",
    console: bool = False,
) -> Optional[Path]:
    """
    Configure root logging to a UTF-8 file.

    This is idempotent: if a FileHandler is already attached, it won't add
    another one. ``MESHPARTSPLIT_LOG_LEVEL`` overrides ``log_level``.
    """
    root = logging.getLogger()

    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    level = _parse_log_level(os.environ.get(ENV_LOG_LEVEL) or log_level)
    root.setLevel(level)
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    resolved_dir = Path(log_dir) if log_dir is not None else default_log_dir()
    log_path = resolved_dir / filename
    try:
        resolved_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
    except OSError:
        root.warning("Could not open log file %s", log_path, exc_info=True)
        return None

    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    root.info("Logging initialized: %s (level=%s)", log_path, logging.getLevelName(level))
    return log_path


def log_once(
    logger: logging.Logger,
    key: str,
    level: int,
    msg: str,
    *args,
    exc_info: bool | BaseException | None = None,
) -> bool:
    """
    Logs at most once per process for the given key.

    Useful for warnings that would otherwise repeat once per mesh in a large
    scene while still capturing at least one traceback.
    """
    k = str(key)
    with _LOG_ONCE_LOCK:
        if k in _LOG_ONCE_KEYS:
            return False
        _LOG_ONCE_KEYS.add(k)

    logger.log(level, msg, *args, exc_info=exc_info)
    return True


def reset_log_once() -> None:
    """Forget all ``log_once`` keys."""
    with _LOG_ONCE_LOCK:
        _LOG_ONCE_KEYS.clear()
