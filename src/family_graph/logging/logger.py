"""
Project-wide logging for family_graph.

Every module asks ``get_logger`` for a logger under the ``family_graph``
namespace. The namespace root owns two handlers, set up on first use from
the ``logging`` / ``paths`` sections of ``config/family_graph.yml``:

* the master log file (``logs/family_graph.log`` by default)
* a console handler showing warnings, or everything when ``debug`` is on

Each module logger also writes its own file, ``logs/<logger_name>.log``.
"""

from __future__ import annotations

import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from family_graph.config import get_config

PROJECT_ROOT = Path(__file__).resolve().parents[3]
BASE_LOGGER_NAME = "family_graph"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROTATE_MAX_BYTES = 5 * 1024 * 1024
ROTATE_BACKUPS = 5


class _Settings:
    """Resolved logging settings; filled once by ``_setup``."""

    level: int = logging.INFO
    log_dir: Path = PROJECT_ROOT / "logs"
    rotate: bool = False
    ready: bool = False


def _resolve_log_dir(cfg) -> Path:
    raw = cfg.logging.get("dir") or cfg.paths.get("logs_dir") or "logs"
    path = Path(raw)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    path.mkdir(parents=True, exist_ok=True)
    return path


def _file_handler(path: Path) -> logging.Handler:
    if _Settings.rotate:
        handler: logging.Handler = RotatingFileHandler(
            path, maxBytes=ROTATE_MAX_BYTES, backupCount=ROTATE_BACKUPS, encoding="utf-8"
        )
    else:
        handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(_Settings.level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _setup() -> Logger:
    base = logging.getLogger(BASE_LOGGER_NAME)
    if _Settings.ready:
        return base

    cfg = get_config()
    debug = bool(cfg.debug)
    configured = getattr(logging, str(cfg.logging.get("level", "INFO")).upper(), logging.INFO)

    _Settings.level = logging.DEBUG if debug else configured
    _Settings.rotate = bool(cfg.logging.get("rotate", False))
    _Settings.log_dir = _resolve_log_dir(cfg)

    base.setLevel(_Settings.level)
    base.propagate = False
    base.addHandler(_file_handler(_Settings.log_dir / cfg.logging.get("file", "family_graph.log")))

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if debug else logging.WARNING)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    base.addHandler(console)

    _Settings.ready = True
    return base


def get_logger(name: Optional[str] = None) -> Logger:
    """
    Logger for ``name``, placed under the ``family_graph`` namespace.

    ``get_logger("layout")`` and ``get_logger("family_graph.layout")`` are
    the same logger. Module loggers propagate to the namespace root for the
    master file and console, and carry one file handler of their own.
    """
    base = _setup()
    full = name or BASE_LOGGER_NAME
    if full != BASE_LOGGER_NAME and not full.startswith(BASE_LOGGER_NAME + "."):
        full = f"{BASE_LOGGER_NAME}.{full}"
    if full == BASE_LOGGER_NAME:
        return base

    logger = logging.getLogger(full)
    logger.setLevel(_Settings.level)
    logger.propagate = True
    if not any(getattr(h, "family_graph_module", False) for h in logger.handlers):
        handler = _file_handler(_Settings.log_dir / f"{full.replace('.', '_')}.log")
        handler.family_graph_module = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
