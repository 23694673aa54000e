"""Configuración de logging compartida por CLI y app."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Install a single stream handler on the ``mindwell`` logger."""
    logger = logging.getLogger("mindwell")
    logger.setLevel(level)
    if not any(getattr(h, "_mindwell", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._mindwell = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
