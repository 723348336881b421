"""annotext - Semantic highlight rendering for language model output.

Turns the bracket annotation markers a model embeds in its replies
(``[Y]key point[/Y]``, ``[R]warning[/R]`` ...) into inline-styled spans,
repairing the malformed and legacy markers imperfect generators emit.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from annotext.config import Settings

__version__ = "0.1.0"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure logging to the console and, optionally, a rotating file."""
    from annotext.config import get_settings

    config = (settings or get_settings()).logging

    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Console handler - less verbose
    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.level)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if not config.file_logging:
        return

    config.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = config.log_dir / f"annotext.{os.getpid()}.log"

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    logging.info("Logging configured. Log file: %s", log_file.absolute())
