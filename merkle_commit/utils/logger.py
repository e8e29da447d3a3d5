"""
Logging for merkle-commit.

All loggers hang off the "merkle_commit" namespace:

    merkle_commit.tree        build / flush / opening generation
    merkle_commit.benchmark   benchmark runs

The namespace is configured lazily on first use from the shared
TreeConfig, and can be re-leveled at runtime (load_config does this
when MERKLE_LOG_LEVEL is set).
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import colorlog


NAMESPACE = "merkle_commit"

CONSOLE_FORMAT = "%(log_color)s%(asctime)s %(levelname)-8s%(reset)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class MerkleLogger:
    """Owns the handlers attached to the merkle_commit namespace"""

    _initialized = False
    _handlers: List[logging.Handler] = []

    @classmethod
    def setup(cls, level: int = logging.INFO, log_file: Optional[str] = None):
        """
        Attach a colored console handler and, optionally, a plain file handler.

        Calling setup() again replaces the handlers it installed before;
        handlers added by the host application are left alone.

        Args:
            level: Logging level for the namespace and its handlers
            log_file: Path of a log file; parent directories are created
        """
        namespace = logging.getLogger(NAMESPACE)
        for handler in cls._handlers:
            namespace.removeHandler(handler)
            handler.close()
        cls._handlers = []

        console = colorlog.StreamHandler(sys.stdout)
        console.setFormatter(
            colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS)
        )
        cls._handlers.append(console)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            cls._handlers.append(file_handler)

        for handler in cls._handlers:
            namespace.addHandler(handler)

        cls._initialized = True
        cls.set_level(level)

    @classmethod
    def set_level(cls, level: int) -> None:
        """Re-level the namespace and every handler installed by setup()."""
        logging.getLogger(NAMESPACE).setLevel(level)
        for handler in cls._handlers:
            handler.setLevel(level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for one subsystem, e.g. get_logger("tree")."""
        if not cls._initialized:
            from merkle_commit.core.config import config
            cls.setup(level=config.log_level_value)

        return logging.getLogger(f"{NAMESPACE}.{name}")


def get_logger(name: str) -> logging.Logger:
    return MerkleLogger.get_logger(name)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None):
    MerkleLogger.setup(level=level, log_file=log_file)


def set_log_level(level: int) -> None:
    MerkleLogger.set_level(level)
