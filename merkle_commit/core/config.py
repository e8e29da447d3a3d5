"""
Tree configuration parameters for merkle-commit.

Defines allocation limits and the default hash backend.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import dotenv_values

from merkle_commit.crypto import get_hasher


# Height bounds
DEFAULT_MAX_HEIGHT = 20  # 2^21 - 1 node slots
ABSOLUTE_MAX_HEIGHT = 32  # Hard ceiling, config cannot raise past this

ENV_PREFIX = "MERKLE_"


@dataclass
class TreeConfig:
    """Tree-wide configuration parameters"""

    # Allocation
    max_height: int = DEFAULT_MAX_HEIGHT  # Largest height build_from_height accepts

    # Hashing
    hash_function: str = "sha256"  # Backend name understood by get_hasher()

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate parameter ranges"""
        if isinstance(self.max_height, bool) or not isinstance(self.max_height, int):
            raise ValueError(f"max_height must be int, got {type(self.max_height).__name__}")
        if not 0 <= self.max_height <= ABSOLUTE_MAX_HEIGHT:
            raise ValueError(
                f"max_height must be in [0, {ABSOLUTE_MAX_HEIGHT}], got {self.max_height}"
            )

        self.hash_function = self.hash_function.lower()
        get_hasher(self.hash_function)  # raises ValueError for unknown backends
        self.log_level = self.log_level.upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def log_level_value(self) -> int:
        """Numeric logging level"""
        return logging.getLevelName(self.log_level)

    def update(self, other: "TreeConfig") -> None:
        """Copy every field of `other` into this instance"""
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))


# Shared config instance, read by trees at call time.
# load_config() updates it in place.
config = TreeConfig()


def load_config(env_path: Optional[str] = None) -> TreeConfig:
    """
    Load configuration from a dotenv file and the process environment
    and install it as the shared `config`.

    Recognized keys: MERKLE_MAX_HEIGHT, MERKLE_HASH_FUNCTION, MERKLE_LOG_LEVEL.
    Process environment variables override values from the file. Keys
    that are absent fall back to TreeConfig defaults. Trees built after
    the call use the new bounds and backend; existing trees keep the
    hasher they were built with.

    Args:
        env_path: Optional path to a .env file

    Returns:
        The shared TreeConfig instance

    Raises:
        ValueError: If a value cannot be parsed or is out of range
    """
    values = {}
    if env_path:
        values.update(dotenv_values(env_path))
    values.update({k: v for k, v in os.environ.items() if k.startswith(ENV_PREFIX)})

    kwargs = {}
    if values.get("MERKLE_MAX_HEIGHT"):
        raw = values["MERKLE_MAX_HEIGHT"]
        try:
            kwargs["max_height"] = int(raw)
        except ValueError:
            raise ValueError(f"MERKLE_MAX_HEIGHT must be an integer, got {raw!r}") from None
    if values.get("MERKLE_HASH_FUNCTION"):
        kwargs["hash_function"] = values["MERKLE_HASH_FUNCTION"]
    if values.get("MERKLE_LOG_LEVEL"):
        kwargs["log_level"] = values["MERKLE_LOG_LEVEL"]

    loaded = TreeConfig(**kwargs)
    config.update(loaded)

    from merkle_commit.utils.logger import get_logger, set_log_level
    set_log_level(config.log_level_value)
    get_logger("config").debug(
        f"Loaded config: max_height={config.max_height}, hash_function={config.hash_function}"
    )
    return config
