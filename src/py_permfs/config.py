"""Filesystem configuration.

The settings a filesystem needs at construction time live in one
frozen dataclass.  Configurations can be written by hand::

    FileSystem(config=FileSystemConfig(block_size=512))

or loaded from a JSON document whose keys match the field names::

    {"block_size": 512, "log_capacity": 1000}

Unknown keys are rejected so typos do not silently fall back to
defaults.  The root user is not configurable: ``root`` always exists
and always holds ``rwx`` on ``/``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

BLOCK_SIZE = 4096
"""Default capacity of one file block in bytes."""


class ConfigError(ValueError):
    """Raised when a configuration cannot be loaded or is invalid."""


def _positive_int(name: str, value: object) -> int:
    """Return *value* if it is a positive int (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an integer, got {value!r}"
        raise ConfigError(msg)
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ConfigError(msg)
    return value


@dataclass(frozen=True)
class FileSystemConfig:
    """Construction-time settings for a ``FileSystem``.

    Attributes:
        block_size: Capacity of one file block in bytes.
        log_capacity: Maximum number of audit records kept, or ``None``
            to keep them all.

    """

    block_size: int = BLOCK_SIZE
    log_capacity: int | None = None

    def __post_init__(self) -> None:
        """Validate field types and values.

        Raises:
            ConfigError: On a non-integer or non-positive block size or
                log capacity.

        """
        _positive_int("block_size", self.block_size)
        if self.log_capacity is not None:
            _positive_int("log_capacity", self.log_capacity)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileSystemConfig:
        """Build a config from a mapping of field names to values.

        Raises:
            ConfigError: On unknown keys or invalid values.

        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown config keys: {', '.join(unknown)}"
            raise ConfigError(msg)
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-serializable dict."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path: Path) -> FileSystemConfig:
    """Load a config from a JSON file.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds invalid settings.

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"Config must be a JSON object: {path}"
        raise ConfigError(msg)
    return FileSystemConfig.from_dict(data)  # pyright: ignore[reportUnknownArgumentType]
