"""
Integeriser configuration.

Provides:
- Backing and codec selection
- JSON load/save of the configuration
- Configuration validation
- Factories for configured tables and codecs
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

from integeriser.base import Integeriser
from integeriser.codecs import CODECS, Codec, get_codec
from integeriser.hashed import HashIntegeriser
from integeriser.ordered import BTreeIntegeriser

logger = logging.getLogger(__name__)

CONFIG_FILE = "integeriser.json"

BACKINGS: Dict[str, Type[Integeriser]] = {
    HashIntegeriser.backing: HashIntegeriser,
    BTreeIntegeriser.backing: BTreeIntegeriser,
}

PARQUET_COMPRESSIONS = ("uncompressed", "snappy", "gzip", "lz4", "zstd", "brotli")


class ConfigValidationError(Exception):
    """Configuration validation error."""
    pass


@dataclass
class IntegeriserConfig:
    """Configuration for building and persisting an integeriser."""
    backing: str = "hash"             # "hash", "btree"
    codec: str = "json"               # "json", "parquet", "list"
    parquet_compression: str = "zstd"
    json_indent: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backing": self.backing,
            "codec": self.codec,
            "parquet_compression": self.parquet_compression,
            "json_indent": self.json_indent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntegeriserConfig":
        backing = data.get("backing", "hash")
        if backing not in BACKINGS:
            logger.warning(f"Unknown backing {backing!r}, falling back to 'hash'")
            backing = "hash"

        return cls(
            backing=backing,
            codec=data.get("codec", "json"),
            parquet_compression=data.get("parquet_compression", "zstd"),
            json_indent=data.get("json_indent"),
        )

    def save(self, path: Path) -> None:
        """Save configuration to ``path / integeriser.json``."""
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)
        config_file = path / CONFIG_FILE
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved integeriser config to {config_file}")

    @classmethod
    def load(cls, path: Path) -> "IntegeriserConfig":
        """Load configuration from ``path / integeriser.json``, or defaults."""
        config_file = Path(path) / CONFIG_FILE
        if config_file.exists():
            with open(config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        return cls()


class ConfigValidator:
    """Validates integeriser configuration."""

    @staticmethod
    def validate(config: IntegeriserConfig) -> List[str]:
        """
        Validate configuration.

        Returns list of error messages (empty if valid).
        """
        errors = []

        if config.backing not in BACKINGS:
            errors.append(f"Invalid backing: {config.backing}")

        if config.codec not in CODECS:
            errors.append(f"Invalid codec: {config.codec}")

        if config.parquet_compression not in PARQUET_COMPRESSIONS:
            errors.append(f"Invalid parquet_compression: {config.parquet_compression}")

        if config.json_indent is not None and config.json_indent < 0:
            errors.append("json_indent cannot be negative")

        return errors

    @staticmethod
    def validate_or_raise(config: IntegeriserConfig) -> None:
        """Validate configuration, raising on errors."""
        errors = ConfigValidator.validate(config)
        if errors:
            raise ConfigValidationError("; ".join(errors))


def backing_class(config: Optional[IntegeriserConfig] = None) -> Type[Integeriser]:
    """Return the integeriser class selected by ``config``."""
    config = config or IntegeriserConfig()
    ConfigValidator.validate_or_raise(config)
    return BACKINGS[config.backing]


def create_integeriser(config: Optional[IntegeriserConfig] = None) -> Integeriser:
    """Create an empty integeriser with the configured backing."""
    return backing_class(config)()


def create_codec(config: Optional[IntegeriserConfig] = None) -> Codec:
    """Create the codec selected by ``config``."""
    config = config or IntegeriserConfig()
    ConfigValidator.validate_or_raise(config)

    if config.codec == "parquet":
        return get_codec("parquet", compression=config.parquet_compression)
    if config.codec == "json":
        return get_codec("json", indent=config.json_indent)
    return get_codec(config.codec)
