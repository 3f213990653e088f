"""
File persistence for integerisers.

Writes the ordered value list with the configured codec. Nothing but the
value list is stored; loading rebuilds the reverse index by replaying code
assignment in file order.

File layout:
    base_path/
        values.json | values.parquet   - value list in code order
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from integeriser.base import Integeriser
from integeriser.config import ConfigValidationError, IntegeriserConfig, backing_class, create_codec

logger = logging.getLogger(__name__)


class IntegeriserPersistence:
    """
    Handles save/load of a single integeriser under a directory.

    Example:
        persistence = IntegeriserPersistence("/tmp/symbols")
        persistence.save(table)
        restored = persistence.load()
        assert restored == table
    """

    VALUES_FILE = "values"

    def __init__(self, base_path: str | Path, config: Optional[IntegeriserConfig] = None):
        """
        Initialize persistence with a base directory path.

        Args:
            base_path: Directory where the value file will be saved/loaded
            config: Backing and codec selection (defaults if omitted)

        Raises:
            ConfigValidationError: If the codec cannot be used for files
        """
        self.base_path = Path(base_path)
        self.config = config or IntegeriserConfig()
        if self.config.codec == "list":
            raise ConfigValidationError("The 'list' codec cannot be used for file persistence")
        self.codec = create_codec(self.config)

    @property
    def values_path(self) -> Path:
        return self.base_path / f"{self.VALUES_FILE}.{self.config.codec}"

    def exists(self) -> bool:
        """Check whether a saved value file exists."""
        return self.values_path.exists()

    def save(self, table: Integeriser) -> Path:
        """
        Save the table's value list.

        Writes to a temporary file first so a failed save never leaves a
        truncated value file behind.

        Returns:
            Path of the written file
        """
        self.base_path.mkdir(parents=True, exist_ok=True)

        payload = self.codec.encode(table)
        target = self.values_path
        tmp = target.with_name(target.name + ".tmp")
        try:
            tmp.write_bytes(payload)
            os.replace(tmp, target)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(table)} values to {target}")
        return target

    def load(self) -> Integeriser:
        """
        Load the table from disk.

        Raises:
            FileNotFoundError: If no value file exists
            IntegeriserDecodeError: If the file content is malformed
        """
        target = self.values_path
        if not target.exists():
            raise FileNotFoundError(f"Integeriser values not found: {target}")

        table = self.codec.decode(target.read_bytes(), backing_class(self.config))
        logger.debug(f"Loaded {len(table)} values from {target}")
        return table


def save_integeriser(
    base_path: str | Path,
    table: Integeriser,
    config: Optional[IntegeriserConfig] = None,
) -> Path:
    """
    Convenience function to save an integeriser to disk.

    Args:
        base_path: Directory path for the value file
        table: Integeriser to save
        config: Codec selection (defaults if omitted)
    """
    return IntegeriserPersistence(base_path, config).save(table)


def load_integeriser(
    base_path: str | Path,
    config: Optional[IntegeriserConfig] = None,
) -> Integeriser:
    """
    Convenience function to load an integeriser from disk.

    Args:
        base_path: Directory path containing the value file
        config: Backing and codec selection (defaults if omitted)
    """
    return IntegeriserPersistence(base_path, config).load()
