"""
Serialization codecs for integerisers.

A codec converts a table to and from its wire form. The wire form is always
the ordered value list alone; decoding replays code assignment in list
order, so the reverse index is never stored.

Codecs:
- ListCodec: plain Python list (in-memory hand-off)
- JsonCodec: UTF-8 JSON array
- ParquetCodec: single-column Parquet file via Polars
"""

from __future__ import annotations

import io
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type

import polars as pl

from integeriser.base import Integeriser
from integeriser.hashed import HashIntegeriser

logger = logging.getLogger(__name__)


class IntegeriserDecodeError(ValueError):
    """Serialized payload could not be turned back into a table."""
    pass


def rebuild(values: Any, cls: Type[Integeriser]) -> Integeriser:
    """
    Rebuild a table of type ``cls`` from a decoded value sequence.

    Raises:
        IntegeriserDecodeError: If ``values`` is not a list or cannot be
            interned one-to-one (duplicates, values the backing can't index)
    """
    if not isinstance(values, (list, tuple)):
        raise IntegeriserDecodeError(
            f"Expected an ordered value list, got {type(values).__name__}"
        )
    try:
        return cls.from_values(values)
    except (TypeError, ValueError) as e:
        raise IntegeriserDecodeError(f"Invalid value list: {e}") from e


class Codec(ABC):
    """Converts an integeriser to and from a serialized payload."""

    #: Short name used in configuration
    name: str = ""

    @abstractmethod
    def encode(self, table: Integeriser) -> Any:
        """Serialize the table's value list."""

    @abstractmethod
    def decode(
        self,
        payload: Any,
        cls: Type[Integeriser] = HashIntegeriser,
    ) -> Integeriser:
        """
        Rebuild a table from a payload produced by ``encode``.

        Raises:
            IntegeriserDecodeError: If the payload is malformed
        """


class ListCodec(Codec):
    """Identity codec: the payload is a plain list of values."""

    name = "list"

    def encode(self, table: Integeriser) -> list:
        return list(table.values())

    def decode(self, payload: Any, cls: Type[Integeriser] = HashIntegeriser) -> Integeriser:
        return rebuild(payload, cls)


class JsonCodec(Codec):
    """
    JSON array codec.

    Values must be JSON-serializable. Nested arrays are decoded as
    lists, or as tuples for backings that need hashable values.
    """

    name = "json"

    def __init__(self, indent: Optional[int] = None):
        self.indent = indent

    def encode(self, table: Integeriser) -> bytes:
        return json.dumps(
            list(table.values()),
            indent=self.indent,
            ensure_ascii=False,
        ).encode("utf-8")

    def decode(
        self,
        payload: bytes | str,
        cls: Type[Integeriser] = HashIntegeriser,
    ) -> Integeriser:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise IntegeriserDecodeError(f"Invalid JSON payload: {e}") from e

        if isinstance(data, list):
            data = [cls._decode_value(v) for v in data]
        return rebuild(data, cls)


class ParquetCodec(Codec):
    """
    Parquet codec storing the value list in a single ``value`` column.

    Row order is code order. Values must fit one Polars dtype; tuple and
    list values are stored as a List column.
    """

    name = "parquet"
    COLUMN = "value"

    def __init__(self, compression: str = "zstd", dtype: Optional[pl.DataType] = None):
        self.compression = compression
        self.dtype = dtype

    def to_dataframe(self, table: Integeriser) -> pl.DataFrame:
        """Export the value list to a one-column DataFrame."""
        values = list(table.values())
        if not values:
            return pl.DataFrame({
                self.COLUMN: pl.Series([], dtype=self.dtype or pl.Utf8),
            })
        return pl.DataFrame({
            self.COLUMN: pl.Series(values, dtype=self.dtype),
        })

    def from_dataframe(
        self,
        df: pl.DataFrame,
        cls: Type[Integeriser] = HashIntegeriser,
    ) -> Integeriser:
        """Rebuild a table from a DataFrame produced by ``to_dataframe``."""
        if self.COLUMN not in df.columns:
            raise IntegeriserDecodeError(
                f"Missing '{self.COLUMN}' column (found {df.columns})"
            )
        values = [cls._decode_value(v) for v in df[self.COLUMN].to_list()]
        return rebuild(values, cls)

    def encode(self, table: Integeriser) -> bytes:
        buffer = io.BytesIO()
        self.to_dataframe(table).write_parquet(buffer, compression=self.compression)
        return buffer.getvalue()

    def decode(
        self,
        payload: bytes,
        cls: Type[Integeriser] = HashIntegeriser,
    ) -> Integeriser:
        try:
            df = pl.read_parquet(io.BytesIO(payload))
        except (pl.exceptions.PolarsError, OSError) as e:
            raise IntegeriserDecodeError(f"Invalid Parquet payload: {e}") from e
        return self.from_dataframe(df, cls)


CODECS: dict[str, Type[Codec]] = {
    ListCodec.name: ListCodec,
    JsonCodec.name: JsonCodec,
    ParquetCodec.name: ParquetCodec,
}


def get_codec(name: str, **options: Any) -> Codec:
    """
    Instantiate a codec by name.

    Args:
        name: One of "list", "json", "parquet"
        **options: Passed to the codec constructor

    Raises:
        KeyError: If the codec name is unknown
    """
    try:
        codec_cls = CODECS[name]
    except KeyError:
        raise KeyError(f"Unknown codec: {name!r} (expected one of {sorted(CODECS)})") from None
    logger.debug(f"Using {name} codec with options {options}")
    return codec_cls(**options)
