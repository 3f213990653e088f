"""
integeriser: bidirectional interning tables.

Maps distinct values to dense, zero-based integer codes and back, with
hash-backed and order-backed reverse indexes.
"""

__version__ = "0.1.0"

from integeriser.base import Integeriser, Code
from integeriser.hashed import HashIntegeriser
from integeriser.ordered import BTreeIntegeriser
from integeriser.codecs import (
    Codec,
    ListCodec,
    JsonCodec,
    ParquetCodec,
    IntegeriserDecodeError,
    get_codec,
)
from integeriser.config import (
    IntegeriserConfig,
    ConfigValidator,
    ConfigValidationError,
    create_integeriser,
    create_codec,
)
from integeriser.persistence import (
    IntegeriserPersistence,
    save_integeriser,
    load_integeriser,
)

__all__ = [
    "Integeriser",
    "Code",
    "HashIntegeriser",
    "BTreeIntegeriser",
    # Codecs
    "Codec",
    "ListCodec",
    "JsonCodec",
    "ParquetCodec",
    "IntegeriserDecodeError",
    "get_codec",
    # Configuration
    "IntegeriserConfig",
    "ConfigValidator",
    "ConfigValidationError",
    "create_integeriser",
    "create_codec",
    # Persistence
    "IntegeriserPersistence",
    "save_integeriser",
    "load_integeriser",
]
