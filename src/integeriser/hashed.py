"""
Hash-backed integeriser.

Reverse index is a plain dict, so values must be hashable and hash
consistently with equality. Lookup and insert are O(1) on average.
"""

from __future__ import annotations

from typing import Any, Optional

from integeriser.base import A, Code, Integeriser


class HashIntegeriser(Integeriser[A]):
    """
    Integeriser whose reverse index is a hash table.

    Iteration, ``values()`` and serialization follow insertion order (the
    dense value list), not dict order.

    Example:
        words = ["this", "is", "a", "test", "."]
        table = HashIntegeriser()
        table.integerise_batch(words)   # [0, 1, 2, 3, 4]
        table.find_key("test")          # 3
    """

    backing = "hash"

    def __init__(self):
        super().__init__()
        # Reverse map: value -> code
        self._codes: dict[A, Code] = {}

    @classmethod
    def _decode_value(cls, value: Any) -> Any:
        # Decoded sequences come back as lists; tuples keep them hashable
        if isinstance(value, list):
            return tuple(cls._decode_value(v) for v in value)
        return value

    def _lookup(self, value: A) -> Optional[Code]:
        return self._codes.get(value)

    def _register(self, value: A, code: Code) -> None:
        self._codes[value] = code

    def stats(self) -> dict:
        stats = super().stats()
        stats["index_entries"] = len(self._codes)
        return stats
