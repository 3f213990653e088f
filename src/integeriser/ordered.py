"""
Order-backed integeriser.

Reverse index is a sorted key array with a parallel code array, searched
with binary search. Values must support a total order consistent with
equality (``a == b`` implies neither ``a < b`` nor ``b < a``); they do not
need to be hashable. Lookups are O(log n).
"""

from __future__ import annotations

import bisect
from typing import Optional

from integeriser.base import A, Code, Integeriser


class BTreeIntegeriser(Integeriser[A]):
    """
    Integeriser whose reverse index is kept sorted by value.

    Observable behaviour is identical to ``HashIntegeriser``: codes follow
    first-occurrence order, and iteration yields values in code order.

    Example:
        table = BTreeIntegeriser()
        table.integerise(["unhashable", "list"])   # 0
        table.find_key(["unhashable", "list"])     # 0
    """

    backing = "btree"

    def __init__(self):
        super().__init__()
        # Sorted key array for binary search
        self._keys: list[A] = []
        # Parallel array of codes
        self._codes: list[Code] = []

    def _search(self, value: A) -> tuple[int, bool]:
        """
        Binary search for ``value``.

        Returns:
            (insertion point, whether the key at that point equals value)
        """
        idx = bisect.bisect_left(self._keys, value)
        found = idx < len(self._keys) and self._keys[idx] == value
        return idx, found

    def _lookup(self, value: A) -> Optional[Code]:
        idx, found = self._search(value)
        if found:
            return self._codes[idx]
        return None

    def _register(self, value: A, code: Code) -> None:
        idx, found = self._search(value)
        if found:
            raise KeyError(f"{value!r} is already registered")
        self._keys.insert(idx, value)
        try:
            self._codes.insert(idx, code)
        except BaseException:
            del self._keys[idx]
            raise

    def stats(self) -> dict:
        stats = super().stats()
        stats["index_entries"] = len(self._keys)
        return stats
