"""
Interning contract shared by every integeriser backing.

An integeriser maps each distinct value to a dense, zero-based integer code
and back again. The value list (first-occurrence order) is the only state
that defines a table's identity; the reverse index kept by each backing is
an acceleration structure and never takes part in equality, ordering,
hashing or serialization.

Thread-safety: NOT thread-safe. Use external synchronization for concurrent
mutation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import total_ordering
from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

A = TypeVar("A")

# Type alias for integer codes
Code = int


@total_ordering
class Integeriser(ABC, Generic[A]):
    """
    Bidirectional value <-> code table.

    Subclasses supply the reverse index through ``_lookup`` and
    ``_register``; the dense value list and everything derived from it
    lives here.

    Example:
        table = HashIntegeriser()
        table.integerise("this")   # 0
        table.integerise("is")     # 1
        table.integerise("this")   # 0
        table.find_value(1)        # "is"
        table.find_key("missing")  # None
    """

    #: Short name used in stats and configuration
    backing: str = ""

    def __init__(self):
        # Dense sequence: index i IS the code of _values[i]
        self._values: list[A] = []

    @classmethod
    def from_values(cls, values: Iterable[A]) -> "Integeriser[A]":
        """
        Rebuild a table from an ordered value list.

        Codes 0..n-1 are re-assigned in list order, so the result equals
        the table that produced the list.

        Raises:
            ValueError: If the list contains the same value twice
            TypeError: If a value lacks the capability the backing needs
        """
        instance = cls()
        for position, value in enumerate(values):
            code = instance.integerise(value)
            if code != position:
                raise ValueError(
                    f"Duplicate value {value!r} at position {position} "
                    f"(already assigned code {code})"
                )
        return instance

    @classmethod
    def _decode_value(cls, value: Any) -> Any:
        """
        Adapt a value read back from a wire format to what the backing can index.

        Wire formats return sequences as lists; backings that can't index
        lists override this.
        """
        return value

    # =========================================================================
    # Reverse index (backing-specific)
    # =========================================================================

    @abstractmethod
    def _lookup(self, value: A) -> Optional[Code]:
        """Return the code stored for ``value`` in the reverse index."""

    @abstractmethod
    def _register(self, value: A, code: Code) -> None:
        """
        Record ``value -> code`` in the reverse index.

        Must leave the index unchanged if it raises.
        """

    # =========================================================================
    # Interning contract
    # =========================================================================

    def integerise(self, value: A) -> Code:
        """
        Return the code for ``value``, assigning the next free one if needed.

        Equal values always get the same code; codes are handed out
        consecutively from 0 in first-occurrence order.
        """
        code = self._lookup(value)
        if code is not None:
            return code

        code = len(self._values)
        self._values.append(value)
        try:
            self._register(value, code)
        except BaseException:
            # Keep both structures in lockstep
            self._values.pop()
            raise
        return code

    def find_value(self, code: Code) -> Optional[A]:
        """
        Look up the value for ``code``, or None if it was never assigned.

        Only ``int`` codes are ever assigned; anything else is absent.
        """
        if isinstance(code, int) and 0 <= code < len(self._values):
            return self._values[code]
        return None

    def find_key(self, value: A) -> Optional[Code]:
        """Look up the code for ``value`` without assigning one."""
        return self._lookup(value)

    def size(self) -> int:
        """Number of distinct values interned so far."""
        return len(self._values)

    # =========================================================================
    # Batch helpers
    # =========================================================================

    def integerise_batch(self, values: Iterable[A]) -> list[Code]:
        """Intern every value in order. Returns codes in the same order."""
        return [self.integerise(value) for value in values]

    def find_values(self, codes: Iterable[Code]) -> list[Optional[A]]:
        """Bulk ``find_value``."""
        return [self.find_value(code) for code in codes]

    def values(self) -> tuple[A, ...]:
        """All interned values in code order."""
        return tuple(self._values)

    def stats(self) -> dict[str, Any]:
        """Return statistics about the table."""
        return {
            "size": len(self._values),
            "backing": self.backing,
        }

    # =========================================================================
    # Python protocols
    # =========================================================================

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[A]:
        return iter(self._values)

    def __contains__(self, value: object) -> bool:
        return self._lookup(value) is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    # Identity is the value list only, never the reverse index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Integeriser):
            return NotImplemented
        return self._values == other._values

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Integeriser):
            return NotImplemented
        return self._values < other._values

    def __hash__(self) -> int:
        return hash(tuple(self._values))

    # Pickle stores the value list; the reverse index is rebuilt on load

    def __getstate__(self) -> dict[str, Any]:
        return {"values": list(self._values)}

    def __setstate__(self, state: dict[str, Any]) -> None:
        rebuilt = type(self).from_values(state["values"])
        self.__dict__.update(rebuilt.__dict__)
