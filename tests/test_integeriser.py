"""
Tests for the interning contract across both backings.
"""

import pickle
import random

import pytest

from integeriser import BTreeIntegeriser, HashIntegeriser, Integeriser


BACKINGS = [HashIntegeriser, BTreeIntegeriser]

SENTENCE_1 = ["this", "is", "a", "test", "."]
SENTENCE_2 = ["this", "test", "is", "really", "simple", "."]


@pytest.fixture(params=BACKINGS, ids=lambda cls: cls.backing)
def table(request) -> Integeriser:
    """Create an empty table for each backing."""
    return request.param()


@pytest.fixture
def random_words():
    """A reproducible word stream with plenty of repeats."""
    rng = random.Random(42)
    vocabulary = [f"w{i}" for i in range(200)]
    return [rng.choice(vocabulary) for _ in range(2000)]


class TestIntegerise:
    """Tests for code assignment."""

    def test_empty_table(self, table):
        """A new table holds nothing."""
        assert table.size() == 0
        assert len(table) == 0
        assert list(table) == []

    def test_sentence_example(self, table):
        """Repeats resolve to original codes, new values get the next ones."""
        codes_1 = [table.integerise(w) for w in SENTENCE_1]
        codes_2 = [table.integerise(w) for w in SENTENCE_2]

        assert codes_1 == [0, 1, 2, 3, 4]
        assert codes_2 == [0, 3, 1, 5, 6, 4]
        assert table.size() == 7

    def test_idempotent(self, table):
        """Interning the same value twice returns the same code."""
        first = table.integerise("x")
        size_after_first = table.size()
        second = table.integerise("x")

        assert first == second
        assert table.size() == size_after_first == 1

    def test_consecutive_codes(self, table, random_words):
        """Codes ever returned are exactly 0..size-1."""
        codes = table.integerise_batch(random_words)

        assert set(codes) == set(range(table.size()))
        assert table.size() == len(set(random_words))

    def test_first_occurrence_order(self, table, random_words):
        """Code order follows first appearance in the input."""
        table.integerise_batch(random_words)

        expected = list(dict.fromkeys(random_words))
        assert list(table.values()) == expected

    def test_equal_values_share_code(self, table):
        """Values equal under == get one code."""
        assert table.integerise(1) == table.integerise(1.0)
        assert table.size() == 1


class TestLookups:
    """Tests for find_value / find_key."""

    def test_find_value(self, table):
        table.integerise_batch(SENTENCE_1)

        assert table.find_value(0) == "this"
        assert table.find_value(4) == "."

    def test_find_value_out_of_range(self, table):
        """Unassigned codes are absent, including negative ones."""
        table.integerise_batch(SENTENCE_1)

        assert table.find_value(5) is None
        assert table.find_value(-1) is None
        assert table.find_value(1000) is None

    def test_find_value_non_integer_code(self, table):
        """Codes are ints; anything else was never assigned."""
        table.integerise_batch(SENTENCE_1)

        assert table.find_value(0.5) is None
        assert table.find_value(1.0) is None
        assert table.find_value("0") is None

    def test_find_key(self, table):
        table.integerise_batch(SENTENCE_1)

        assert table.find_key("test") == 3
        assert table.find_key("missing") is None

    def test_find_key_does_not_assign(self, table):
        """find_key is read-only."""
        assert table.find_key("ghost") is None
        assert table.size() == 0
        assert table.integerise("real") == 0

    def test_bijection(self, table, random_words):
        """Every code round-trips through its value and back."""
        table.integerise_batch(random_words)

        for code in range(table.size()):
            assert table.find_key(table.find_value(code)) == code
        for word in random_words:
            assert table.find_value(table.find_key(word)) == word

    def test_find_values_batch(self, table):
        table.integerise_batch(SENTENCE_1)

        assert table.find_values([3, 0, 9]) == ["test", "this", None]

    def test_contains(self, table):
        table.integerise("a")

        assert "a" in table
        assert "b" not in table

    def test_iteration_is_insertion_order(self, table):
        """Iteration never follows index order."""
        table.integerise_batch(["zebra", "apple", "mango"])

        assert list(table) == ["zebra", "apple", "mango"]
        assert table.values() == ("zebra", "apple", "mango")


class TestIdentity:
    """Equality, ordering and hash follow the value list only."""

    def test_same_history_equal(self):
        a = HashIntegeriser.from_values(SENTENCE_1)
        b = HashIntegeriser()
        b.integerise_batch(SENTENCE_1 + ["this", "a"])

        assert a == b
        assert hash(a) == hash(b)

    def test_same_set_different_order_unequal(self, table):
        table.integerise_batch(["a", "b", "c"])
        other = type(table).from_values(["c", "b", "a"])

        assert table != other

    def test_equal_across_backings(self):
        """Different reverse indexes, same value list: equal."""
        hashed = HashIntegeriser.from_values(SENTENCE_2)
        ordered = BTreeIntegeriser.from_values(SENTENCE_2)

        assert hashed == ordered
        assert hash(hashed) == hash(ordered)

    def test_ordering(self, table):
        cls = type(table)
        table.integerise("a")

        assert table < cls.from_values(["b"])
        assert table < cls.from_values(["a", "b"])
        assert cls.from_values(["b"]) > table
        assert table <= cls.from_values(["a"])

    def test_not_equal_to_plain_list(self, table):
        table.integerise("a")

        assert table != ["a"]

    def test_repr(self):
        table = HashIntegeriser.from_values(["a", "b"])

        assert repr(table) == "HashIntegeriser(['a', 'b'])"


class TestVariantEquivalence:
    """Both backings assign identical codes."""

    def test_same_codes(self, random_words):
        hashed = HashIntegeriser()
        ordered = BTreeIntegeriser()

        assert hashed.integerise_batch(random_words) == ordered.integerise_batch(random_words)
        assert hashed.values() == ordered.values()

    def test_same_sentence_codes(self):
        for cls in BACKINGS:
            table = cls()
            table.integerise_batch(SENTENCE_1)
            assert [table.integerise(w) for w in SENTENCE_2] == [0, 3, 1, 5, 6, 4]


class TestCapabilities:
    """Each backing requires its own capability from the value type."""

    def test_btree_accepts_unhashable(self):
        table = BTreeIntegeriser()

        assert table.integerise([1, 2]) == 0
        assert table.integerise([0, 5]) == 1
        assert table.integerise([1, 2]) == 0
        assert table.find_key([0, 5]) == 1

    def test_hash_rejects_unhashable(self):
        table = HashIntegeriser()

        with pytest.raises(TypeError):
            table.integerise([1, 2])
        assert table.size() == 0

    def test_btree_rejects_unorderable(self):
        table = BTreeIntegeriser()
        table.integerise("a")

        with pytest.raises(TypeError):
            table.integerise(1)
        assert table.size() == 1
        assert table.find_value(1) is None

    def test_hash_accepts_mixed_types(self):
        table = HashIntegeriser()

        assert table.integerise_batch(["a", 1, ("t", 2), None]) == [0, 1, 2, 3]


class FailingHashIntegeriser(HashIntegeriser):
    """Reverse index that refuses one value."""

    def _register(self, value, code):
        if value == "boom":
            raise RuntimeError("index failure")
        super()._register(value, code)


class FailingBTreeIntegeriser(BTreeIntegeriser):
    """Sorted index whose code array insert fails."""

    def _register(self, value, code):
        if value == "boom":
            self._codes = _ExplodingList(self._codes)
        try:
            super()._register(value, code)
        finally:
            if isinstance(self._codes, _ExplodingList):
                self._codes = list(self._codes)


class _ExplodingList(list):
    def insert(self, index, item):
        raise RuntimeError("index failure")


class TestAtomicity:
    """A failed insert leaves no trace."""

    @pytest.mark.parametrize("cls", [FailingHashIntegeriser, FailingBTreeIntegeriser])
    def test_failed_register_rolls_back(self, cls):
        table = cls()
        table.integerise_batch(["a", "b"])

        with pytest.raises(RuntimeError):
            table.integerise("boom")

        assert table.size() == 2
        assert table.find_value(2) is None
        assert table.find_key("boom") is None
        assert table.integerise("c") == 2
        assert table == HashIntegeriser.from_values(["a", "b", "c"])


class TestRebuild:
    """from_values and pickling."""

    def test_from_values(self, table):
        rebuilt = type(table).from_values(SENTENCE_1)

        assert rebuilt.values() == tuple(SENTENCE_1)
        assert rebuilt.find_key(".") == 4

    def test_from_values_rejects_duplicates(self, table):
        with pytest.raises(ValueError):
            type(table).from_values(["a", "b", "a"])

    def test_pickle_roundtrip(self, table, random_words):
        table.integerise_batch(random_words)

        restored = pickle.loads(pickle.dumps(table))

        assert type(restored) is type(table)
        assert restored == table
        for word in set(random_words):
            assert restored.find_key(word) == table.find_key(word)
        # Restored table keeps growing from the same point
        assert restored.integerise("brand-new") == table.size()

    def test_pickle_stores_values_only(self):
        table = HashIntegeriser.from_values(["a", "b"])

        assert table.__getstate__() == {"values": ["a", "b"]}


class TestStats:
    def test_stats(self, table):
        table.integerise_batch(SENTENCE_2)

        stats = table.stats()
        assert stats["size"] == 6
        assert stats["index_entries"] == 6
        assert stats["backing"] == type(table).backing
