"""Tests for order-independent sequence equality."""
import pytest

from blobs.multiset import multiset_equal
from blobs.records import BlobRecord, ListingItem, ListingKind, to_snapshot


class TestMultisetEqual:
    """Test multiset_equal semantics."""

    def test_same_elements_different_order(self):
        assert multiset_equal(["a", "b", "c"], ["c", "b", "a"]) is True

    def test_different_multiplicity(self):
        assert multiset_equal(["a", "b"], ["a", "b", "b"]) is False

    def test_missing_element_in_second(self):
        assert multiset_equal(["a", "b", "b"], ["a", "b"]) is False

    def test_unseen_element_fails_fast(self):
        """An element never seen in the first sequence returns False without consuming the rest."""
        consumed = []

        def second():
            for item in ["a", "z", "b"]:
                consumed.append(item)
                yield item

        assert multiset_equal(["a", "b"], second()) is False
        assert consumed == ["a", "z"]

    def test_both_empty(self):
        assert multiset_equal([], []) is True

    def test_one_empty(self):
        assert multiset_equal([], ["a"]) is False
        assert multiset_equal(["a"], []) is False

    def test_duplicates_matched(self):
        assert multiset_equal([1, 1, 2], [1, 2, 1]) is True

    def test_accepts_generators(self):
        assert multiset_equal((x for x in "abc"), iter("cab")) is True


class TestListingEquivalence:
    """Two paginated listings of one container describe the same content."""

    def test_listings_in_different_page_order(self):
        page_a = [ListingItem(ListingKind.BLOB, "x", "2024-01-01", 1),
                  ListingItem(ListingKind.BLOB, "y", "2024-01-02", 2)]
        page_b = [ListingItem(ListingKind.BLOB, "z", None, 3)]

        first = to_snapshot(page_a + page_b)
        second = to_snapshot(page_b + page_a)

        assert multiset_equal(first, second) is True

    def test_changed_metadata_not_equivalent(self):
        first = [BlobRecord("x", "2024-01-01", 1)]
        second = [BlobRecord("x", "2024-01-02", 1)]
        assert multiset_equal(first, second) is False

    @pytest.mark.parametrize("a,b", [
        (["a", "b", "c"], ["c", "b", "a"]),
        (["a"], ["a"]),
    ])
    def test_symmetric_when_equal(self, a, b):
        assert multiset_equal(a, b) == multiset_equal(b, a)
