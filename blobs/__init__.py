"""Blob metadata records, ordering and comparison utilities."""
from blobs.records import (
    BlobRecord,
    ListingItem,
    ListingKind,
    index_by_name,
    parse_length,
    parse_timestamp,
    to_snapshot,
)
from blobs.ordering import BlobComparer, SortColumn, make_comparator, sort_blobs
from blobs.multiset import multiset_equal

__all__ = [
    'BlobRecord',
    'ListingItem',
    'ListingKind',
    'index_by_name',
    'parse_length',
    'parse_timestamp',
    'to_snapshot',
    'BlobComparer',
    'SortColumn',
    'make_comparator',
    'sort_blobs',
    'multiset_equal',
]
