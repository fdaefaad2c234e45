"""Order-independent equality over two sequences."""
from typing import Hashable, Iterable


def multiset_equal(first: Iterable[Hashable], second: Iterable[Hashable]) -> bool:
    """Check that two sequences hold the same elements with the same multiplicities.

    Used to confirm that two independently paginated listings of one container
    describe the same content regardless of fetch order.

    Args:
        first: First sequence of hashable values
        second: Second sequence of hashable values

    Returns:
        True if both contain exactly the same elements, False otherwise
    """
    counts: dict = {}
    for item in first:
        counts[item] = counts.get(item, 0) + 1

    for item in second:
        if item not in counts:
            # Never seen in the first sequence, no need to look further
            return False
        counts[item] -= 1

    return all(count == 0 for count in counts.values())
