"""
Chunking of parallel sequences.

Batch assembly collects several parallel lists per session target
(members, their loop-avoidance sets, hop counts, replication counts).
`split` cuts them in lock-step so element i of every list still
describes the same member after chunking.
"""

from __future__ import annotations
from typing import Iterator, Sequence


def split(
    limit: float,
    *lists: Sequence,
    duplicate_fitting: bool = False,
) -> Iterator[tuple[list, ...]]:
    """
    Yield consecutive lock-step chunks of at most `limit` elements.

    The first list is the reference for length; the others are sliced at
    the same offsets.

    Args:
        limit: Maximum chunk size (an int >= 1, or math.inf for one chunk)
        *lists: Parallel sequences
        duplicate_fitting: When the input already fits in one chunk, yield
                           it once more before the regular chunks. This
                           reproduces a historical double yield and only
                           exists to replay old batch counts.

    Raises:
        ValueError: if no sequence is given or limit < 1
    """
    if not lists:
        raise ValueError("split needs at least one sequence")
    if limit < 1:
        raise ValueError(f"Chunk limit must be >= 1, got {limit}")

    n = len(lists[0])

    if duplicate_fitting and n <= limit:
        yield tuple(list(seq) for seq in lists)

    start = 0
    while start < n:
        size = int(min(limit, n - start))
        yield tuple(list(seq[start:start + size]) for seq in lists)
        start += size
