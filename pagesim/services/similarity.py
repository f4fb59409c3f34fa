"""Structural similarity between path groups and between whole documents.

Path level
----------
For two path groups *a* and *b*::

    sim(a, b) = w * tag_sim(a, b) + (1 - w) * pos_sim(a, b)

``tag_sim`` is the length of the common tag prefix divided by the longer tag
sequence.  ``pos_sim`` penalises how far each occurrence of one group lies
from the nearest occurrence of the other, plus the difference in occurrence
counts::

    pos_sim = 1 - (total_distance / pn + |m - g|) / (2 * max(m, g))

where ``pn`` is the larger of the two documents' leaf counts minus one, and
``m``/``g`` are the occurrence counts.  When both documents have a single
leaf ``pn`` is 0 and the distance term is taken as 0.

Document level
--------------
Every group is scored by its best match in the other document; the two
directional averages are averaged::

    sim(A, B) = (sum(best(p, B) for p in A) / |A| + sum(best(q, A) for q in B) / |B|) / 2

Scores are symmetric and lie in ``[0, 1]``.  Identical inputs score ``1.0``
without evaluating the formula.  The triangle inequality does not hold.
"""

import math
import threading
from bisect import bisect_left
from typing import Optional, Sequence

from pagesim.models.path import PathGroup, PathSet

# Share of the tag-sequence term; the positional term gets the rest.
DEFAULT_WEIGHT = 0.5


class ComparisonCounter:
    """Thread-safe tally of similarity evaluations.

    Owned by the caller and passed in through the ``counter`` argument; the
    similarity functions never keep counts of their own.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._path_comparisons = 0
        self._set_comparisons = 0

    def record_path(self) -> None:
        with self._lock:
            self._path_comparisons += 1

    def record_set(self) -> None:
        with self._lock:
            self._set_comparisons += 1

    @property
    def path_comparisons(self) -> int:
        with self._lock:
            return self._path_comparisons

    @property
    def set_comparisons(self) -> int:
        with self._lock:
            return self._set_comparisons


def validate_weight(weight: float) -> float:
    """Return *weight* as a float, raising ValueError unless it lies in [0, 1]."""
    weight = float(weight)
    if math.isnan(weight) or not 0.0 <= weight <= 1.0:
        raise ValueError(f"weight must be between 0 and 1, got {weight}")
    return weight


# ---------------------------------------------------------------------------
# Path level
# ---------------------------------------------------------------------------

def common_prefix_length(a: Sequence[str], b: Sequence[str]) -> int:
    """Number of leading tags *a* and *b* share."""
    length = 0
    for tag_a, tag_b in zip(a, b):
        if tag_a != tag_b:
            break
        length += 1
    return length


def tag_similarity(a: PathGroup, b: PathGroup) -> float:
    longest = max(len(a.tag_sequence), len(b.tag_sequence))
    if longest == 0:
        return 0.0
    return common_prefix_length(a.tag_sequence, b.tag_sequence) / longest


def _nearest_distance(position: int, others: Sequence[int]) -> int:
    """Distance from *position* to the closest entry of the sorted *others*."""
    index = bisect_left(others, position)
    best = None
    if index < len(others):
        best = others[index] - position
    if index > 0:
        below = position - others[index - 1]
        if best is None or below < best:
            best = below
    return best


def position_similarity(a: PathGroup, b: PathGroup) -> float:
    pn = max(a.document_leaf_count, b.document_leaf_count) - 1

    total_distance = sum(
        _nearest_distance(p, b.occurrence_positions) for p in a.occurrence_positions
    ) + sum(
        _nearest_distance(p, a.occurrence_positions) for p in b.occurrence_positions
    )
    distance_term = total_distance / pn if pn > 0 else 0.0

    count_gap = abs(a.occurrence_count - b.occurrence_count)
    score = 1.0 - (distance_term + count_gap) / (2 * max(a.occurrence_count, b.occurrence_count))
    return min(1.0, max(0.0, score))


def _path_similarity(
    a: PathGroup,
    b: PathGroup,
    weight: float,
    counter: Optional[ComparisonCounter],
) -> float:
    if counter is not None:
        counter.record_path()
    if a == b:
        return 1.0
    return weight * tag_similarity(a, b) + (1 - weight) * position_similarity(a, b)


def path_similarity(
    a: PathGroup,
    b: PathGroup,
    weight: float = DEFAULT_WEIGHT,
    counter: Optional[ComparisonCounter] = None,
) -> float:
    """Similarity of two path groups in [0, 1].

    Args:
        a, b:     The groups to compare, usually from different documents.
        weight:   Share of the tag-sequence term (0 = positions only,
                  1 = tags only).
        counter:  Optional caller-owned :class:`ComparisonCounter`.

    Raises:
        ValueError: if *weight* is outside [0, 1].
    """
    return _path_similarity(a, b, validate_weight(weight), counter)


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------

def _best_match(
    group: PathGroup,
    other: PathSet,
    weight: float,
    counter: Optional[ComparisonCounter],
) -> float:
    best = 0.0
    for candidate in other.groups:
        best = max(best, _path_similarity(group, candidate, weight, counter))
        if best >= 1.0:
            break
    return best


def best_match(
    group: PathGroup,
    other: PathSet,
    weight: float = DEFAULT_WEIGHT,
    counter: Optional[ComparisonCounter] = None,
) -> float:
    """Highest similarity *group* reaches against any group of *other* (0.0 if empty)."""
    return _best_match(group, other, validate_weight(weight), counter)


def _directional_average(
    source: PathSet,
    other: PathSet,
    weight: float,
    counter: Optional[ComparisonCounter],
) -> float:
    total = sum(_best_match(group, other, weight, counter) for group in source.groups)
    return total / len(source.groups)


def set_similarity(
    a: PathSet,
    b: PathSet,
    weight: float = DEFAULT_WEIGHT,
    counter: Optional[ComparisonCounter] = None,
) -> float:
    """Structural similarity of two documents in [0, 1].

    Two structurally equal sets (including two empty ones) score 1.0.  An
    empty set against a non-empty one scores 0.0.

    Raises:
        ValueError: if *weight* is outside [0, 1].
    """
    weight = validate_weight(weight)
    if counter is not None:
        counter.record_set()

    if a == b:
        return 1.0
    if not a.groups or not b.groups:
        return 0.0

    forward = _directional_average(a, b, weight, counter)
    backward = _directional_average(b, a, weight, counter)
    return (forward + backward) / 2


def similarity(
    a: PathSet,
    b: PathSet,
    weight: float = DEFAULT_WEIGHT,
    counter: Optional[ComparisonCounter] = None,
) -> float:
    """Public entry point: see :func:`set_similarity`."""
    return set_similarity(a, b, weight, counter)
