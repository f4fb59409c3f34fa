"""Batch comparison and page-template clustering.

Given the path sets of many pages, :func:`similarity_matrix` scores every
pair, and :func:`cluster_templates` groups pages that are structural
near-duplicates of each other (same template, boilerplate-only differences).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import combinations
from typing import Dict, List, Optional, Sequence

from pagesim.models.path import PathSet
from pagesim.services.similarity import (
    DEFAULT_WEIGHT,
    ComparisonCounter,
    set_similarity,
    validate_weight,
)

logger = logging.getLogger(__name__)

# Pages scoring at or above this are treated as sharing a template.
DEFAULT_DUPLICATE_THRESHOLD = 0.9

# Upper bound on the number of documents in one batch request.
MAX_BATCH_DOCUMENTS = 20


def similarity_matrix(
    path_sets: Sequence[PathSet],
    weight: float = DEFAULT_WEIGHT,
    max_workers: Optional[int] = None,
    counter: Optional[ComparisonCounter] = None,
) -> List[List[float]]:
    """Return the symmetric matrix of pairwise similarities.

    Each unordered pair is scored once, on a thread pool; the diagonal is
    1.0.  An exception raised for any pair propagates and no matrix is
    returned.
    """
    weight = validate_weight(weight)
    size = len(path_sets)
    matrix = [[1.0] * size for _ in range(size)]
    pairs = list(combinations(range(size), 2))
    if not pairs:
        return matrix

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            (i, j): executor.submit(set_similarity, path_sets[i], path_sets[j], weight, counter)
            for i, j in pairs
        }
        for (i, j), future in futures.items():
            score = future.result()
            matrix[i][j] = score
            matrix[j][i] = score

    logger.debug("Scored %d document pairs", len(pairs))
    return matrix


def _find(parents: List[int], index: int) -> int:
    while parents[index] != index:
        parents[index] = parents[parents[index]]
        index = parents[index]
    return index


def cluster_templates(
    labels: Sequence[str],
    matrix: Sequence[Sequence[float]],
    threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
) -> List[List[str]]:
    """Group documents whose similarity reaches *threshold* (single link).

    Two documents end up in the same cluster when a chain of pairs, each
    scoring at least *threshold*, connects them.  Clusters are ordered by
    their first member, members keep the order of *labels*, and documents
    similar to nothing form clusters of one.

    Raises:
        ValueError: if *threshold* is outside [0, 1] or *matrix* does not
            match *labels*.
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
    size = len(labels)
    if len(matrix) != size or any(len(row) != size for row in matrix):
        raise ValueError(f"matrix must be {size}x{size} to match the labels")

    parents = list(range(size))
    for i, j in combinations(range(size), 2):
        if matrix[i][j] >= threshold:
            root_i, root_j = _find(parents, i), _find(parents, j)
            if root_i != root_j:
                parents[max(root_i, root_j)] = min(root_i, root_j)

    clusters: Dict[int, List[str]] = {}
    for index, label in enumerate(labels):
        clusters.setdefault(_find(parents, index), []).append(label)
    return list(clusters.values())
