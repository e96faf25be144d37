"""Nearest-neighbor majority-vote classification."""

import logging
from collections import Counter
from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from pentype.pipeline.config import CATEGORIES, DEFAULT_NEIGHBOR_PARAMS, ID_COLUMN, LABEL_COLUMN
from pentype.pipeline.dataset import Corpus
from pentype.pipeline.errors import InsufficientDataError

logger = logging.getLogger(__name__)


def select_neighbors(scores: np.ndarray, k: int = DEFAULT_NEIGHBOR_PARAMS["k"]) -> np.ndarray:
    """Pick the k highest-scoring peers of every song.

    Candidates are ranked by raw score in descending order whether the
    matrix holds similarities or distances. Equal scores keep index order.

    Args:
        scores: N x N similarity or distance matrix
        k: Number of neighbors

    Returns:
        N x k array of neighbor indices (never the song itself)
    """
    scores = np.asarray(scores, dtype=float)
    n = scores.shape[0]
    if scores.ndim != 2 or scores.shape[1] != n:
        raise ValueError(f"Expected a square score matrix, got shape {scores.shape}")
    if k < 1:
        raise ValueError(f"k must be positive, got {k}")
    if n < k + 1:
        raise InsufficientDataError(f"Need at least {k + 1} songs for {k} neighbors, got {n}")

    neighbors = np.empty((n, k), dtype=int)
    for i in range(n):
        candidates = np.delete(np.arange(n), i)
        order = np.argsort(-scores[i, candidates], kind="stable")
        neighbors[i] = candidates[order[:k]]
    return neighbors


def majority_vote(labels: Iterable[str]) -> Tuple[str, ...]:
    """Most frequent labels; every tied label is returned, in category order."""
    counts = Counter(labels)
    if not counts:
        return ()
    top = max(counts.values())
    tied = [label for label, count in counts.items() if count == top]
    order = {cat: i for i, cat in enumerate(CATEGORIES)}
    return tuple(sorted(tied, key=lambda label: order.get(label, len(order))))


def classify_by_neighbors(
    corpus: Corpus,
    scores: np.ndarray,
    k: int = DEFAULT_NEIGHBOR_PARAMS["k"],
) -> pd.DataFrame:
    """Predict each song's pen type from its k nearest peers.

    Args:
        corpus: Labeled corpus (row order matches the score matrix)
        scores: N x N similarity or distance matrix
        k: Number of neighbors

    Returns:
        DataFrame with columns track_name, pen, neighbors, predicted, correct.
        predicted is a tuple of labels; correct means the true label is in it.
    """
    if len(scores) != len(corpus):
        raise ValueError(f"Score matrix has {len(scores)} rows for {len(corpus)} songs")

    neighbors = select_neighbors(scores, k)
    identifiers = corpus.identifiers
    labels = corpus.labels

    rows = []
    for i, peer_indices in enumerate(neighbors):
        predicted = majority_vote(labels[j] for j in peer_indices)
        rows.append({
            ID_COLUMN: identifiers[i],
            LABEL_COLUMN: labels[i],
            "neighbors": tuple(identifiers[j] for j in peer_indices),
            "predicted": predicted,
            "correct": labels[i] in predicted,
        })

    results = pd.DataFrame(rows, columns=[ID_COLUMN, LABEL_COLUMN, "neighbors", "predicted", "correct"])
    n_ties = int((results["predicted"].map(len) > 1).sum())
    logger.info(f"Classified {len(results)} songs with {k}-NN "
                f"({int(results['correct'].sum())} correct, {n_ties} tied votes)")
    return results
