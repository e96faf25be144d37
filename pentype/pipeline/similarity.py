"""Pairwise song similarity.

Two N x N computations over an N x D feature matrix:
- cosine similarity (word-count vectors)
- angular distance, arccos of the cosine ratio (emotion vectors)

Pairs involving an all-zero vector have no defined ratio. Cosine similarity
reports 0 for them; angular distance also reports 0, which makes such
pairs look maximally close. Both matrices are fully materialized.
"""

import logging
import warnings
from typing import Sequence, Optional

import numpy as np
from scipy import sparse
from sklearn.metrics.pairwise import cosine_similarity

from pentype.pipeline.errors import DegenerateVectorWarning

logger = logging.getLogger(__name__)


def _as_float(features):
    if sparse.issparse(features):
        return sparse.csr_matrix(features, dtype=float)
    return np.asarray(features, dtype=float)


def _row_norms(features) -> np.ndarray:
    if sparse.issparse(features):
        squared = np.asarray(features.multiply(features).sum(axis=1)).ravel()
    else:
        squared = np.einsum("ij,ij->i", features, features)
    return np.sqrt(squared)


def degenerate_rows(features) -> np.ndarray:
    """Indices of all-zero rows."""
    return np.flatnonzero(_row_norms(_as_float(features)) == 0)


def _warn_degenerate(zero_rows: np.ndarray, identifiers: Optional[Sequence[str]]):
    if len(zero_rows) == 0:
        return
    if identifiers is not None:
        names = [identifiers[i] for i in zero_rows]
    else:
        names = [str(i) for i in zero_rows]
    message = f"{len(zero_rows)} all-zero feature vectors: {names}"
    logger.warning(message)
    warnings.warn(message, DegenerateVectorWarning, stacklevel=3)


def _cosine_ratio(features, identifiers=None):
    """Cosine ratio matrix plus a mask of pairs where it is undefined."""
    features = _as_float(features)
    zero = _row_norms(features) == 0
    _warn_degenerate(np.flatnonzero(zero), identifiers)

    if min(features.shape) == 0:
        ratio = np.zeros((features.shape[0], features.shape[0]))
    else:
        # zero rows come back as 0 against everything
        ratio = np.asarray(cosine_similarity(features), dtype=float)
    undefined = zero[:, None] | zero[None, :]

    # Rounding can push the ratio a hair outside [-1, 1]
    ratio = np.clip(ratio, -1.0, 1.0)
    ratio = (ratio + ratio.T) / 2
    return ratio, undefined


def cosine_similarity_matrix(features, identifiers: Optional[Sequence[str]] = None) -> np.ndarray:
    """Cosine similarity between every pair of rows.

    Args:
        features: N x D dense array or sparse matrix
        identifiers: Optional song names used in degenerate-vector warnings

    Returns:
        Symmetric N x N array; pairs with a zero vector are 0
    """
    ratio, undefined = _cosine_ratio(features, identifiers)
    ratio[undefined] = 0.0
    np.fill_diagonal(ratio, np.where(undefined.diagonal(), 0.0, 1.0))
    logger.info(f"Computed cosine similarity for {ratio.shape[0]} songs")
    return ratio


def angular_distance_matrix(features, identifiers: Optional[Sequence[str]] = None) -> np.ndarray:
    """Arc-cosine of the cosine ratio between every pair of rows.

    Args:
        features: N x D dense array or sparse matrix
        identifiers: Optional song names used in degenerate-vector warnings

    Returns:
        N x N array in [0, pi]; pairs with a zero vector are 0
    """
    ratio, undefined = _cosine_ratio(features, identifiers)
    distance = np.arccos(ratio)
    distance[undefined] = 0.0
    np.fill_diagonal(distance, 0.0)
    logger.info(f"Computed angular distance for {distance.shape[0]} songs")
    return distance
