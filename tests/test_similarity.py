import warnings

import numpy as np
import pytest
from scipy import sparse
from sklearn.metrics.pairwise import cosine_similarity

from pentype.pipeline.errors import DegenerateVectorWarning
from pentype.pipeline.similarity import angular_distance_matrix, cosine_similarity_matrix, degenerate_rows


@pytest.fixture
def counts():
    rng = np.random.default_rng(7)
    return rng.integers(0, 4, size=(15, 40)).astype(float)


def test_cosine_is_symmetric_with_unit_diagonal(counts):
    sim = cosine_similarity_matrix(counts)

    assert np.array_equal(sim, sim.T)
    assert np.all(np.diag(sim) == 1.0)
    assert sim.min() >= 0.0
    assert sim.max() <= 1.0


def test_cosine_known_value():
    sim = cosine_similarity_matrix(np.array([[1.0, 1.0, 0.0], [1.0, 0.0, 0.0]]))

    assert sim[0, 1] == pytest.approx(1 / np.sqrt(2))


def test_cosine_sparse_matches_dense(counts):
    dense = cosine_similarity_matrix(counts)
    sparse_result = cosine_similarity_matrix(sparse.csr_matrix(counts))

    assert np.allclose(dense, sparse_result)


def test_zero_vectors_get_sentinel():
    features = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 2.0]])

    with pytest.warns(DegenerateVectorWarning):
        sim = cosine_similarity_matrix(features)

    assert not np.isnan(sim).any()
    assert sim[0, 1] == 0.0
    assert sim[0, 0] == 0.0
    assert sim[0, 2] == 0.0
    assert sim[2, 2] == 1.0


def test_no_warning_without_zero_vectors(counts):
    counts[:, 0] += 1
    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerateVectorWarning)
        cosine_similarity_matrix(counts)


def test_warning_names_songs():
    with pytest.warns(DegenerateVectorWarning, match="Betty"):
        cosine_similarity_matrix(np.array([[1.0], [0.0]]), identifiers=["Seven", "Betty"])


def test_angular_distance_range_and_values():
    features = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0], [2.0, 0.0]])

    dist = angular_distance_matrix(features)

    assert dist[0, 1] == pytest.approx(np.pi / 2)
    assert dist[0, 2] == pytest.approx(np.pi / 4)
    assert dist[0, 3] == pytest.approx(0.0, abs=1e-7)
    assert np.all(np.diag(dist) == 0.0)
    assert dist.min() >= 0.0
    assert dist.max() <= np.pi
    assert np.allclose(dist, dist.T)


def test_angular_distance_zero_vector_is_zero():
    features = np.array([[0.0, 0.0], [1.0, 3.0], [3.0, 1.0]])

    with pytest.warns(DegenerateVectorWarning):
        dist = angular_distance_matrix(features)

    assert not np.isnan(dist).any()
    assert dist[0, 1] == 0.0
    assert dist[2, 0] == 0.0
    assert dist[1, 2] > 0.0


def test_degenerate_rows():
    features = sparse.csr_matrix(np.array([[0, 0], [1, 0], [0, 0]]))

    assert degenerate_rows(features).tolist() == [0, 2]


def test_cosine_matches_pairwise_cosine(counts):
    counts[3] = 0.0
    with pytest.warns(DegenerateVectorWarning):
        sim = cosine_similarity_matrix(sparse.csr_matrix(counts))

    expected = cosine_similarity(counts)
    np.fill_diagonal(expected, 1.0)
    expected[3, 3] = 0.0
    assert np.allclose(sim, expected)


def test_features_without_columns():
    with pytest.warns(DegenerateVectorWarning):
        sim = cosine_similarity_matrix(sparse.csr_matrix((3, 0)))
        dist = angular_distance_matrix(np.zeros((3, 0)))

    assert np.array_equal(sim, np.zeros((3, 3)))
    assert np.array_equal(dist, np.zeros((3, 3)))
