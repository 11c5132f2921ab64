"""Tests for pairwise metrics and PairwiseMatrix transforms."""

import math

import numpy as np
import pytest
from scipy.spatial.distance import cdist

import pairsim
from pairsim import EmptyFeatureSpaceError, Metric, PairwiseMatrix


@pytest.mark.parametrize("metric", ["euclidean", "manhattan", "cosine", "jaccard"])
def test_symmetry_and_diagonal(scenario_dfm, metric):
    m = pairsim.compute_pairwise(scenario_dfm, metric)
    v = m.values
    assert np.array_equal(v, v.T)
    expected_diag = 0.0 if m.kind == "distance" else 1.0
    assert np.diag(v).tolist() == [expected_diag] * 4
    assert m.labels == scenario_dfm.units


def test_euclidean_values(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm, "euclidean")
    assert m["B", "D"] == 2.0
    assert m["A", "B"] == pytest.approx(math.sqrt(11))
    assert m["B", "C"] == pytest.approx(math.sqrt(13))
    dense = scenario_dfm.to_dense()
    assert np.allclose(m.values, cdist(dense, dense))


def test_manhattan_values(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm, "manhattan")
    dense = scenario_dfm.to_dense()
    assert np.allclose(m.values, cdist(dense, dense, "cityblock"))
    assert m["B", "D"] == 4.0


def test_cosine_values(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm, "cosine")
    assert m["B", "D"] == pytest.approx(4 / (3 * math.sqrt(3)))
    assert m["B", "C"] == 0.0
    assert m["A", "B"] == 0.0
    assert m["A", "C"] == pytest.approx(1 / math.sqrt(2))
    assert ((m.values >= 0.0) & (m.values <= 1.0)).all()


def test_jaccard_values(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm, "jaccard")
    # B {t1,t2,t3}, D {t1,t2,t4}
    assert m["B", "D"] == pytest.approx(2 / 4)
    assert m["A", "C"] == pytest.approx(1 / 2)


def test_zero_row_policy():
    dfm = pairsim.build_dfm([
        ("empty", {"a": 0}),
        ("x", {"a": 2, "b": 1}),
        ("y", {"b": 3}),
    ])
    cos = pairsim.compute_pairwise(dfm, "cosine")
    assert cos["empty", "empty"] == 0.0
    assert cos["empty", "x"] == 0.0
    assert cos["x", "x"] == 1.0
    assert np.isfinite(cos.values).all()

    euc = pairsim.compute_pairwise(dfm, "euclidean")
    assert euc["empty", "empty"] == 0.0
    assert euc["empty", "x"] == pytest.approx(math.sqrt(5))

    jac = pairsim.compute_pairwise(dfm, "jaccard")
    assert jac["empty", "empty"] == 0.0


def test_empty_feature_space(scenario_dfm):
    trimmed = pairsim.trim_dfm(scenario_dfm, min_doc_freq=10)
    with pytest.raises(EmptyFeatureSpaceError):
        pairsim.compute_pairwise(trimmed, "cosine")


def test_unknown_metric(scenario_dfm):
    with pytest.raises(ValueError, match="unknown metric 'hamming'"):
        pairsim.compute_pairwise(scenario_dfm, "hamming")


def test_length_sensitivity():
    """Doubling a row changes Euclidean distances but not cosine."""
    units = [
        ("p", {"x": 3, "y": 1}),
        ("q", {"x": 1, "y": 2, "z": 1}),
        ("r", {"z": 4, "y": 1}),
    ]
    doubled = [(u, {t: c * 2 for t, c in counts.items()}) if u == "p" else (u, counts)
               for u, counts in units]
    base = pairsim.build_dfm(units)
    scaled = pairsim.build_dfm(doubled)

    for other in ("q", "r"):
        assert (
            pairsim.compute_pairwise(scaled, "euclidean")["p", other]
            != pairsim.compute_pairwise(base, "euclidean")["p", other]
        )
        assert (
            pairsim.compute_pairwise(scaled, "cosine")["p", other]
            == pairsim.compute_pairwise(base, "cosine")["p", other]
        )


def test_matrix_is_read_only(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm)
    with pytest.raises(ValueError):
        m.values[0, 1] = 99.0


def test_row_lookup(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm)
    row = m.row("B")
    assert list(row) == ["A", "B", "C", "D"]
    assert row["B"] == 0.0
    assert row["D"] == 2.0
    with pytest.raises(KeyError):
        m.row("Z")


def test_cosine_dissimilarity(scenario_dfm):
    sim = pairsim.compute_pairwise(scenario_dfm, "cosine")
    dist = pairsim.cosine_dissimilarity(sim)
    assert dist.kind == "distance"
    assert dist.metric == "cosine_dissimilarity"
    assert np.array_equal(dist.values, dist.values.T)
    assert np.diag(dist.values).tolist() == [0.0] * 4
    assert dist["B", "D"] == pytest.approx(1 - sim["B", "D"])
    # Source matrix untouched
    assert sim.kind == "similarity"


def test_cosine_dissimilarity_of_empty_row():
    dfm = pairsim.build_dfm([
        ("empty", {"a": 0}),
        ("x", {"a": 2, "b": 1}),
        ("y", {"b": 3}),
    ])
    dist = pairsim.cosine_dissimilarity(pairsim.compute_pairwise(dfm, "cosine"))
    assert dist.kind == "distance"
    # An empty row is at distance 1 from everything, itself included
    assert np.diag(dist.values).tolist() == [1.0, 0.0, 0.0]
    assert dist.row("empty") == {"empty": 1.0, "x": 1.0, "y": 1.0}


def test_dissimilarity_requires_similarity(scenario_dfm):
    euc = pairsim.compute_pairwise(scenario_dfm, "euclidean")
    with pytest.raises(ValueError, match="similarity"):
        pairsim.to_dissimilarity(euc)
    jac = pairsim.compute_pairwise(scenario_dfm, "jaccard")
    with pytest.raises(ValueError, match="cosine"):
        pairsim.cosine_dissimilarity(jac)
    assert pairsim.to_dissimilarity(jac).metric == "jaccard_dissimilarity"


def test_map_rejects_shape_change(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm)
    with pytest.raises(ValueError, match="shape"):
        m.map(lambda v: v[:1])


def test_map_keeps_symmetry(scenario_dfm):
    m = pairsim.compute_pairwise(scenario_dfm)
    squared = m.map(np.square)
    assert np.array_equal(squared.values, squared.values.T)
    assert squared["B", "D"] == 4.0
    assert squared.metric == "euclidean"


def test_constructor_validation():
    with pytest.raises(ValueError, match="symmetric"):
        PairwiseMatrix(["a", "b"], [[0, 1], [2, 0]], metric="x", kind="distance")
    with pytest.raises(ValueError, match="finite"):
        PairwiseMatrix(["a", "b"], [[0, np.nan], [np.nan, 0]], metric="x", kind="distance")
    with pytest.raises(ValueError, match="kind"):
        PairwiseMatrix(["a"], [[0]], metric="x", kind="angle")
    with pytest.raises(ValueError, match="shape"):
        PairwiseMatrix(["a"], [[0, 1], [1, 0]], metric="x", kind="distance")


def test_custom_metric(scenario_dfm):
    def overlap(x):
        present = (x > 0).astype(np.int64)
        return (present @ present.T).toarray()

    metric = Metric("overlap", "similarity", overlap, lambda x: np.diff(x.indptr))
    pairsim.register_metric(metric)
    assert pairsim.get_metric("overlap") is metric

    m = pairsim.compute_pairwise(scenario_dfm, "overlap")
    assert m["B", "D"] == 2.0
    assert m["B", "B"] == 3.0


def test_register_rejects_bad_kind():
    with pytest.raises(ValueError, match="kind"):
        pairsim.register_metric(Metric("bad", "angle", lambda x: x, lambda x: x))


def test_bit_identical_repeats(scenario_dfm):
    for metric in ("euclidean", "cosine"):
        first = pairsim.compute_pairwise(scenario_dfm, metric).values
        second = pairsim.compute_pairwise(scenario_dfm, metric).values
        assert first.tobytes() == second.tobytes()
