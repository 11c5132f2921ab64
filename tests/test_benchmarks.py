"""Benchmark suite for the pairsim pipeline.

Measures matrix building, pairwise metrics and clustering on a synthetic
corpus sized like the primary use case (a few hundred units).

Run:  pytest tests/test_benchmarks.py --benchmark-enable
Skip: pytest tests/ -m "not benchmark"
"""

from __future__ import annotations

import numpy as np
import pytest

import pairsim

pytestmark = pytest.mark.benchmark

N_UNITS = 300
N_TERMS = 5000


@pytest.fixture(scope="module")
def corpus():
    """Zipf-ish sparse counts, fixed seed."""
    rng = np.random.default_rng(42)
    units = []
    for u in range(N_UNITS):
        n_tokens = int(rng.integers(50, 2000))
        ids = np.minimum(rng.zipf(1.3, size=n_tokens), N_TERMS) - 1
        terms, counts = np.unique(ids, return_counts=True)
        units.append((f"doc{u:04d}", {f"w{t}": int(c) for t, c in zip(terms, counts)}))
    return units


@pytest.fixture(scope="module")
def dfm(corpus):
    return pairsim.build_dfm(corpus)


def test_bench_build(benchmark, corpus):
    result = benchmark(pairsim.build_dfm, corpus)
    assert result.n_units == N_UNITS


def test_bench_euclidean(benchmark, dfm):
    result = benchmark(pairsim.compute_pairwise, dfm, "euclidean")
    assert len(result) == N_UNITS


def test_bench_cosine(benchmark, dfm):
    result = benchmark(pairsim.compute_pairwise, dfm, "cosine")
    assert len(result) == N_UNITS


def test_bench_cluster_complete(benchmark, dfm):
    dist = pairsim.cosine_dissimilarity(pairsim.compute_pairwise(dfm, "cosine"))
    tree = benchmark.pedantic(
        pairsim.cluster_hierarchical, args=(dist,), rounds=3, iterations=1,
    )
    assert len(tree.merges) == N_UNITS - 1


def test_bench_extract_pairs(benchmark, dfm):
    sim = pairsim.compute_pairwise(dfm, "cosine")
    pairs = benchmark(pairsim.extract_pairs, sim)
    assert len(pairs) == N_UNITS * (N_UNITS - 1) // 2
