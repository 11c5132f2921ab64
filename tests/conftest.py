"""Shared fixtures for pairsim tests."""

import pytest

import pairsim

# Five-term vocabulary: B and D share two of B's three terms,
# A and C share none with B.
SCENARIO_UNITS = [
    ("A", {"t4": 1, "t5": 1}),
    ("B", {"t1": 2, "t2": 2, "t3": 1}),
    ("C", {"t5": 2}),
    ("D", {"t1": 1, "t2": 1, "t4": 1}),
]


@pytest.fixture
def scenario_units():
    return [(unit, dict(counts)) for unit, counts in SCENARIO_UNITS]


@pytest.fixture
def scenario_dfm(scenario_units):
    return pairsim.build_dfm(scenario_units)


@pytest.fixture
def speeches():
    """Small corpus keyed by (source, topic)."""
    return {
        ("herald", "economy"): "Markets rallied as the central bank cut interest rates.",
        ("herald", "sport"): "The home team won the cup final in extra time.",
        ("gazette", "economy"): "Interest rates fell and markets rallied on the bank decision.",
        ("gazette", "sport"): "A late goal won the final for the home team.",
        ("courier", "economy"): "The bank held interest rates steady; markets were calm.",
    }
