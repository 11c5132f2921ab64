"""Pairsim: document-feature matrices, pairwise text similarity and clustering."""

from __future__ import annotations

import logging

from ._cluster import LINKAGES, Dendrogram, cluster_hierarchical
from ._dfm import (
    DocumentFeatureMatrix,
    align_dfm,
    build_dfm,
    group_dfm,
    trim_dfm,
)
from ._errors import (
    DuplicateUnitError,
    EmptyCorpusError,
    EmptyFeatureSpaceError,
    FrozenFeatureSpaceError,
    InsufficientUnitsError,
    InvalidGroupingError,
    InvalidTermError,
    PairsimError,
)
from ._features import FeatureSpace
from ._pairs import extract_pairs, partition_pairs
from ._pairwise import (
    Metric,
    PairwiseMatrix,
    compute_pairwise,
    cosine_dissimilarity,
    get_metric,
    register_metric,
    to_dissimilarity,
)
from ._stop_words import STOP_WORDS
from ._tokenizer import Tokenizer
from ._types import MergeNode, PairRecord

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "align_dfm",
    "build_dfm",
    "cluster_hierarchical",
    "compute_pairwise",
    "cosine_dissimilarity",
    "extract_pairs",
    "get_metric",
    "group_dfm",
    "partition_pairs",
    "register_metric",
    "to_dissimilarity",
    "trim_dfm",
    "Dendrogram",
    "DocumentFeatureMatrix",
    "DuplicateUnitError",
    "EmptyCorpusError",
    "EmptyFeatureSpaceError",
    "FeatureSpace",
    "FrozenFeatureSpaceError",
    "InsufficientUnitsError",
    "InvalidGroupingError",
    "InvalidTermError",
    "LINKAGES",
    "MergeNode",
    "Metric",
    "PairRecord",
    "PairsimError",
    "PairwiseMatrix",
    "STOP_WORDS",
    "Tokenizer",
]
