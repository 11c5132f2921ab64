"""Pairsim error types."""


class PairsimError(Exception):
    """Base error for all pairsim failures."""


class InvalidTermError(PairsimError):
    """Term is empty or not a string."""


class FrozenFeatureSpaceError(PairsimError):
    """Unseen term interned into a frozen feature space."""


class DuplicateUnitError(PairsimError):
    """Two units share one identifier."""


class EmptyCorpusError(PairsimError):
    """No units to build a matrix from."""


class EmptyFeatureSpaceError(PairsimError):
    """Matrix has no terms, so no metric is defined."""


class InsufficientUnitsError(PairsimError):
    """Fewer than two units to cluster."""


class InvalidGroupingError(PairsimError):
    """Grouping key function produced no usable partitions."""

