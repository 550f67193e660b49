"""Failure taxonomy for the aggregation cycle."""

from __future__ import annotations


class AggregationError(Exception):
    """Base class for failures raised by the aggregation pipeline."""


class RetrievalFailure(AggregationError):
    """Remote snapshot source unreachable, failing, or too slow."""


class DecodeFailure(AggregationError):
    """One artifact could not be decoded into a key-value tree."""


class IncompleteRecord(AggregationError):
    """A decoded tree lacks the save-state section or a usable timestamp."""


class PersistenceFailure(AggregationError):
    """Writing history or leaderboard to durable storage failed."""


class CycleInProgress(AggregationError):
    """Another update cycle already holds the single-flight lock."""


__all__ = [
    "AggregationError",
    "CycleInProgress",
    "DecodeFailure",
    "IncompleteRecord",
    "PersistenceFailure",
    "RetrievalFailure",
]
