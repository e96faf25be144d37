"""Exceptions and data-quality records raised by the pipeline."""

from dataclasses import dataclass
from typing import Iterable, List


class PipelineError(Exception):
    """Base class for pipeline failures."""


class DataIntegrityError(PipelineError):
    """Dataset construction found a labeling or schema problem.

    Args:
        message: Human-readable description
        identifiers: Songs (or columns) responsible for the failure
    """

    def __init__(self, message: str, identifiers: Iterable[str] = ()):
        self.identifiers: List[str] = list(identifiers)
        if self.identifiers:
            message = f"{message}: {', '.join(self.identifiers)}"
        super().__init__(message)


class InsufficientDataError(PipelineError):
    """Not enough songs to run a classifier."""


class DegenerateVectorWarning(UserWarning):
    """A song's feature vector is all zeros."""


@dataclass(frozen=True)
class ScoringIssue:
    """A song that could not be scored normally by one stage."""

    identifier: str
    stage: str
    reason: str
