"""Classifier evaluation: confusion matrix, error rate and majority baseline."""

import logging
from typing import Any, Dict, Iterable, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix as sk_confusion_matrix

from pentype.pipeline.config import CATEGORIES, LABEL_COLUMN

logger = logging.getLogger(__name__)

Prediction = Union[str, Sequence[str]]


def resolve_prediction(predicted: Prediction, truth: str) -> str:
    """Collapse a (possibly tied) prediction to one label.

    A tied vote counts as the true label when the true label is among the
    tied ones, otherwise as the first tied label.
    """
    if isinstance(predicted, str):
        return predicted
    predicted = tuple(predicted)
    if truth in predicted:
        return truth
    return predicted[0]


def is_correct(predicted: Prediction, truth: str) -> bool:
    """Exact match for single labels, membership for tied label sets."""
    if predicted is None:
        return False
    if isinstance(predicted, str):
        return predicted == truth
    return truth in tuple(predicted)


def confusion_matrix(predicted: Iterable[Prediction], truth: Iterable[str]) -> pd.DataFrame:
    """Count (predicted, true) pairs.

    Args:
        predicted: Label or tuple of tied labels per song
        truth: True label per song

    Returns:
        DataFrame with predicted categories as rows and true categories as
        columns; every category appears on both axes
    """
    truth = list(truth)
    resolved = [resolve_prediction(pred, true) for pred, true in zip(predicted, truth)]
    if len(resolved) != len(truth):
        raise ValueError(f"{len(resolved)} predictions for {len(truth)} songs")

    if truth:
        # sklearn puts true labels on rows
        counts = sk_confusion_matrix(truth, resolved, labels=list(CATEGORIES)).T
    else:
        counts = np.zeros((len(CATEGORIES), len(CATEGORIES)), dtype=int)

    return pd.DataFrame(
        counts,
        index=pd.Index(CATEGORIES, name="predicted"),
        columns=pd.Index(CATEGORIES, name="true"),
    )


def error_rate(correct: Iterable[bool]) -> float:
    """(N - correct) / N; 0 for an empty input."""
    correct = np.asarray(list(correct), dtype=bool)
    if correct.size == 0:
        return 0.0
    return float((correct.size - correct.sum()) / correct.size)


def majority_category(truth: Iterable[str]) -> str:
    """Most frequent true label (category order breaks ties)."""
    counts = pd.Series(list(truth)).value_counts()
    return max(CATEGORIES, key=lambda cat: (counts.get(cat, 0), -CATEGORIES.index(cat)))


def baseline_error(truth: Iterable[str]) -> float:
    """Error rate of always predicting the most frequent category."""
    truth = list(truth)
    if not truth:
        return 0.0
    majority = majority_category(truth)
    return error_rate(label == majority for label in truth)


def evaluate_predictions(results: pd.DataFrame, name: str = "classifier") -> Dict[str, Any]:
    """Score a classifier's per-song output.

    Args:
        results: Frame with pen, predicted and correct columns (as produced
            by classify_by_neighbors or predict_corpus). Rows whose
            prediction is None are unscored and left out.
        name: Label used in log messages

    Returns:
        Dict with confusion_matrix, error_rate, baseline_error, n_songs,
        n_correct and n_unscored
    """
    scored = results[results["predicted"].notna()]
    truth = scored[LABEL_COLUMN].tolist()
    correct = [is_correct(pred, true) for pred, true in zip(scored["predicted"], truth)]

    evaluation = {
        "confusion_matrix": confusion_matrix(scored["predicted"], truth),
        "error_rate": error_rate(correct),
        "baseline_error": baseline_error(truth),
        "n_songs": len(scored),
        "n_correct": int(sum(correct)),
        "n_unscored": len(results) - len(scored),
    }
    logger.info(f"{name}: error rate {evaluation['error_rate']:.3f} "
                f"(baseline {evaluation['baseline_error']:.3f}, n={evaluation['n_songs']})")
    return evaluation
