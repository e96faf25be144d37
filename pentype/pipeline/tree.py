"""Decision tree classification over audio and lyric features.

The tree is grown greedily with scikit-learn (entropy/deviance splits, no
pruning) and then frozen into plain TreeNode records so it can be walked,
rendered and queried without the estimator. A song goes left when
feature_value < threshold.

The tree is fit and evaluated on the same songs, so its error rate is an
in-sample figure.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.tree import DecisionTreeClassifier

from pentype.pipeline.config import (
    CATEGORIES,
    DEFAULT_TREE_PARAMS,
    ID_COLUMN,
    LABEL_COLUMN,
    TREE_FEATURES,
)
from pentype.pipeline.dataset import Corpus
from pentype.pipeline.errors import InsufficientDataError, ScoringIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeNode:
    """One node of a fitted tree.

    Internal nodes carry feature/threshold and both children; leaves carry
    neither. Every node keeps the training label counts that reached it.
    """

    counts: Tuple[int, ...]
    n_samples: int
    feature: Optional[str] = None
    threshold: Optional[float] = None
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    @property
    def distribution(self) -> Dict[str, int]:
        return dict(zip(CATEGORIES, self.counts))

    @property
    def probabilities(self) -> np.ndarray:
        total = sum(self.counts)
        if total == 0:
            return np.zeros(len(CATEGORIES))
        return np.array(self.counts, dtype=float) / total

    @property
    def label(self) -> str:
        # argmax returns the first maximum, i.e. category order on ties
        return CATEGORIES[int(np.argmax(self.counts))]


@dataclass(frozen=True)
class ClassificationTree:
    """Immutable fitted tree."""

    root: TreeNode
    features: Tuple[str, ...]

    def leaf_for(self, values: Dict[str, float]) -> TreeNode:
        """Route one song (feature name -> value) from the root to a leaf."""
        node = self.root
        while not node.is_leaf:
            # compare at the float32 precision the splitter used
            if np.float32(values[node.feature]) < node.threshold:
                node = node.left
            else:
                node = node.right
        return node

    def predict_proba(self, frame: pd.DataFrame) -> np.ndarray:
        """Leaf label proportions per row, columns in category order."""
        records = frame[list(self.features)].to_dict("records")
        return np.array([self.leaf_for(rec).probabilities for rec in records]).reshape(
            len(records), len(CATEGORIES)
        )

    def predict(self, frame: pd.DataFrame) -> List[str]:
        records = frame[list(self.features)].to_dict("records")
        return [self.leaf_for(rec).label for rec in records]

    def nodes(self) -> Iterator[TreeNode]:
        """Pre-order walk."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if not node.is_leaf:
                stack.append(node.right)
                stack.append(node.left)

    @property
    def n_leaves(self) -> int:
        return sum(1 for node in self.nodes() if node.is_leaf)

    @property
    def depth(self) -> int:
        def _depth(node):
            if node.is_leaf:
                return 0
            return 1 + max(_depth(node.left), _depth(node.right))
        return _depth(self.root)

    def to_frame(self) -> pd.DataFrame:
        """One row per node (pre-order) for rendering.

        Columns: node, parent, depth, feature, threshold, n_samples, label
        and one count column per category.
        """
        rows = []
        stack = [(self.root, None, 0)]
        while stack:
            node, parent, depth = stack.pop()
            node_id = len(rows)
            row = {
                "node": node_id,
                "parent": parent,
                "depth": depth,
                "feature": node.feature,
                "threshold": node.threshold,
                "n_samples": node.n_samples,
                "label": node.label,
            }
            row.update(node.distribution)
            rows.append(row)
            if not node.is_leaf:
                stack.append((node.right, node_id, depth + 1))
                stack.append((node.left, node_id, depth + 1))
        return pd.DataFrame(rows)


def _freeze(estimator: DecisionTreeClassifier, features: Sequence[str]) -> TreeNode:
    """Convert a fitted sklearn tree into TreeNode records."""
    tree = estimator.tree_
    class_index = [list(estimator.classes_).index(cat) if cat in estimator.classes_ else None
                   for cat in CATEGORIES]

    def build(node_id: int) -> TreeNode:
        n_samples = int(tree.n_node_samples[node_id])
        value = tree.value[node_id][0]
        # newer sklearn stores fractions, older stores counts
        scaled = value / value.sum() * n_samples if value.sum() > 0 else value
        counts = tuple(int(round(scaled[idx])) if idx is not None else 0 for idx in class_index)

        left_id = tree.children_left[node_id]
        if left_id == -1:
            return TreeNode(counts=counts, n_samples=n_samples)

        return TreeNode(
            counts=counts,
            n_samples=n_samples,
            feature=features[tree.feature[node_id]],
            threshold=float(tree.threshold[node_id]),
            left=build(left_id),
            right=build(tree.children_right[node_id]),
        )

    return build(0)


def fit_tree(
    frame: pd.DataFrame,
    labels: Sequence[str],
    features: Sequence[str] = TREE_FEATURES,
    identifiers: Optional[Sequence[str]] = None,
    **params,
) -> Tuple[ClassificationTree, List[ScoringIssue]]:
    """Grow an unpruned classification tree.

    Args:
        frame: Feature table, one row per song
        labels: Pen type per row
        features: Feature columns to split on
        identifiers: Song names used when reporting unusable rows
        **params: Overrides for config.DEFAULT_TREE_PARAMS

    Returns:
        Tuple of (fitted tree, issues for rows left out of training)
    """
    tree_params = {**DEFAULT_TREE_PARAMS, **params}
    features = list(features)
    labels = np.asarray(labels, dtype=object)
    if identifiers is None:
        identifiers = [str(i) for i in range(len(frame))]

    values = frame[features].to_numpy(dtype=float)
    usable = np.isfinite(values).all(axis=1)

    issues = []
    for i in np.flatnonzero(~usable):
        bad = [features[j] for j in np.flatnonzero(~np.isfinite(values[i]))]
        issues.append(ScoringIssue(identifiers[i], "tree", f"non-finite features: {bad}"))
    if issues:
        logger.warning(f"Leaving {len(issues)} songs out of tree training: "
                       f"{[issue.identifier for issue in issues]}")

    if not usable.any():
        raise InsufficientDataError("No songs with complete features to fit the tree")

    logger.info(f"Fitting decision tree on {int(usable.sum())} songs x {len(features)} features "
                f"(criterion={tree_params['criterion']})")
    estimator = DecisionTreeClassifier(**tree_params)
    estimator.fit(values[usable], labels[usable])

    tree = ClassificationTree(root=_freeze(estimator, features), features=tuple(features))
    logger.info(f"Tree has {tree.n_leaves} leaves, depth {tree.depth}")
    return tree, issues


def predict_corpus(tree: ClassificationTree, corpus: Corpus) -> pd.DataFrame:
    """Predict every song in the corpus.

    Returns:
        DataFrame with track_name, pen, prob_<category> columns, predicted
        (None for songs with missing features) and correct
    """
    frame = corpus.feature_frame(tree.features)
    usable = np.isfinite(frame.to_numpy(dtype=float)).all(axis=1)

    results = pd.DataFrame({ID_COLUMN: corpus.identifiers, LABEL_COLUMN: corpus.labels})
    proba = np.full((len(frame), len(CATEGORIES)), np.nan)
    predicted: List[Optional[str]] = [None] * len(frame)

    if usable.any():
        scored = frame[usable]
        proba[usable] = tree.predict_proba(scored)
        for i, label in zip(np.flatnonzero(usable), tree.predict(scored)):
            predicted[i] = label

    for j, cat in enumerate(CATEGORIES):
        results[f"prob_{cat}"] = proba[:, j]
    results["predicted"] = pd.Series(predicted, dtype=object)
    results["correct"] = [pred is not None and pred == truth
                          for pred, truth in zip(predicted, results[LABEL_COLUMN])]
    return results
