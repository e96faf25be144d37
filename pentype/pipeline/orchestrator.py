#!/usr/bin/env python3
"""Pipeline orchestration for pen-type classification.

This module provides high-level orchestration functions that coordinate all steps
of the analysis pipeline: corpus construction, lyric features, similarity,
classification and evaluation.

Used by run_analysis.py CLI for batch processing.
"""

import logging
import pickle
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

import pandas as pd

from pentype.interpretability.feature_importance import explore_features
from pentype.pipeline import config
from pentype.pipeline.dataset import build_corpus
from pentype.pipeline.errors import ScoringIssue
from pentype.pipeline.evaluation import evaluate_predictions
from pentype.pipeline.lyric_features import EmotionLexicon, annotate_corpus
from pentype.pipeline.neighbors import classify_by_neighbors
from pentype.pipeline.similarity import angular_distance_matrix, cosine_similarity_matrix, degenerate_rows
from pentype.pipeline.tree import fit_tree, predict_corpus
from pentype.pipeline.vectorizer import build_term_matrix

logger = logging.getLogger(__name__)

CLASSIFIERS = ["lyric_knn", "emotion_knn", "tree"]


def _degenerate_issues(features, identifiers, stage: str, reason: str):
    return [ScoringIssue(identifiers[i], stage, reason) for i in degenerate_rows(features)]


def run_full_pipeline(
    table: pd.DataFrame,
    membership: Mapping[str, Iterable[str]],
    exclude: Iterable[str] = (),
    label_overrides: Optional[Mapping[str, str]] = None,
    emotion_lexicon: Optional[EmotionLexicon] = None,
    k: int = config.DEFAULT_NEIGHBOR_PARAMS["k"],
    tree_params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Run the complete classification pipeline.

    Args:
        table: Song table (identifier, album, audio features, lyrics)
        membership: Pen type -> track names
        exclude: Track names to drop before labeling
        label_overrides: Manual label corrections
        emotion_lexicon: NRC lexicon (word -> emotions); optional
        k: Neighbors per vote
        tree_params: Overrides for config.DEFAULT_TREE_PARAMS

    Returns:
        Results dict with corpus, per-classifier predictions, evaluations,
        fitted tree, exploration output, issues and metadata

    Raises:
        DataIntegrityError: Labeling problems (nothing else runs)
        InsufficientDataError: Too few songs for the neighbor search
    """
    logger.info(f"Starting pipeline: {len(table)} tracks, k={k}")

    # =========================================================================
    # STEP 1: Build labeled corpus
    # =========================================================================
    print("\n[1/5] Building labeled corpus...")
    corpus = build_corpus(table, membership, exclude=exclude, label_overrides=label_overrides)
    print(f"  ✓ {len(corpus)} labeled songs")

    # =========================================================================
    # STEP 2: Lyric features
    # =========================================================================
    print("\n[2/5] Extracting lyric features...")
    term_matrix = build_term_matrix(corpus.lyrics)
    corpus = annotate_corpus(corpus, term_matrix, emotion_lexicon=emotion_lexicon)
    print(f"  ✓ {term_matrix.shape[1]} stems, sentiment and emotions for {len(corpus)} songs")

    identifiers = corpus.identifiers
    issues = []

    # =========================================================================
    # STEP 3: Nearest-neighbor classifiers
    # =========================================================================
    print(f"\n[3/5] Running {k}-NN classifiers...")
    issues += _degenerate_issues(term_matrix.counts, identifiers, "lyric_knn", "no stems in lyrics")
    lyric_similarity = cosine_similarity_matrix(term_matrix.counts, identifiers)
    lyric_neighbors = classify_by_neighbors(corpus, lyric_similarity, k=k)

    emotion_features = corpus.feature_frame(config.EMOTION_COLUMNS).to_numpy(dtype=float)
    issues += _degenerate_issues(emotion_features, identifiers, "emotion_knn", "no emotion words")
    emotion_distance = angular_distance_matrix(emotion_features, identifiers)
    emotion_neighbors = classify_by_neighbors(corpus, emotion_distance, k=k)
    print(f"  ✓ Lyric similarity: {int(lyric_neighbors['correct'].sum())}/{len(corpus)} correct")
    print(f"  ✓ Emotion profile: {int(emotion_neighbors['correct'].sum())}/{len(corpus)} correct")

    # =========================================================================
    # STEP 4: Decision tree
    # =========================================================================
    print("\n[4/5] Fitting decision tree...")
    tree, tree_issues = fit_tree(
        corpus.feature_frame(config.TREE_FEATURES),
        corpus.labels,
        features=config.TREE_FEATURES,
        identifiers=identifiers,
        **(tree_params or {}),
    )
    issues += tree_issues
    tree_predictions = predict_corpus(tree, corpus)
    print(f"  ✓ {tree.n_leaves} leaves, depth {tree.depth}")

    # =========================================================================
    # STEP 5: Evaluation + exploration
    # =========================================================================
    print("\n[5/5] Evaluating classifiers...")
    predictions = {
        "lyric_knn": lyric_neighbors,
        "emotion_knn": emotion_neighbors,
        "tree": tree_predictions,
    }
    evaluations = {name: evaluate_predictions(frame, name) for name, frame in predictions.items()}
    for name in CLASSIFIERS:
        print(f"  ✓ {name}: error {evaluations[name]['error_rate']:.3f} "
              f"(baseline {evaluations[name]['baseline_error']:.3f})")

    exploration = explore_features(corpus.frame)

    if issues:
        logger.warning(f"{len(issues)} scoring issues recorded")
        for issue in issues:
            logger.warning(f"  {issue.stage}: {issue.identifier} ({issue.reason})")

    return {
        "corpus": corpus,
        "term_matrix": term_matrix,
        "lyric_similarity": lyric_similarity,
        "emotion_distance": emotion_distance,
        "lyric_neighbors": lyric_neighbors,
        "emotion_neighbors": emotion_neighbors,
        "tree": tree,
        "tree_predictions": tree_predictions,
        "evaluations": evaluations,
        "exploration": exploration,
        "issues": issues,
        "metadata": {
            "n_songs": len(corpus),
            "vocabulary_size": term_matrix.shape[1],
            "k": k,
            "timestamp": datetime.now().isoformat(),
        },
    }


def summarize(results: Dict[str, Any]) -> pd.DataFrame:
    """One row per classifier with error rate, baseline and counts."""
    rows = []
    for name in CLASSIFIERS:
        evaluation = results["evaluations"][name]
        rows.append({
            "classifier": name,
            "error_rate": evaluation["error_rate"],
            "baseline_error": evaluation["baseline_error"],
            "n_songs": evaluation["n_songs"],
            "n_correct": evaluation["n_correct"],
            "n_unscored": evaluation["n_unscored"],
        })
    return pd.DataFrame(rows)


def build_song_table(results: Dict[str, Any]) -> pd.DataFrame:
    """Per-song derived features plus every classifier's prediction."""
    df = results["corpus"].frame.drop(columns=[config.LYRICS_COLUMN])

    for name, key in [("lyric_knn", "lyric_neighbors"), ("emotion_knn", "emotion_neighbors")]:
        frame = results[key]
        df[f"{name}_neighbors"] = frame["neighbors"].map("|".join).to_numpy()
        df[f"{name}_predicted"] = frame["predicted"].map("|".join).to_numpy()
        df[f"{name}_correct"] = frame["correct"].to_numpy()

    tree_frame = results["tree_predictions"]
    df["tree_predicted"] = tree_frame["predicted"].to_numpy()
    df["tree_correct"] = tree_frame["correct"].to_numpy()
    for cat in config.CATEGORIES:
        df[f"tree_prob_{cat}"] = tree_frame[f"prob_{cat}"].to_numpy()
    return df


def save_analysis_data(results: Dict[str, Any], output_dir: Optional[str] = None) -> Path:
    """Save results for reporting.

    Writes analysis_data.pkl (full results), songs.csv (per-song features
    and predictions), summary.csv, tree.csv and one confusion matrix CSV
    per classifier.

    Args:
        results: Results dict from run_full_pipeline()
        output_dir: Destination directory (config default when omitted)

    Returns:
        Output directory path
    """
    out = Path(output_dir or config.get_output_dir())
    out.mkdir(parents=True, exist_ok=True)
    logger.info(f"Saving analysis data to {out}")

    with open(out / "analysis_data.pkl", "wb") as f:
        pickle.dump(results, f)

    build_song_table(results).to_csv(out / "songs.csv", index=False)
    summarize(results).to_csv(out / "summary.csv", index=False)
    results["tree"].to_frame().to_csv(out / "tree.csv", index=False)
    for name in CLASSIFIERS:
        results["evaluations"][name]["confusion_matrix"].to_csv(out / f"confusion_{name}.csv")

    if results["issues"]:
        pd.DataFrame([asdict(issue) for issue in results["issues"]]).to_csv(out / "issues.csv", index=False)

    print(f"  ✓ Saved to {out}")
    return out
