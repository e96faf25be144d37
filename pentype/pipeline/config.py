#!/usr/bin/env python3
"""Centralized configuration for the pen-type analysis pipeline.

This module provides a single source of truth for all configuration settings
used across the CLI (run_analysis.py) and the pipeline stages.
Environment variables (optionally loaded from .env by the CLI) override the
default input/output locations.
"""

import os
from typing import Dict, Any, List, Tuple

# =============================================================================
# CATEGORIES
# =============================================================================

# The three pen types, in tie-break order
CATEGORIES: Tuple[str, ...] = ("quill", "fountain", "glitter_gel")


# =============================================================================
# DATASET SCHEMA
# =============================================================================

ID_COLUMN = "track_name"
ALBUM_COLUMN = "album"
LYRICS_COLUMN = "lyrics"
LABEL_COLUMN = "pen"

# Numeric audio features from the streaming catalog (explicit is a 0/1 flag)
AUDIO_FEATURES: List[str] = [
    "danceability",
    "energy",
    "key",
    "loudness",
    "mode",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
    "time_signature",
    "duration_ms",
    "explicit",
]

# Human-readable key/mode labels, carried through when present
AUDIO_LABEL_COLUMNS: List[str] = ["key_name", "mode_name"]

# Derived lyric columns
LEXICAL_DIVERSITY_COLUMN = "lexical_diversity"
SENTIMENT_COLUMN = "sentiment"

# Tree features: audio + lexical diversity + sentiment (never the emotion vector)
TREE_FEATURES: List[str] = AUDIO_FEATURES + [LEXICAL_DIVERSITY_COLUMN, SENTIMENT_COLUMN]


# =============================================================================
# EMOTION LEXICON
# =============================================================================

# NRC word-emotion association categories (positive/negative are ignored)
EMOTIONS: List[str] = [
    "anger",
    "anticipation",
    "disgust",
    "fear",
    "joy",
    "sadness",
    "surprise",
    "trust",
]

EMOTION_COLUMNS: List[str] = [f"emotion_{name}" for name in EMOTIONS]


# =============================================================================
# CLASSIFIER CONFIGURATION
# =============================================================================

DEFAULT_NEIGHBOR_PARAMS: Dict[str, Any] = {
    "k": 2,
}

# Deviance (entropy) splitting, no pruning
DEFAULT_TREE_PARAMS: Dict[str, Any] = {
    "criterion": "entropy",
    "min_samples_split": 10,
    "min_samples_leaf": 5,
    "min_impurity_decrease": 1e-9,
    "random_state": 0,
}

DEFAULT_PCA_COMPONENTS = 5


# =============================================================================
# INPUT / OUTPUT PATHS
# =============================================================================

DEFAULT_INPUT_PATHS: Dict[str, str] = {
    "songs": "data/songs.csv",
    "membership": "data/membership.json",
    "exclude": "data/exclude.txt",
    "overrides": "data/label_overrides.json",
    "lexicon": "data/NRC-Emotion-Lexicon-Wordlevel-v0.92.txt",
}

DEFAULT_OUTPUT_DIR = "outputs"


def get_input_paths() -> Dict[str, str]:
    """Get input file locations, honoring PENTYPE_<NAME>_PATH overrides.

    Returns:
        Dict mapping input name ("songs", "membership", ...) to a path
    """
    return {
        name: os.getenv(f"PENTYPE_{name.upper()}_PATH", default)
        for name, default in DEFAULT_INPUT_PATHS.items()
    }


def get_output_dir() -> str:
    """Get output directory (PENTYPE_OUTPUT_DIR or the default)."""
    return os.getenv("PENTYPE_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
