"""Input adapters: song table, membership lists, exclusions and corrections."""

import json
import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd

logger = logging.getLogger(__name__)


def _require(path: str) -> Path:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return file_path


def load_song_table(path: str) -> pd.DataFrame:
    """Load the song table (CSV, one row per track)."""
    df = pd.read_csv(_require(path))
    logger.info(f"Loaded {len(df)} tracks from {path}")
    return df


def load_membership(path: str) -> Dict[str, List[str]]:
    """Load pen-type membership lists.

    Expects a JSON object mapping category name to a list of track names.
    """
    with open(_require(path), "r", encoding="utf-8") as f:
        membership = json.load(f)

    if not isinstance(membership, dict):
        raise ValueError(f"Membership file must hold a JSON object: {path}")

    membership = {str(cat): [str(tid).strip() for tid in ids] for cat, ids in membership.items()}
    logger.info("Loaded membership lists: "
                + ", ".join(f"{cat}={len(ids)}" for cat, ids in membership.items()))
    return membership


def load_identifier_list(path: str) -> List[str]:
    """Load one track name per line, skipping blanks and # comments."""
    identifiers = []
    with open(_require(path), "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                identifiers.append(line)
    logger.info(f"Loaded {len(identifiers)} identifiers from {path}")
    return identifiers


def load_label_overrides(path: str) -> Dict[str, str]:
    """Load manual label corrections (JSON object track name -> category)."""
    with open(_require(path), "r", encoding="utf-8") as f:
        overrides = json.load(f)
    if not isinstance(overrides, dict):
        raise ValueError(f"Label override file must hold a JSON object: {path}")
    logger.info(f"Loaded {len(overrides)} label overrides from {path}")
    return {str(tid).strip(): str(cat) for tid, cat in overrides.items()}
