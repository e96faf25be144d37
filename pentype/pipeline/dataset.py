"""Labeled song corpus construction.

Joins the song table (audio features + lyrics) with the three pen-type
membership lists and produces an immutable Corpus. Songs are removed by
identifier, never by row position.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from pentype.pipeline.config import (
    ALBUM_COLUMN,
    AUDIO_FEATURES,
    AUDIO_LABEL_COLUMNS,
    CATEGORIES,
    EMOTION_COLUMNS,
    ID_COLUMN,
    LABEL_COLUMN,
    LEXICAL_DIVERSITY_COLUMN,
    LYRICS_COLUMN,
    SENTIMENT_COLUMN,
)
from pentype.pipeline.errors import DataIntegrityError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: List[str] = [ID_COLUMN, ALBUM_COLUMN, LYRICS_COLUMN] + AUDIO_FEATURES


@dataclass(frozen=True)
class Song:
    """A single labeled song."""

    identifier: str
    album: str
    audio: Mapping[str, float]
    lyrics: str
    label: str
    lexical_diversity: Optional[float] = None
    sentiment: Optional[float] = None
    emotions: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True, eq=False)
class Corpus:
    """Ordered, immutable collection of labeled songs.

    The backing DataFrame is never handed out directly; transformations
    return a new Corpus.
    """

    _frame: pd.DataFrame = field(repr=False)

    def __post_init__(self):
        frame = self._frame.reset_index(drop=True).copy()
        object.__setattr__(self, "_frame", frame)

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"Corpus(n_songs={len(self)}, columns={list(self._frame.columns)})"

    @property
    def frame(self) -> pd.DataFrame:
        """Copy of the underlying table."""
        return self._frame.copy()

    @property
    def identifiers(self) -> List[str]:
        return self._frame[ID_COLUMN].tolist()

    @property
    def labels(self) -> np.ndarray:
        return self._frame[LABEL_COLUMN].to_numpy(dtype=object)

    @property
    def lyrics(self) -> List[str]:
        return self._frame[LYRICS_COLUMN].tolist()

    def has_columns(self, columns: Iterable[str]) -> bool:
        return all(col in self._frame.columns for col in columns)

    def feature_frame(self, columns: Sequence[str]) -> pd.DataFrame:
        """Select named feature columns (copy)."""
        missing = [col for col in columns if col not in self._frame.columns]
        if missing:
            raise KeyError(f"Corpus has no columns: {missing}")
        return self._frame[list(columns)].copy()

    def with_columns(self, columns: Mapping[str, Sequence]) -> "Corpus":
        """Return a new Corpus with the given columns added or replaced."""
        frame = self._frame.copy()
        for name, values in columns.items():
            if len(values) != len(frame):
                raise ValueError(
                    f"Column '{name}' has {len(values)} values for {len(frame)} songs"
                )
            frame[name] = list(values)
        return Corpus(frame)

    def song(self, index: int) -> Song:
        row = self._frame.iloc[index]

        def optional(column):
            if column not in self._frame.columns or pd.isna(row[column]):
                return None
            return float(row[column])

        emotions = None
        if self.has_columns(EMOTION_COLUMNS):
            emotions = tuple(int(row[col]) for col in EMOTION_COLUMNS)

        return Song(
            identifier=row[ID_COLUMN],
            album=row[ALBUM_COLUMN],
            audio={name: float(row[name]) for name in AUDIO_FEATURES},
            lyrics=row[LYRICS_COLUMN],
            label=row[LABEL_COLUMN],
            lexical_diversity=optional(LEXICAL_DIVERSITY_COLUMN),
            sentiment=optional(SENTIMENT_COLUMN),
            emotions=emotions,
        )

    def songs(self) -> Iterator[Song]:
        for index in range(len(self)):
            yield self.song(index)


def assign_labels(
    identifiers: Iterable[str],
    membership: Mapping[str, Iterable[str]],
    label_overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Map each identifier to exactly one pen type.

    Args:
        identifiers: Songs present in the table
        membership: Category name -> identifiers listed under it
        label_overrides: Manual corrections, identifier -> category. An
            override replaces whatever the membership lists say.

    Returns:
        Dict mapping identifier to category

    Raises:
        DataIntegrityError: Unknown category, a song listed under more than
            one category, or a table song with no category
    """
    unknown = sorted(set(membership) - set(CATEGORIES))
    if label_overrides:
        unknown += sorted(set(label_overrides.values()) - set(CATEGORIES) - set(unknown))
    if unknown:
        raise DataIntegrityError("Unknown pen-type categories", unknown)

    listed: Dict[str, List[str]] = {}
    for category in CATEGORIES:
        for identifier in membership.get(category, ()):
            categories = listed.setdefault(identifier, [])
            if category not in categories:
                categories.append(category)

    for identifier, category in (label_overrides or {}).items():
        listed[identifier] = [category]

    identifiers = list(identifiers)
    present = set(identifiers)

    conflicts = sorted(tid for tid, cats in listed.items() if len(cats) > 1 and tid in present)
    if conflicts:
        raise DataIntegrityError("Songs listed under more than one pen type", conflicts)

    stray = sorted(set(listed) - present)
    if stray:
        logger.warning(f"{len(stray)} membership entries have no matching song: {stray}")

    unlabeled = [tid for tid in identifiers if tid not in listed]
    if unlabeled:
        raise DataIntegrityError("Songs without a pen-type label", unlabeled)

    return {tid: listed[tid][0] for tid in identifiers}


def build_corpus(
    table: pd.DataFrame,
    membership: Mapping[str, Iterable[str]],
    exclude: Iterable[str] = (),
    label_overrides: Optional[Mapping[str, str]] = None,
) -> Corpus:
    """Build the labeled corpus from the raw song table.

    Args:
        table: One row per track (identifier, album, audio features, lyrics)
        membership: Category name -> identifiers
        exclude: Identifiers to drop (remixes, voice memos, ...)
        label_overrides: Manual label corrections, identifier -> category

    Returns:
        Immutable Corpus with a label column

    Raises:
        DataIntegrityError: Missing columns or labeling problems
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in table.columns]
    if missing:
        raise DataIntegrityError("Song table is missing required columns", missing)

    keep = [col for col in REQUIRED_COLUMNS + AUDIO_LABEL_COLUMNS if col in table.columns]
    df = table[keep].copy()
    df[ID_COLUMN] = df[ID_COLUMN].astype(str).str.strip()

    excluded = set(exclude)
    if excluded:
        before = len(df)
        df = df[~df[ID_COLUMN].isin(excluded)].copy()
        logger.info(f"Excluded {before - len(df)} songs by identifier")

    duplicated = df[ID_COLUMN].duplicated(keep="first")
    if duplicated.any():
        logger.info(f"Dropping {int(duplicated.sum())} duplicate tracks: "
                    f"{sorted(df.loc[duplicated, ID_COLUMN].unique())}")
        df = df[~duplicated].copy()

    for col in AUDIO_FEATURES:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    df[LYRICS_COLUMN] = df[LYRICS_COLUMN].fillna("").astype(str)

    labels = assign_labels(df[ID_COLUMN], membership, label_overrides)
    df[LABEL_COLUMN] = df[ID_COLUMN].map(labels)

    counts = df[LABEL_COLUMN].value_counts()
    logger.info(f"Built corpus of {len(df)} songs: "
                + ", ".join(f"{cat}={int(counts.get(cat, 0))}" for cat in CATEGORIES))

    return Corpus(df)
