#!/usr/bin/env python3
"""
Lyric Feature Annotation

Derives per-song lyric features:
- Lexical diversity: type-token ratio over the song's stem counts
- Sentiment: sum of VADER word polarities over raw (unstemmed) tokens
- Emotions: NRC word-emotion association counts for 8 emotions

All functions are pure; annotate_corpus returns a new Corpus.
"""

import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from pentype.pipeline.config import (
    EMOTION_COLUMNS,
    EMOTIONS,
    LEXICAL_DIVERSITY_COLUMN,
    SENTIMENT_COLUMN,
)
from pentype.pipeline.dataset import Corpus
from pentype.pipeline.vectorizer import TermMatrix, tokenize

logger = logging.getLogger(__name__)

EmotionLexicon = Mapping[str, FrozenSet[str]]

_polarity_lexicon: Optional[Dict[str, float]] = None


def get_polarity_lexicon() -> Dict[str, float]:
    """VADER word -> polarity mapping (loaded once)."""
    global _polarity_lexicon
    if _polarity_lexicon is None:
        _polarity_lexicon = dict(SentimentIntensityAnalyzer().lexicon)
        logger.info(f"Loaded VADER polarity lexicon ({len(_polarity_lexicon)} words)")
    return _polarity_lexicon


def type_token_ratio(term_matrix: TermMatrix) -> np.ndarray:
    """Distinct stems / total stem occurrences, per song (0 for empty rows)."""
    counts = term_matrix.counts
    totals = np.asarray(counts.sum(axis=1)).ravel().astype(float)
    distinct = np.diff(counts.indptr).astype(float)

    ratio = np.zeros_like(totals)
    nonzero = totals > 0
    ratio[nonzero] = distinct[nonzero] / totals[nonzero]
    return ratio


def sentiment_score(text: str, lexicon: Optional[Mapping[str, float]] = None) -> float:
    """Net polarity of the lyrics, rounded to 2 decimals.

    Args:
        text: Raw lyrics
        lexicon: word -> polarity; defaults to the VADER lexicon

    Returns:
        Signed score, positive means net positive wording
    """
    if lexicon is None:
        lexicon = get_polarity_lexicon()
    total = sum(lexicon.get(token, 0.0) for token in tokenize(text))
    return round(float(total), 2)


def load_emotion_lexicon(path: str) -> Dict[str, FrozenSet[str]]:
    """Load the NRC word-level emotion lexicon.

    Expects the tab-separated "word<TAB>emotion<TAB>0|1" layout. Only the
    eight emotions in config.EMOTIONS are kept.

    Args:
        path: Path to the lexicon file

    Returns:
        Dict mapping word to the set of emotions it is associated with
    """
    lexicon_path = Path(path)
    if not lexicon_path.exists():
        raise FileNotFoundError(f"Emotion lexicon not found: {path}")

    df = pd.read_csv(
        lexicon_path,
        sep="\t",
        header=None,
        names=["word", "emotion", "association"],
        keep_default_na=False,
    )
    df = df[(df["association"].astype(int) == 1) & (df["emotion"].isin(EMOTIONS))]

    lexicon = {
        word: frozenset(group["emotion"])
        for word, group in df.groupby("word", sort=True)
    }
    logger.info(f"Loaded emotion lexicon: {len(lexicon)} words from {path}")
    return lexicon


def emotion_scores(text: str, lexicon: EmotionLexicon) -> List[int]:
    """Count tokens associated with each emotion, in config.EMOTIONS order."""
    scores = dict.fromkeys(EMOTIONS, 0)
    for token in tokenize(text):
        for emotion in lexicon.get(token, ()):
            if emotion in scores:
                scores[emotion] += 1
    return [scores[emotion] for emotion in EMOTIONS]


def annotate_corpus(
    corpus: Corpus,
    term_matrix: TermMatrix,
    emotion_lexicon: Optional[EmotionLexicon] = None,
    polarity_lexicon: Optional[Mapping[str, float]] = None,
) -> Corpus:
    """Add lexical diversity, sentiment and emotion columns.

    Args:
        corpus: Labeled corpus
        term_matrix: Stem counts built from the same corpus
        emotion_lexicon: NRC lexicon; when missing every emotion vector is zero
        polarity_lexicon: Optional override for the VADER lexicon

    Returns:
        New Corpus with the derived columns
    """
    if term_matrix.shape[0] != len(corpus):
        raise ValueError(
            f"Term matrix has {term_matrix.shape[0]} rows for {len(corpus)} songs"
        )

    if emotion_lexicon is None:
        logger.warning("No emotion lexicon supplied - emotion vectors will be all zero")
        emotion_lexicon = {}

    if polarity_lexicon is None:
        polarity_lexicon = get_polarity_lexicon()

    sentiments = []
    emotions = []
    for text in tqdm(corpus.lyrics, desc="Annotating lyrics", disable=len(corpus) < 50):
        sentiments.append(sentiment_score(text, polarity_lexicon))
        emotions.append(emotion_scores(text, emotion_lexicon))

    emotion_matrix = np.array(emotions, dtype=int).reshape(len(corpus), len(EMOTIONS))
    columns = {
        LEXICAL_DIVERSITY_COLUMN: type_token_ratio(term_matrix),
        SENTIMENT_COLUMN: sentiments,
    }
    for i, name in enumerate(EMOTION_COLUMNS):
        columns[name] = emotion_matrix[:, i]

    logger.info(f"Annotated {len(corpus)} songs with lyric features")
    return corpus.with_columns(columns)
