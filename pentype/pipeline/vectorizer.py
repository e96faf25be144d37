"""Bag-of-stems term counts for lyrics.

Lyrics are lowercased, split into word tokens (punctuation and digits
discarded, letters from any script kept), filtered against an English
stopword list and Porter-stemmed. The vocabulary is the union of stems
across the whole corpus.

The stopword list is scikit-learn's English list minus a few content
words it drops for document retrieval ("cry", "fire") that carry meaning
in lyrics. Contractions led by a stopword ("i'm", "you're", "don't") are
dropped as well.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np
from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer
from scipy import sparse
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer

logger = logging.getLogger(__name__)

_TOKENIZER = RegexpTokenizer(r"[^\W\d_]+(?:['’][^\W\d_]+)*")
_STEMMER = PorterStemmer()

LYRIC_CONTENT_WORDS = frozenset({
    "bill", "bottom", "call", "cry", "empty", "fill", "find", "fire", "found",
    "front", "full", "give", "interest", "move", "name", "part", "side",
    "sincere", "thick", "thin", "top",
})
STOP_WORDS = (ENGLISH_STOP_WORDS - LYRIC_CONTENT_WORDS) | {"i"}


def tokenize(text: str) -> List[str]:
    """Split text into lowercase word tokens, dropping punctuation and digits."""
    if not text:
        return []
    return _TOKENIZER.tokenize(text.lower())


def stem_tokens(text: str) -> List[str]:
    """Tokenize, drop stopwords and reduce each remaining word to its stem."""
    stems = []
    for token in tokenize(text):
        if is_stopword(token):
            continue
        stems.append(_STEMMER.stem(token.replace("'", "").replace("’", "")))
    return stems


def is_stopword(token: str) -> bool:
    head, _, tail = token.replace("’", "'").partition("'")
    if not tail:
        return head in STOP_WORDS
    if head in STOP_WORDS or head + tail in STOP_WORDS:
        return True
    # negations: don't, isn't, can't, won't
    return tail == "t" and (head[:-1] in STOP_WORDS or head in ("can", "won"))


@dataclass(frozen=True)
class TermMatrix:
    """Song x stem count matrix sharing one vocabulary."""

    counts: sparse.csr_matrix
    vocabulary: List[str]

    @property
    def shape(self):
        return self.counts.shape

    def row_terms(self, index: int) -> Dict[str, int]:
        """Sparse {stem: count} mapping for one song."""
        row = self.counts.getrow(index)
        return {self.vocabulary[col]: int(val) for col, val in zip(row.indices, row.data)}

    def column(self, stem: str) -> int:
        return self.vocabulary.index(stem)


def build_term_matrix(lyrics: Sequence[str]) -> TermMatrix:
    """Count stems per song.

    Args:
        lyrics: Raw lyric text per song (empty strings allowed)

    Returns:
        TermMatrix with one row per song; empty lyrics give an all-zero row
    """
    documents = list(lyrics)

    if any(stem_tokens(doc) for doc in documents):
        vectorizer = CountVectorizer(analyzer=stem_tokens)
        counts = vectorizer.fit_transform(documents)
        vocabulary = vectorizer.get_feature_names_out().tolist()
    else:
        # CountVectorizer refuses an empty vocabulary
        logger.warning("No stems found in any lyrics; term matrix is empty")
        counts = sparse.csr_matrix((len(documents), 0), dtype=np.int64)
        vocabulary = []

    logger.info(f"Term matrix: {counts.shape[0]} songs x {counts.shape[1]} stems")
    return TermMatrix(counts=sparse.csr_matrix(counts), vocabulary=vocabulary)
