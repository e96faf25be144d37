"""Pen-Type Analysis Pipeline

Core modules for corpus construction, lyric features, similarity scoring,
nearest-neighbor and decision-tree classification, and evaluation.
"""

from .dataset import Corpus, Song, build_corpus
from .vectorizer import build_term_matrix
from .lyric_features import annotate_corpus, load_emotion_lexicon
from .similarity import cosine_similarity_matrix, angular_distance_matrix
from .neighbors import classify_by_neighbors
from .tree import ClassificationTree, fit_tree, predict_corpus
from .evaluation import evaluate_predictions

__all__ = [
    'Corpus',
    'Song',
    'build_corpus',
    'build_term_matrix',
    'annotate_corpus',
    'load_emotion_lexicon',
    'cosine_similarity_matrix',
    'angular_distance_matrix',
    'classify_by_neighbors',
    'ClassificationTree',
    'fit_tree',
    'predict_corpus',
    'evaluate_predictions',
]
