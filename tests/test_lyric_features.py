import numpy as np
import pytest

from pentype.pipeline.config import EMOTION_COLUMNS, EMOTIONS
from pentype.pipeline.dataset import build_corpus
from pentype.pipeline.errors import DegenerateVectorWarning
from pentype.pipeline.lyric_features import (
    annotate_corpus,
    emotion_scores,
    load_emotion_lexicon,
    sentiment_score,
    type_token_ratio,
)
from pentype.pipeline.similarity import angular_distance_matrix, cosine_similarity_matrix
from pentype.pipeline.vectorizer import build_term_matrix


def test_type_token_ratio():
    matrix = build_term_matrix(["river river meadow candle", "", "rocket"])

    ratio = type_token_ratio(matrix)

    assert ratio == pytest.approx([0.75, 0.0, 1.0])


def test_sentiment_sums_word_polarity_and_rounds():
    lexicon = {"love": 3.2, "hate": -2.7, "happy": 0.333}

    assert sentiment_score("Love, love... I hate it", lexicon) == pytest.approx(3.7)
    assert sentiment_score("happy happy", lexicon) == pytest.approx(0.67)


def test_sentiment_uses_unstemmed_tokens():
    lexicon = {"loving": 2.0, "love": 1.0}

    assert sentiment_score("loving", lexicon) == 2.0


def test_sentiment_with_vader_lexicon():
    assert sentiment_score("I love you, I am so happy") > 0
    assert sentiment_score("I hate this, I am sad and angry") < 0
    assert sentiment_score("") == 0.0


def test_emotion_scores_count_tokens(emotion_lexicon):
    scores = emotion_scores("Love and tears, tears and love, we fight", emotion_lexicon)
    by_name = dict(zip(EMOTIONS, scores))

    assert len(scores) == 8
    assert by_name["joy"] == 2
    assert by_name["trust"] == 2
    assert by_name["sadness"] == 2
    assert by_name["anger"] == 1
    assert by_name["fear"] == 1
    assert by_name["surprise"] == 0


def test_load_emotion_lexicon(tmp_path):
    path = tmp_path / "nrc.txt"
    path.write_text(
        "abandon\tfear\t1\n"
        "abandon\tnegative\t1\n"
        "abandon\tsadness\t1\n"
        "abandon\tjoy\t0\n"
        "null\tsurprise\t1\n"
    )

    lexicon = load_emotion_lexicon(str(path))

    assert lexicon["abandon"] == frozenset({"fear", "sadness"})
    assert lexicon["null"] == frozenset({"surprise"})


def test_load_emotion_lexicon_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_emotion_lexicon(str(tmp_path / "missing.txt"))


def test_annotate_corpus_adds_columns(six_song_table, six_song_membership, emotion_lexicon):
    six_song_table.loc[0, "lyrics"] = "love love dance"
    corpus = build_corpus(six_song_table, six_song_membership)
    matrix = build_term_matrix(corpus.lyrics)

    annotated = annotate_corpus(corpus, matrix, emotion_lexicon, polarity_lexicon={"love": 1.5})

    song = annotated.song(0)
    assert song.sentiment == pytest.approx(3.0)
    assert song.lexical_diversity == pytest.approx(2 / 3)
    assert dict(zip(EMOTIONS, song.emotions))["joy"] == 3
    assert all(col in annotated.frame.columns for col in EMOTION_COLUMNS)
    assert "sentiment" not in corpus.frame.columns


def test_empty_lyrics_song_is_scoreable(six_song_table, six_song_membership, emotion_lexicon):
    six_song_table.loc[3, "lyrics"] = ""
    corpus = build_corpus(six_song_table, six_song_membership)
    matrix = build_term_matrix(corpus.lyrics)

    annotated = annotate_corpus(corpus, matrix, emotion_lexicon)
    song = annotated.song(3)

    assert song.lexical_diversity == 0.0
    assert song.sentiment == 0.0
    assert song.emotions == (0,) * 8

    with pytest.warns(DegenerateVectorWarning):
        similarity = cosine_similarity_matrix(matrix.counts, annotated.identifiers)
    assert np.all(similarity[3] == 0.0)
    assert not np.isnan(similarity).any()

    emotions = annotated.feature_frame(EMOTION_COLUMNS).to_numpy(dtype=float)
    with pytest.warns(DegenerateVectorWarning):
        distance = angular_distance_matrix(emotions)
    assert not np.isnan(distance).any()


def test_annotate_rejects_mismatched_matrix(six_song_table, six_song_membership):
    corpus = build_corpus(six_song_table, six_song_membership)

    with pytest.raises(ValueError):
        annotate_corpus(corpus, build_term_matrix(["river"]))
