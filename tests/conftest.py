"""Shared fixtures: synthetic song tables and membership lists."""

import numpy as np
import pandas as pd
import pytest

from pentype.pipeline.config import TREE_FEATURES

BASE_AUDIO = {
    "danceability": 0.6,
    "energy": 0.5,
    "key": 5,
    "loudness": -7.5,
    "mode": 1,
    "speechiness": 0.04,
    "acousticness": 0.3,
    "instrumentalness": 0.0,
    "liveness": 0.12,
    "valence": 0.4,
    "tempo": 120.0,
    "time_signature": 4,
    "duration_ms": 230000,
    "explicit": False,
}


TIMES = ["morning", "evening", "noon", "midnight"]


def make_song_table(songs):
    """Build a song table from (track_name, lyrics, audio overrides) tuples."""
    rows = []
    for track_name, lyrics, audio in songs:
        row = {"track_name": track_name, "album": "Folklore", "lyrics": lyrics}
        row.update(BASE_AUDIO)
        row.update(audio or {})
        rows.append(row)
    return pd.DataFrame(rows)


def make_feature_frame(n, **columns):
    """Constant tree-feature frame with selected columns overridden."""
    data = {name: np.full(n, float(BASE_AUDIO.get(name, 0.0))) for name in TREE_FEATURES}
    for name, values in columns.items():
        data[name] = np.asarray(values, dtype=float)
    return pd.DataFrame(data)


@pytest.fixture
def six_song_table():
    """Two songs per pen type; members of a type share one unique word."""
    return make_song_table([
        ("Seven", "river meadow", {"energy": 0.3}),
        ("Betty", "river candle", {"energy": 0.35}),
        ("Cardigan", "engine rocket", {"energy": 0.5}),
        ("August", "engine planet", {"energy": 0.55}),
        ("Shake It Off", "glitter sparkle", {"energy": 0.8}),
        ("22", "glitter party", {"energy": 0.85}),
    ])


@pytest.fixture
def six_song_membership():
    return {
        "quill": ["Seven", "Betty"],
        "fountain": ["Cardigan", "August"],
        "glitter_gel": ["Shake It Off", "22"],
    }


@pytest.fixture
def emotion_lexicon():
    return {
        "love": frozenset({"joy", "trust"}),
        "cry": frozenset({"sadness"}),
        "tears": frozenset({"sadness"}),
        "fight": frozenset({"anger", "fear"}),
        "dance": frozenset({"joy"}),
        "wait": frozenset({"anticipation"}),
    }


@pytest.fixture
def labeled_table():
    """Twelve songs, four per pen type, separable by words and by energy."""
    words = {
        "quill": "old letters candle ink love tears",
        "fountain": "heartbreak window rain wait cry tears",
        "glitter_gel": "dance party glitter love love dance",
    }
    energy = {"quill": 0.3, "fountain": 0.5, "glitter_gel": 0.85}
    songs, membership = [], {cat: [] for cat in words}
    for cat in words:
        for i in range(4):
            name = f"{cat}_{i}"
            songs.append((name, f"{words[cat]} {TIMES[i]}", {"energy": energy[cat] + i * 0.01,
                                                           "acousticness": 0.9 - energy[cat]}))
            membership[cat].append(name)
    return make_song_table(songs), membership

