from pentype.pipeline.vectorizer import build_term_matrix, stem_tokens, tokenize


def test_tokenize_drops_punctuation_and_digits():
    assert tokenize("Hello, world! 22 times...") == ["hello", "world", "times"]


def test_stem_tokens_removes_stopwords_and_stems():
    stems = stem_tokens("The running rivers and the dancing")

    assert stems == ["run", "river", "danc"]


def test_contractions_are_joined():
    assert stem_tokens("Ma'am stop") == ["maam", "stop"]


def test_contractions_led_by_stopwords_are_dropped():
    stems = stem_tokens("I'm sure you're the one, I'll cry, don't")

    assert "cri" in stems
    assert not {"im", "your", "youre", "ill", "dont", "i"} & set(stems)


def test_lyric_content_words_are_kept():
    assert stem_tokens("cry fire") == ["cri", "fire"]


def test_tokenize_keeps_accented_letters():
    assert tokenize("Naïve café, señorita!") == ["naïve", "café", "señorita"]


def test_accented_words_are_single_stems():
    matrix = build_term_matrix(["café señorita", "café"])

    assert len(matrix.vocabulary) == 2
    assert len(matrix.row_terms(1)) == 1
    assert set(matrix.row_terms(1)) < set(matrix.row_terms(0))


def test_same_stem_shares_a_column():
    matrix = build_term_matrix(["rivers flowing", "river flows", "candle"])

    col = matrix.column("river")
    dense = matrix.counts.toarray()
    assert dense[0, col] == 1
    assert dense[1, col] == 1
    assert dense[2, col] == 0
    assert matrix.row_terms(1) == {"river": 1, "flow": 1}


def test_vocabulary_is_union_of_stems():
    matrix = build_term_matrix(["river meadow", "engine river"])

    assert matrix.vocabulary == ["engin", "meadow", "river"]
    assert matrix.shape == (2, 3)


def test_empty_lyrics_give_zero_row():
    matrix = build_term_matrix(["river", ""])

    assert matrix.counts.toarray()[1].sum() == 0
    assert matrix.row_terms(1) == {}


def test_all_empty_corpus():
    matrix = build_term_matrix(["", "the and of"])

    assert matrix.shape == (2, 0)
    assert matrix.vocabulary == []
