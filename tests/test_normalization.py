from linguala.pipelines.normalization import (
    adaptive_max_tokens,
    clean_text,
    count_words,
    estimate_tokens,
    normalize_unicode,
    split_paragraphs,
)


def test_clean_text_strips_markup_and_whitespace():
    assert clean_text("<p>Hello   <b>world</b></p>\n") == "Hello world"
    assert clean_text("") == ""


def test_token_estimates():
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2
    assert adaptive_max_tokens("a" * 40) == 35


def test_counts_and_paragraphs():
    assert count_words("  one two\nthree ") == 3
    assert split_paragraphs("a\n\n \n\nb") == ["a", "b"]


def test_normalize_unicode_composes():
    assert normalize_unicode("e\u0301") == "\u00e9"
