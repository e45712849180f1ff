"""Tests for adaptive_chunking.token_counter."""

import logging

from adaptive_chunking.token_counter import (
    ApproximateTokenCounter,
    TiktokenCounter,
    count_tokens,
    count_tokens_batch,
    get_default_counter,
)


class TestApproximateTokenCounter:
    def test_empty_string(self):
        assert ApproximateTokenCounter().count("") == 0

    def test_four_chars_per_token(self):
        counter = ApproximateTokenCounter()
        assert counter.count("abcd") == 1
        assert counter.count("abcde") == 2
        assert counter.count("a" * 400) == 100

    def test_whitespace_is_normalized(self):
        counter = ApproximateTokenCounter()
        # "a b" after normalization
        assert counter.count("  a \n\n\t b  ") == 1

    def test_deterministic(self):
        counter = ApproximateTokenCounter()
        text = "Articolo 1\nIl presente regolamento disciplina la materia."
        assert counter.count(text) == counter.count(text)


class TestTiktokenCounter:
    def test_empty_string(self):
        assert TiktokenCounter().count("") == 0

    def test_simple_italian(self):
        tokens = TiktokenCounter().count("Questo è un esempio.")
        assert tokens >= 3

    def test_special_token_text_does_not_raise(self):
        tokens = TiktokenCounter().count("Fine del documento <|endoftext|>")
        assert tokens > 0

    def test_unknown_encoding_falls_back(self, caplog):
        counter = TiktokenCounter("no-such-encoding")
        with caplog.at_level(logging.WARNING, logger="adaptive_chunking.token_counter"):
            assert counter.count("abcdefgh") == 2
            assert counter.count("abcd") == 1
        assert counter.is_precise is False
        warnings = [r for r in caplog.records if "no-such-encoding" in r.getMessage()]
        assert len(warnings) == 1


class TestCountTokens:
    def test_empty_string(self):
        assert count_tokens("") == 0

    def test_long_text(self):
        text = (
            "Il presente regolamento disciplina le modalità di accesso ai "
            "servizi e le responsabilità dei soggetti coinvolti nel trattamento."
        )
        tokens = count_tokens(text)
        assert 10 < tokens < 100

    def test_returns_int(self):
        assert isinstance(count_tokens("Test"), int)

    def test_default_counter_is_shared(self):
        assert get_default_counter() is get_default_counter()


class TestCountTokensBatch:
    def test_empty_list(self):
        assert count_tokens_batch([]) == []

    def test_empty_string_in_batch(self):
        result = count_tokens_batch(["Testo", "", "Altro testo"])
        assert result[1] == 0
        assert result[0] > 0
        assert result[2] > 0

    def test_consistency_with_single(self):
        texts = ["Regolamento", "Articolo", "Disposizioni finali"]
        assert count_tokens_batch(texts) == [count_tokens(t) for t in texts]
