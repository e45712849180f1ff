"""Tests for adaptive_chunking.sentence_splitter."""

import pytest

from adaptive_chunking.sentence_splitter import (
    WhitespaceMap,
    normalize_whitespace,
    split_sentences,
)


class TestNormalizeWhitespace:
    def test_collapses_runs(self):
        assert normalize_whitespace("Uno   due\n\ntre\tquattro") == "Uno due tre quattro"

    def test_strips_ends(self):
        assert normalize_whitespace("  testo  \n") == "testo"

    def test_empty(self):
        assert normalize_whitespace("") == ""
        assert normalize_whitespace(" \n\t ") == ""


class TestSplitSentences:
    def test_two_sentences(self):
        result = split_sentences("Questa è la prima. Questa è la seconda.")
        assert result == ["Questa è la prima.", "Questa è la seconda."]

    def test_empty_input(self):
        assert split_sentences("") == []
        assert split_sentences("   \n  ") == []

    def test_no_punctuation_is_one_sentence(self):
        assert split_sentences("nessuna punteggiatura qui") == ["nessuna punteggiatura qui"]

    def test_lowercase_after_period_does_not_split(self):
        assert split_sentences("Vedi art. 5 del codice.") == ["Vedi art. 5 del codice."]

    def test_abbreviation_is_not_protected(self):
        assert split_sentences("Il Dott. Rossi è arrivato.") == ["Il Dott.", "Rossi è arrivato."]

    def test_punctuation_run(self):
        assert split_sentences("Davvero?! Sì.") == ["Davvero?!", "Sì."]

    def test_accented_uppercase_starts_sentence(self):
        assert split_sentences("Fine. È iniziato.") == ["Fine.", "È iniziato."]

    @pytest.mark.parametrize("text, expected", [
        ("Koniec. Łódź jest duża.", ["Koniec.", "Łódź jest duża."]),
        ("Τέλος. Αρχή νέα.", ["Τέλος.", "Αρχή νέα."]),
        ("Конец. Начало.", ["Конец.", "Начало."]),
    ])
    def test_uppercase_beyond_latin1_starts_sentence(self, text, expected):
        assert split_sentences(text) == expected

    def test_newlines_are_normalized(self):
        assert split_sentences("Prima riga.\nSeconda riga.") == ["Prima riga.", "Seconda riga."]

    @pytest.mark.parametrize("text", [
        "Articolo 1\nPrimo testo.\n\nArticolo 2\nSecondo testo.",
        "  Spazi   iniziali. E finali!  ",
        "Senza confini",
        "Uno. due. Tre? Quattro!",
        "Koniec. łódź. Łódź 3. 4.",
        "# Titolo\n\n- voce uno\n- voce due",
    ])
    def test_join_reproduces_normalized_text(self, text):
        assert " ".join(split_sentences(text)) == normalize_whitespace(text)


class TestWhitespaceMap:
    def test_maps_word_start(self):
        text = "Ciao   mondo.\n\nSecondo."
        offsets = WhitespaceMap(text)
        assert offsets.to_raw_start(5) == 7
        assert text[offsets.to_raw_start(5)] == "m"

    def test_maps_exclusive_end(self):
        text = "Ciao   mondo.\n\nSecondo."
        offsets = WhitespaceMap(text)
        end = offsets.to_raw_end(len("Ciao mondo."))
        assert text[offsets.to_raw_start(0):end] == "Ciao   mondo."

    def test_space_maps_to_end_of_previous_word(self):
        offsets = WhitespaceMap("Ciao   mondo.")
        assert offsets.to_raw_start(4) == 4

    def test_leading_whitespace(self):
        offsets = WhitespaceMap("  \n Ciao")
        assert offsets.to_raw_start(0) == 4
        assert offsets.normalized_length == 4

    def test_full_span(self):
        text = "\n Uno\tdue  tre \n"
        offsets = WhitespaceMap(text)
        start = offsets.to_raw_start(0)
        end = offsets.to_raw_end(offsets.normalized_length)
        assert normalize_whitespace(text[start:end]) == normalize_whitespace(text)
        assert text[start:end] == "Uno\tdue  tre"
