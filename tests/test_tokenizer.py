"""Tests for the tokenizer."""

import pytest
from pydantic import ValidationError

from fuzzydate.errors import LexError
from fuzzydate.tokenizer import Token, TokenKind, iter_tokens, tokenize


def kinds(text):
    return [t.kind for t in tokenize(text)]


def lexemes(text):
    return [t.lexeme for t in tokenize(text)]


class TestClassification:
    """Tests for token kinds and lexemes."""

    def test_keywords_are_words(self):
        """Test that vocabulary words come out as WORD tokens in source order."""
        tokens = tokenize("five days after this Friday")
        assert [t.kind for t in tokens] == [TokenKind.WORD] * 5
        assert [t.lexeme for t in tokens] == ["five", "days", "after", "this", "Friday"]
        assert [t.position for t in tokens] == [0, 5, 10, 16, 21]
        assert all(t.is_keyword for t in tokens)

    def test_text_is_lowercased(self):
        """Test that keyword matching uses the lowercased lexeme."""
        token = tokenize("TOMORROW")[0]
        assert token.lexeme == "TOMORROW"
        assert token.text == "tomorrow"
        assert token.is_keyword

    def test_number_and_meridiem_split(self):
        """Test that digits followed by am/pm split into NUMBER and WORD."""
        assert kinds("10am") == [TokenKind.NUMBER, TokenKind.WORD]
        assert lexemes("10am") == ["10", "am"]

    def test_ordinal(self):
        """Test ordinal suffixes form a single ORDINAL token."""
        for text, value in [("1st", 1), ("2nd", 2), ("3rd", 3), ("21st", 21), ("4TH", 4)]:
            token = tokenize(text)[0]
            assert token.kind == TokenKind.ORDINAL
            assert token.number == value

    def test_iso_date(self):
        """Test YYYY-MM-DD is one ISO_DATE token."""
        assert kinds("2024-03-05") == [TokenKind.ISO_DATE]

    def test_iso_date_time_with_offset(self):
        """Test a full ISO 8601 literal splits into date, separator and time."""
        tokens = tokenize("2024-03-05T10:00:00+02:00")
        assert [t.kind for t in tokens] == [TokenKind.ISO_DATE, TokenKind.WORD, TokenKind.ISO_TIME]
        assert [t.lexeme for t in tokens] == ["2024-03-05", "T", "10:00:00+02:00"]
        assert [t.position for t in tokens] == [0, 10, 11]

    def test_iso_time_forms(self):
        """Test the accepted clock-time spellings."""
        for text in ["17:30", "5:30pm", "5:30 pm", "17:30:15", "10:00Z", "10:00:00.250-0500", "12:00:00-04:56:02"]:
            assert kinds(text) == [TokenKind.ISO_TIME], text
            assert lexemes(text) == [text]

    def test_numeric_date_punctuation(self):
        """Test slashes and dots come out as PUNCTUATION."""
        assert kinds("5/2/2022") == [
            TokenKind.NUMBER,
            TokenKind.PUNCTUATION,
            TokenKind.NUMBER,
            TokenKind.PUNCTUATION,
            TokenKind.NUMBER,
        ]
        assert lexemes("2.5.2022") == ["2", ".", "5", ".", "2022"]

    def test_hyphenated_number_words(self):
        """Test dashes between number words are kept as punctuation."""
        assert lexemes("fifty-five") == ["fifty", "-", "five"]

    def test_comma(self):
        """Test commas are punctuation tokens."""
        assert lexemes("1 day, 2 hours") == ["1", "day", ",", "2", "hours"]

    def test_whitespace_is_elided(self):
        """Test tabs, newlines and repeated spaces are skipped."""
        assert lexemes("  tomorrow\t at \n noon ") == ["tomorrow", "at", "noon"]


class TestUnknownInput:
    """Tests that unknown words are deferred to the parser."""

    def test_unknown_words(self):
        """Test that unknown words are WORD tokens, not errors."""
        tokens = tokenize("Hello World")
        assert [t.kind for t in tokens] == [TokenKind.WORD, TokenKind.WORD]
        assert not any(t.is_keyword for t in tokens)

    def test_symbols_are_opaque_words(self):
        """Test that other printable runs become opaque WORD tokens."""
        tokens = tokenize("noon @#$ _x")
        assert [t.lexeme for t in tokens] == ["noon", "@#$", "_", "x"]
        assert all(t.kind == TokenKind.WORD for t in tokens)

    def test_empty(self):
        """Test that empty and blank input produce no tokens."""
        assert tokenize("") == ()
        assert tokenize("   ") == ()


class TestLexErrors:
    """Tests for unencodable input."""

    def test_control_character(self):
        """Test that control characters raise LexError at their position."""
        with pytest.raises(LexError) as exc_info:
            tokenize("ab\x07c")
        assert exc_info.value.position == 2

    def test_nul(self):
        """Test that NUL raises LexError."""
        with pytest.raises(LexError):
            tokenize("\x00")

    def test_lone_surrogate(self):
        """Test that an unpaired surrogate raises LexError."""
        with pytest.raises(LexError) as exc_info:
            tokenize("noon\ud800")
        assert exc_info.value.position == 4

    def test_invalid_utf8_bytes(self):
        """Test that undecodable bytes raise LexError at the bad byte."""
        with pytest.raises(LexError) as exc_info:
            tokenize(b"today \xff")
        assert exc_info.value.position == 6

    def test_invalid_utf8_position_counts_characters(self):
        """Test the position is a character offset, not a byte offset."""
        with pytest.raises(LexError) as exc_info:
            tokenize("caf\u00e9 ".encode("utf-8") + b"\xff")
        assert exc_info.value.position == 5

    def test_valid_bytes(self):
        """Test that UTF-8 bytes are decoded and tokenized."""
        assert lexemes(b"tomorrow at noon") == ["tomorrow", "at", "noon"]


class TestTokenSequence:
    """Tests for the shape of the tokenizer output."""

    def test_fresh_tuple_per_call(self):
        """Test that each call returns an equal but independent tuple."""
        first = tokenize("3 weeks ago")
        second = tokenize("3 weeks ago")
        assert isinstance(first, tuple)
        assert first == second
        assert first is not second

    def test_iter_tokens_is_lazy(self):
        """Test that iter_tokens yields the same tokens lazily."""
        gen = iter_tokens("3 weeks ago")
        assert next(gen).lexeme == "3"
        assert [t.lexeme for t in gen] == ["weeks", "ago"]

    def test_tokens_are_immutable(self):
        """Test that tokens cannot be modified after creation."""
        token = tokenize("noon")[0]
        with pytest.raises(ValidationError):
            token.lexeme = "midnight"

    def test_token_repr(self):
        """Test the debugging representation."""
        token = Token(kind=TokenKind.NUMBER, lexeme="5", position=3)
        assert repr(token) == "Token(NUMBER, '5', position=3)"
