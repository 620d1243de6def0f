"""
Tests for the TextFormatter layered example.
"""

import pytest

from layerdoc.examples.text_formatter import (
    CaseFormatter,
    NumberedFormatter,
    TextFormatter,
)


class TestTextFormatter:
    """Layer 0: holding the text."""

    def test_stores_text(self):
        assert TextFormatter("abc").text == "abc"

    def test_str_returns_text(self):
        assert str(TextFormatter("abc")) == "abc"


class TestCaseFormatter:
    """Layer 1: case conversion."""

    def test_extends_base(self):
        assert issubclass(CaseFormatter, TextFormatter)

    def test_to_upper(self):
        assert CaseFormatter("Hello, World").to_upper() == "HELLO, WORLD"

    def test_to_lower(self):
        assert CaseFormatter("Hello, World").to_lower() == "hello, world"

    def test_non_letters_unchanged(self):
        assert CaseFormatter("123 -_!").to_upper() == "123 -_!"

    def test_text_not_modified(self):
        formatter = CaseFormatter("MiXeD")
        formatter.to_upper()
        formatter.to_lower()
        assert formatter.text == "MiXeD"


class TestNumberedFormatter:
    """Layer 2: line numbering."""

    def test_extends_case_formatter(self):
        formatter = NumberedFormatter("a")
        assert isinstance(formatter, CaseFormatter)
        assert formatter.to_upper() == "A"

    def test_numbers_from_one(self):
        result = NumberedFormatter("alpha\nbeta\ngamma").with_line_numbers()
        assert result == "1: alpha\n2: beta\n3: gamma"

    def test_preserves_line_count_and_order(self):
        text = "c\nb\na\n\nd"
        lines = NumberedFormatter(text).with_line_numbers().splitlines()
        assert len(lines) == len(text.splitlines())
        assert [line.split(": ", 1)[1] for line in lines] == text.splitlines()

    def test_trailing_newline_adds_no_line(self):
        assert NumberedFormatter("one\ntwo\n").with_line_numbers() == "1: one\n2: two"

    def test_custom_separator_and_start(self):
        result = NumberedFormatter("x\ny").with_line_numbers(separator=". ", start=0)
        assert result == "0. x\n1. y"

    def test_empty_text(self):
        assert NumberedFormatter("").with_line_numbers() == ""

    def test_negative_start_rejected(self):
        with pytest.raises(ValueError):
            NumberedFormatter("x").with_line_numbers(start=-1)
