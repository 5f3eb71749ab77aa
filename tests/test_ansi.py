"""Tests for the ansi module."""

import os
from io import StringIO
from unittest.mock import Mock, patch

import pytest

from pyrocks.ansi import BOLD, DIM, RED, RESET, YELLOW, LogStyles, colorize, make_style, should_colorize


@pytest.fixture
def force_color(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("FORCE_COLOR", "1")


def test_colorize_single_code(force_color):
    """Test colorize with a single ANSI code."""
    assert colorize("hello", RED) == "\x1b[31mhello\x1b[0m"


def test_colorize_multiple_codes(force_color):
    """Test colorize with multiple ANSI codes."""
    assert colorize("hello", RED, BOLD) == "\x1b[31;1mhello\x1b[0m"


def test_colorize_no_codes(force_color):
    """Test colorize with no codes returns text unchanged."""
    assert colorize("hello") == "hello"


def test_colorize_not_a_tty(monkeypatch):
    """Test that text written to a plain stream stays uncolored."""
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    assert colorize("hello", RED, stream=StringIO()) == "hello"


def test_make_style():
    """Test make_style returns correct prefix and suffix."""
    prefix, suffix = make_style(YELLOW, DIM)
    assert prefix == "\x1b[33;2m"
    assert suffix == RESET


def test_make_style_no_codes():
    """Test make_style with no codes returns empty prefix."""
    assert make_style() == ("", RESET)


def test_should_colorize_respects_no_color():
    """Test that NO_COLOR environment variable disables colors."""
    with patch.dict(os.environ, {"NO_COLOR": "1", "FORCE_COLOR": "1"}, clear=False):
        assert should_colorize() is False


def test_should_colorize_respects_force_color():
    """Test that FORCE_COLOR environment variable forces colors."""
    with patch.dict(os.environ, {"FORCE_COLOR": "1"}, clear=False):
        os.environ.pop("NO_COLOR", None)
        assert should_colorize(StringIO()) is True


def test_should_colorize_tty():
    """Test TTY detection on the given stream."""
    stream = Mock()
    stream.isatty.return_value = True
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("NO_COLOR", None)
        os.environ.pop("FORCE_COLOR", None)
        assert should_colorize(stream) is True
        assert should_colorize(StringIO()) is False


def test_log_styles():
    """Test that log styles are tuples of codes."""
    assert LogStyles.WARNING == (YELLOW, DIM)
    assert LogStyles.CRITICAL == (RED, BOLD)
