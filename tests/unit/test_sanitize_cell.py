from __future__ import annotations

from datetime import datetime

import pytest

from src.tabular.normalizer import sanitize_cell


def test_formula_prefix_stripped():
    assert sanitize_cell("=SUM(A1:A2)") == "SUM(A1:A2)"


@pytest.mark.parametrize("raw", ["+1", "-1", "@1", "=1"])
def test_each_trigger_character(raw: str):
    assert sanitize_cell(raw) == "1"


def test_surrounding_whitespace_trimmed():
    assert sanitize_cell("  Acme Corp \t") == "Acme Corp"


def test_plain_text_untouched():
    assert sanitize_cell("High Court (Bombay)") == "High Court (Bombay)"


def test_inner_trigger_characters_kept():
    assert sanitize_cell("A-1 = B@2") == "A-1 = B@2"


@pytest.mark.parametrize("value", [12, 3.5, None, datetime(2024, 3, 5)])
def test_non_text_passes_through(value):
    assert sanitize_cell(value) is value


@pytest.mark.parametrize(
    "raw",
    ["=SUM(A1:A2)", "==x", " =+ @cmd", "-5", "   ", "", "plain", "@@", " = 1 "],
)
def test_idempotent(raw: str):
    once = sanitize_cell(raw)
    assert sanitize_cell(once) == once
