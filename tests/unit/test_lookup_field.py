from __future__ import annotations

import pytest

from src.tabular.aliases import FIELD_ALIASES, PARTIES, SERIAL_NUMBER, resolve_aliases
from src.tabular.normalizer import lookup_field


def test_case_insensitive_trimmed_match():
    row = {"  PARTIES ": "Acme Corp"}
    assert lookup_field(row, FIELD_ALIASES[PARTIES]) == "Acme Corp"


def test_sr_no_variants_resolve_to_serial_number():
    assert lookup_field({"sr no": 4}, FIELD_ALIASES[SERIAL_NUMBER]) == 4
    assert lookup_field({"Sr. No.": 4}, FIELD_ALIASES[SERIAL_NUMBER]) == 4
    assert lookup_field({"SR.NO": 4}, FIELD_ALIASES[SERIAL_NUMBER]) == 4


def test_first_alias_with_value_wins():
    row = {"Court": "District Court", "Forum": "High Court"}
    assert lookup_field(row, ("Forum", "Court")) == "High Court"


def test_empty_cell_falls_through_to_next_alias():
    row = {"Forum": "", "Court": "District Court"}
    assert lookup_field(row, ("Forum", "Court")) == "District Court"


def test_no_match_returns_none():
    assert lookup_field({"Something else": "x"}, ("Forum", "Court")) is None
    assert lookup_field({}, ("Forum",)) is None


def test_resolve_aliases_appends_extra():
    merged = resolve_aliases({PARTIES: ["Litigants", "Party"]})
    assert merged[PARTIES][: len(FIELD_ALIASES[PARTIES])] == FIELD_ALIASES[PARTIES]
    assert merged[PARTIES][-1] == "Litigants"
    assert merged[PARTIES].count("Party") == 1


def test_resolve_aliases_unknown_field():
    with pytest.raises(KeyError):
        resolve_aliases({"judge": ["Judge"]})
