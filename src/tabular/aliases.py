from __future__ import annotations

from collections.abc import Mapping, Sequence

"""Header alias table for litigation case spreadsheets.

Human-authored templates name the same column many ways. Each logical field
lists its accepted headers in priority order; matching is case-insensitive
and whitespace-trimmed (see normalizer.lookup_field).
"""

SERIAL_NUMBER = "serial_number"
PARTIES = "parties"
FORUM = "forum"
PARTICULARS = "particulars"
START_DATE = "start_date"
LAST_HEARING_DATE = "last_hearing_date"
NEXT_HEARING_DATE = "next_hearing_date"
AMOUNT_INVOLVED = "amount_involved"
TREATMENT_RESOLUTION = "treatment_resolution"
REMARKS = "remarks"

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    SERIAL_NUMBER: ("Sr. No.", "Sr No", "SrNo", "Sr.No.", "Serial No"),
    PARTIES: ("Parties", "Party", "parties"),
    FORUM: ("Forum", "Court", "forum"),
    PARTICULARS: ("Particulars", "Particular", "particulars", "Details"),
    START_DATE: ("Start Date", "StartDate", "start_date", "Date of Filing"),
    LAST_HEARING_DATE: ("Last Hearing Date", "Last Hearing", "LastHearingDate", "last_hearing_date"),
    NEXT_HEARING_DATE: ("Next Hearing Date", "Next Hearing", "NextHearingDate", "next_hearing_date"),
    AMOUNT_INVOLVED: ("Amount involved", "Amount Involved", "AmountInvolved", "amount_involved", "Amount"),
    TREATMENT_RESOLUTION: (
        "Treatment/Resolution",
        "Treatment / Resolution",
        "Treatment Resolution",
        "treatment_resolution",
        "Resolution",
    ),
    REMARKS: ("Remarks", "Remark", "remarks", "Comments"),
}


def resolve_aliases(extra: Mapping[str, Sequence[str]] | None = None) -> dict[str, tuple[str, ...]]:
    """Built-in aliases with configured extras appended (built-ins win ties).

    Raises:
        KeyError: when extra names a field that does not exist
    """
    if not extra:
        return dict(FIELD_ALIASES)
    merged = dict(FIELD_ALIASES)
    for name, aliases in extra.items():
        if name not in merged:
            raise KeyError(f"unknown field in field_aliases: {name}")
        known = set(merged[name])
        merged[name] = merged[name] + tuple(a for a in aliases if a not in known)
    return merged
