# =============================================================================
# capture_core/services/members.py
# Member Search and Dashboard Counts
# =============================================================================
"""
Helpers shared by the capture and admin services. Both work on either local
Records or the plain dicts GET /members returns.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from capture_core.offline.models import Record

Member = Union[Record, Mapping[str, Any]]

NAME_COLUMNS = ("firstName", "lastName")
PHONE_COLUMN = "phone"


def _values(member: Member) -> Mapping[str, Any]:
    return member.fields if isinstance(member, Record) else member


def _frame(members: List[Member]) -> pd.DataFrame:
    return pd.DataFrame.from_records([dict(_values(m)) for m in members])


def _text(frame: pd.DataFrame, column: str) -> pd.Series:
    return frame[column].where(frame[column].notna(), "").astype(str)


def search_members(members: Iterable[Member], query: Optional[str]) -> List[Member]:
    """
    Members whose first or last name contains the query (case-insensitive)
    or whose phone number contains it. An empty query returns everything.
    """
    members = list(members)
    if not query or not members:
        return members

    frame = _frame(members)
    needle = query.lower()
    matches = pd.Series(False, index=frame.index)
    for column in NAME_COLUMNS:
        if column in frame:
            matches |= _text(frame, column).str.lower().str.contains(needle, regex=False)
    if PHONE_COLUMN in frame:
        matches |= _text(frame, PHONE_COLUMN).str.contains(needle, regex=False)

    return [member for member, keep in zip(members, matches) if keep]


def member_stats(members: Iterable[Member]) -> Dict[str, int]:
    """Dashboard counts: total, baptized, working and married."""
    frame = _frame(list(members))

    def flagged(column: str) -> int:
        if column not in frame:
            return 0
        return int(frame[column].where(frame[column].notna(), False).astype(bool).sum())

    married = int((frame["maritalStatus"] == "Married").sum()) if "maritalStatus" in frame else 0

    return {
        "total": len(frame),
        "baptized": flagged("baptized"),
        "working": flagged("working"),
        "married": married,
    }
