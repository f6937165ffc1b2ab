"""Client-side filtering and ordering of fetched records.

Nothing here touches the network; these operate on lists already returned by
:class:`patient_portal.api.PatientApi`.
"""
from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Sequence, TypeVar
from pydantic import BaseModel, TypeAdapter
from .models import Appointment, LabResult, Medication, VisitSummary

T = TypeVar("T", bound=BaseModel)

_timestamp = TypeAdapter(datetime)


class DashboardOverview(BaseModel):
    recent_labs: list[LabResult]
    active_medications: list[Medication]
    next_appointments: list[Appointment]
    recent_summaries: list[VisitSummary]


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = _timestamp.validate_python(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def search_labs(labs: Iterable[LabResult], query: str) -> list[LabResult]:
    q = query.strip().lower()
    if not q:
        return list(labs)
    return [lab for lab in labs if q in lab.test_name.lower()]


def active_medications(medications: Iterable[Medication]) -> list[Medication]:
    return [m for m in medications if m.status == "active"]


def filter_by_date_range(
    items: Iterable[T],
    start: Optional[str] = None,
    end: Optional[str] = None,
    field: str = "date",
) -> list[T]:
    """Keep items whose ``field`` falls on or between the YYYY-MM-DD bounds.

    Either bound may be omitted. Items without a value for ``field`` are dropped
    once any bound is given.
    """
    if not start and not end:
        return list(items)
    lower = date.fromisoformat(start) if start else None
    upper = date.fromisoformat(end) if end else None

    kept = []
    for item in items:
        raw = getattr(item, field)
        if not raw:
            continue
        day = parse_timestamp(raw).date()
        if lower and day < lower:
            continue
        if upper and day > upper:
            continue
        kept.append(item)
    return kept


def sort_by_date(items: Iterable[T], field: str = "date", newest_first: bool = True) -> list[T]:
    """Order by ``field``; items missing it go last."""
    items = list(items)
    dated = [i for i in items if getattr(i, field)]
    undated = [i for i in items if not getattr(i, field)]
    return sorted(dated, key=lambda i: parse_timestamp(getattr(i, field)), reverse=newest_first) + undated


def dashboard_overview(
    labs: Sequence[LabResult],
    medications: Sequence[Medication],
    appointments: Sequence[Appointment],
    summaries: Sequence[VisitSummary],
) -> DashboardOverview:
    return DashboardOverview(
        recent_labs=list(labs[:3]),
        active_medications=active_medications(medications)[:4],
        next_appointments=list(appointments[:3]),
        recent_summaries=list(summaries[:2]),
    )
