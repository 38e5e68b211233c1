"""
Grouping of itinerary items by day and the derived daily journals.
"""
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence
from app.schemas.itinerary import ItineraryItemResponse
from app.schemas.memoir import DailyJournal
from app.services.narrative_service import generate_daily_narrative


def date_for_day(start_date: date, day_index: int) -> date:
    """Calendar date of a day index: trip start date plus that many days."""
    return start_date + timedelta(days=day_index)


def trip_length(start_date: date, end_date: date) -> int:
    """Number of calendar days in a trip, inclusive of both ends."""
    return max((end_date - start_date).days + 1, 0)


def group_items_by_day(items: Sequence) -> Dict[int, List]:
    """
    Partition items by day index, ascending.

    Items without a day index count as day 0. Order within a day is the
    input order (callers pass items already sorted by start time).
    """
    days: Dict[int, List] = {}
    for item in items:
        days.setdefault(item.day_index or 0, []).append(item)
    return {day: days[day] for day in sorted(days)}


def build_daily_journals(
    start_date: date,
    items: Sequence,
    end_date: Optional[date] = None
) -> List[DailyJournal]:
    """
    One journal per day, sorted by day index.

    Without ``end_date`` only days that have items get a journal. With it,
    every day of the trip gets one, so empty days carry the free-day text.
    Items scheduled past the end date still get their own journal.
    """
    groups = group_items_by_day(items)
    day_indices = set(groups)
    if end_date is not None:
        day_indices.update(range(trip_length(start_date, end_date)))

    return [
        DailyJournal(
            day_index=day_index,
            date=date_for_day(start_date, day_index),
            content=generate_daily_narrative(groups.get(day_index, [])),
            items=[ItineraryItemResponse.model_validate(item) for item in groups.get(day_index, [])]
        )
        for day_index in sorted(day_indices)
    ]
