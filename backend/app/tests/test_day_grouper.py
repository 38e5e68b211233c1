"""
Tests for grouping items by day and building daily journals.
"""
from datetime import date
from app.services.day_grouper import (
    build_daily_journals, date_for_day, group_items_by_day, trip_length
)
from app.services.narrative_service import FREE_DAY_MESSAGE
from app.tests.fakes import FakeItem


def test_date_for_day_adds_days():
    start = date(2024, 2, 27)
    assert date_for_day(start, 0) == start
    assert date_for_day(start, 3) == date(2024, 3, 1)
    assert date_for_day(start, 365) == date(2025, 2, 26)


def test_trip_length_is_inclusive():
    assert trip_length(date(2024, 4, 1), date(2024, 4, 3)) == 3
    assert trip_length(date(2024, 4, 1), date(2024, 4, 1)) == 1


def test_missing_day_index_counts_as_day_zero():
    items = [
        FakeItem(id=1, title="B", day_index=2),
        FakeItem(id=2, title="A", day_index=None),
        FakeItem(id=3, title="C", day_index=0),
    ]
    groups = group_items_by_day(items)
    assert list(groups) == [0, 2]
    assert [i.id for i in groups[0]] == [2, 3]


def test_kyoto_journals(kyoto):
    trip = kyoto.trips.get(1)
    journals = build_daily_journals(trip.start_date, kyoto.items.items, trip.end_date)

    assert [j.day_index for j in journals] == [0, 1, 2]
    assert [j.date for j in journals] == [date(2024, 4, 1), date(2024, 4, 2), date(2024, 4, 3)]
    assert journals[0].content == "Today we went to Fushimi Inari."
    assert journals[1].content == "Today we went to Ramen Shop."
    assert journals[2].content == FREE_DAY_MESSAGE
    assert [i.title for i in journals[1].items] == ["Ramen Shop"]
    assert journals[2].items == []


def test_without_end_date_only_days_with_items(kyoto):
    journals = build_daily_journals(date(2024, 4, 1), kyoto.items.items)
    assert [j.day_index for j in journals] == [0, 1]


def test_items_past_end_date_keep_their_day():
    items = [FakeItem(id=1, title="Late checkout", day_index=4)]
    journals = build_daily_journals(date(2024, 4, 1), items, date(2024, 4, 2))
    assert [j.day_index for j in journals] == [0, 1, 4]
    assert journals[-1].date == date(2024, 4, 5)
