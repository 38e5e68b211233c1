"""
Tests for daily narrative text.
"""
from app.services.narrative_service import (
    FREE_DAY_MESSAGE, TRANSIT_DAY_MESSAGE, generate_daily_narrative
)
from app.tests.fakes import FakeItem


def test_empty_day_is_free_day():
    assert generate_daily_narrative([]) == FREE_DAY_MESSAGE


def test_activity_and_food_titles_are_joined():
    items = [
        FakeItem(id=1, title="Kinkaku-ji", type="activity"),
        FakeItem(id=2, title="Nishiki Market", type="food"),
    ]
    assert generate_daily_narrative(items) == "Today we went to Kinkaku-ji、Nishiki Market."


def test_first_item_description_is_appended():
    items = [
        FakeItem(id=1, title="Arashiyama", type="activity", description="Bamboo grove at sunrise."),
        FakeItem(id=2, title="Tofu lunch", type="food", description="Not used."),
    ]
    assert generate_daily_narrative(items) == "Today we went to Arashiyama、Tofu lunch. Bamboo grove at sunrise."


def test_transport_and_lodging_only_is_transit_day():
    items = [
        FakeItem(id=1, title="Shinkansen", type="transport"),
        FakeItem(id=2, title="Ryokan", type="lodging"),
    ]
    assert generate_daily_narrative(items) == TRANSIT_DAY_MESSAGE


def test_empty_titles_are_skipped():
    items = [FakeItem(id=1, title="", type="activity"), FakeItem(id=2, title="Gion", type="activity")]
    assert generate_daily_narrative(items) == "Today we went to Gion."


def test_narrative_is_deterministic():
    items = [FakeItem(id=1, title="Ramen Shop", type="food", description="Rich broth.")]
    assert generate_daily_narrative(items) == generate_daily_narrative(items)
