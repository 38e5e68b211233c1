"""
Narrative text for one day of a trip.
"""
from typing import Sequence

FREE_DAY_MESSAGE = "This was a free day to relax and enjoy the trip!"
TRANSIT_DAY_MESSAGE = "Today was mostly spent in transit or resting."
NARRATED_TYPES = ("activity", "food")
TITLE_SEPARATOR = "、"  # Full-width enumeration comma


def _type_of(item) -> str:
    return getattr(item.type, "value", item.type)


def generate_daily_narrative(items: Sequence) -> str:
    """Summarize a day's items as one paragraph. Pure function of its input."""
    if not items:
        return FREE_DAY_MESSAGE
    
    locations = [
        item.title for item in items
        if _type_of(item) in NARRATED_TYPES and item.title
    ]
    
    if not locations:
        return TRANSIT_DAY_MESSAGE
    
    narrative = f"Today we went to {TITLE_SEPARATOR.join(locations)}."
    description = items[0].description
    if description:
        narrative = f"{narrative} {description}"
    return narrative
