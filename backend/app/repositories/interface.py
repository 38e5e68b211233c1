"""
Narrow data-access interfaces used by the memoir pipeline.

Each entity gets one small repository with explicit method contracts, so
the pipeline can run against the SQLAlchemy implementations in
``app.repositories.sql`` or against in-memory fakes in tests.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional


class TripRepository(ABC):
    @abstractmethod
    def get(self, trip_id: int) -> Optional[object]:
        """Return the trip or None."""


class ItemRepository(ABC):
    @abstractmethod
    def list_for_trip(self, trip_id: int) -> List[object]:
        """Items of a trip ordered by day index, then start time (missing times last)."""


class PhotoRepository(ABC):
    @abstractmethod
    def list_for_items(self, item_ids: Iterable[int]) -> List[object]:
        """Gallery photos for a set of items, in one lookup."""

    @abstractmethod
    def add(self, item_id: int, url: str) -> object: ...

    @abstractmethod
    def delete(self, photo_id: int) -> bool: ...


class MemoirRepository(ABC):
    @abstractmethod
    def get_for_trip(self, trip_id: int) -> Optional[object]: ...

    @abstractmethod
    def create(self, trip_id: int, title: str, photos: List[dict]) -> object: ...

    @abstractmethod
    def replace(self, memoir_id: int, title: str, photos: List[dict]) -> object:
        """Replace title and the whole photo list in a single write."""
