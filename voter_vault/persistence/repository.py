"""
Repository pattern for voter persistence.

Defines the store contract the ingestion pipeline writes through.
Implementations: PostgreSQL (production) and a JSON file (local use).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from ..models import VoterRecord


SEARCH_LIMIT = 50


class VoterRepository(ABC):
    """
    Abstract voter store keyed by EPIC number.

    Writes are idempotent upserts: pushing the same records twice leaves
    the store as after the first push (last write wins on non-key fields).
    """

    @abstractmethod
    def upsert(self, records: Iterable[VoterRecord]) -> int:
        """
        Insert records, replacing any with the same EPIC number.

        Returns:
            Number of records written
        """

    @abstractmethod
    def delete(self, epic_no: str) -> bool:
        """
        Delete one record.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every record. Returns the number removed."""

    @abstractmethod
    def list_all(self) -> List[VoterRecord]:
        """All records, most recently updated first."""

    @abstractmethod
    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[VoterRecord]:
        """
        Case-insensitive substring search over name and EPIC number.

        An empty query returns no results.
        """

    def count(self) -> int:
        return len(self.list_all())

    def test_connection(self) -> Tuple[bool, str]:
        """Check the store is reachable."""
        try:
            total = self.count()
        except Exception as e:
            return False, str(e)
        return True, f"Connected. {total} records in store."
