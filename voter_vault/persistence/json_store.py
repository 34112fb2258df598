"""
JSON file-based voter store.

Keeps every record in one UTF-8 JSON array. Suitable for local runs and
small rolls; the PostgreSQL repository is the production store.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List

from ..exceptions import DataPersistenceError
from ..models import VoterRecord
from .repository import SEARCH_LIMIT, VoterRepository


class JSONVoterRepository(VoterRepository):
    """
    Voter store backed by a single JSON file.

    The whole file is rewritten on every change.
    """

    def __init__(self, path: Path):
        """
        Args:
            path: JSON file; created on first write
        """
        self.path = Path(path)

    def _load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, ValueError) as e:
            raise DataPersistenceError(
                f"Failed to load store: {e}", operation="load", file_path=str(self.path)
            ) from e
        if not isinstance(data, list):
            raise DataPersistenceError(
                "Store file is not a JSON array", operation="load", file_path=str(self.path)
            )
        return {row["epicNo"]: row for row in data if isinstance(row, dict) and row.get("epicNo")}

    def _save(self, rows: Dict[str, dict], operation: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(list(rows.values()), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise DataPersistenceError(
                f"Failed to write store: {e}", operation=operation, file_path=str(self.path)
            ) from e

    def upsert(self, records: Iterable[VoterRecord]) -> int:
        rows = self._load()
        written = 0
        for record in records:
            rows[record.epic_no] = record.to_dict()
            written += 1
        if written:
            self._save(rows, "upsert")
        return written

    def delete(self, epic_no: str) -> bool:
        rows = self._load()
        if epic_no not in rows:
            return False
        del rows[epic_no]
        self._save(rows, "delete")
        return True

    def delete_all(self) -> int:
        rows = self._load()
        self._save({}, "delete_all")
        return len(rows)

    def list_all(self) -> List[VoterRecord]:
        rows = sorted(
            self._load().values(),
            key=lambda row: str(row.get("lastUpdated") or ""),
            reverse=True,
        )
        return [VoterRecord.from_dict(row) for row in rows]

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[VoterRecord]:
        needle = (query or "").strip().lower()
        if not needle:
            return []
        matches = [
            VoterRecord.from_dict(row)
            for row in self._load().values()
            if needle in str(row.get("name") or "").lower()
            or needle in str(row.get("epicNo") or "").lower()
        ]
        return matches[:limit]

    def count(self) -> int:
        return len(self._load())
