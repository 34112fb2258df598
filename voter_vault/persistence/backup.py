"""
Store backup and restore.

Export writes the full store as a JSON array; restore routes a previously
exported array back through the same upsert used by live ingestion.
Restored rows are trusted as canonical and not re-validated.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from ..exceptions import DataPersistenceError
from ..logger import get_logger
from ..models import VoterRecord, epoch_millis
from .repository import VoterRepository


logger = get_logger(__name__)


def export_backup(repository: VoterRepository, destination: Union[str, Path]) -> Path:
    """
    Write every stored record to a JSON file.

    Args:
        repository: Store to read
        destination: Target file, or a directory to receive VAULT_BACKUP_<ms>.json

    Returns:
        Path of the written file
    """
    destination = Path(destination)
    if destination.is_dir() or not destination.suffix:
        destination = destination / f"VAULT_BACKUP_{epoch_millis()}.json"

    records = repository.list_all()
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(
            json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    except OSError as e:
        raise DataPersistenceError(
            f"Failed to write backup: {e}", operation="export", file_path=str(destination)
        ) from e

    logger.info(f"Exported {len(records)} records to {destination}")
    return destination


def restore_backup(repository: VoterRepository, source: Union[str, Path]) -> int:
    """
    Upsert every record of a backup file.

    Returns:
        Number of records written
    """
    source = Path(source)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataPersistenceError(
            f"Failed to read backup: {e}", operation="restore", file_path=str(source)
        ) from e

    if not isinstance(data, list):
        raise DataPersistenceError(
            "Backup is not a JSON array", operation="restore", file_path=str(source)
        )

    records = [VoterRecord.from_dict(row) for row in data if isinstance(row, dict)]
    written = repository.upsert(records)
    logger.info(f"Restored {written} records from {source.name}")
    return written
