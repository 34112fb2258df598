"""
Persistence module for voter records.
"""

from ..config import Config
from ..exceptions import ConfigurationError
from .repository import VoterRepository, SEARCH_LIMIT
from .json_store import JSONVoterRepository
from .backup import export_backup, restore_backup


def create_repository(config: Config) -> VoterRepository:
    """Build the store selected by STORE_BACKEND."""
    if config.store_backend == "json":
        return JSONVoterRepository(config.json_store_path)
    if config.store_backend == "postgres":
        if not config.db.is_configured:
            raise ConfigurationError("DB_HOST, DB_NAME and DB_USER are required", config_key="DB_HOST")
        from .postgres import PostgresVoterRepository
        return PostgresVoterRepository(config.db)
    raise ConfigurationError(f"Unknown store backend: {config.store_backend}", config_key="STORE_BACKEND")


__all__ = [
    "VoterRepository",
    "JSONVoterRepository",
    "SEARCH_LIMIT",
    "create_repository",
    "export_backup",
    "restore_backup",
]
