"""
PostgreSQL repository implementation.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

import psycopg2
from psycopg2 import sql
from psycopg2.extras import Json, RealDictCursor, execute_values

from ..config import DBConfig
from ..exceptions import DataPersistenceError
from ..models import VoterRecord
from .repository import SEARCH_LIMIT, VoterRepository

logger = logging.getLogger(__name__)

COLUMNS = [
    "epicNo", "name", "age", "gender", "parentSpouseName",
    "assemblyConstituency", "parliamentaryConstituency", "district", "state",
    "partNo", "partName", "serialNo", "pollingStation", "lastUpdated",
]


class PostgresVoterRepository(VoterRepository):
    """
    PostgreSQL store for voter records.

    Handles:
    - Connection management
    - Schema initialization
    - Upsert keyed on "epicNo"
    """

    def __init__(self, config: DBConfig):
        """
        Initialize repository.

        Args:
            config: Database configuration
        """
        self.config = config
        self._conn = None
        self._table = sql.Identifier(config.table)

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(
                    host=self.config.host,
                    port=self.config.port,
                    dbname=self.config.name,
                    user=self.config.user,
                    password=self.config.password,
                    sslmode=self.config.ssl_mode
                )
                self._conn.autocommit = False
            except psycopg2.Error as e:
                logger.error(f"Failed to connect to PostgreSQL: {e}")
                raise DataPersistenceError(f"Failed to connect: {e}", operation="connect") from e
        return self._conn

    def _execute(self, operation: str, query, params=None, fetch: bool = False):
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                rows = cur.fetchall() if fetch else None
                rowcount = cur.rowcount
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"{operation} failed: {e}")
            raise DataPersistenceError(str(e), operation=operation) from e
        return rows if fetch else rowcount

    def init_db(self) -> None:
        """Create the voters table and its indexes."""
        table = self.config.table
        self._execute("init_db", sql.SQL("""
            CREATE TABLE IF NOT EXISTS {table} (
                "epicNo" text PRIMARY KEY,
                name text NOT NULL,
                age integer NOT NULL DEFAULT 0,
                gender text NOT NULL DEFAULT 'O' CHECK (gender IN ('M', 'F', 'O')),
                "parentSpouseName" text NOT NULL DEFAULT '',
                "assemblyConstituency" text NOT NULL DEFAULT '',
                "parliamentaryConstituency" text NOT NULL DEFAULT '',
                district text NOT NULL DEFAULT '',
                state text NOT NULL DEFAULT '',
                "partNo" text NOT NULL DEFAULT '',
                "partName" text NOT NULL DEFAULT '',
                "serialNo" text NOT NULL DEFAULT '',
                "pollingStation" jsonb DEFAULT '{{"name": "", "address": ""}}'::jsonb,
                "lastUpdated" timestamptz DEFAULT now(),
                created_at timestamptz DEFAULT now()
            );
            CREATE INDEX IF NOT EXISTS {name_idx} ON {table} USING btree (name);
            CREATE INDEX IF NOT EXISTS {station_idx} ON {table} USING gin ("pollingStation");
        """).format(
            table=self._table,
            name_idx=sql.Identifier(f"idx_{table}_name"),
            station_idx=sql.Identifier(f"idx_{table}_polling_station"),
        ))
        logger.info(f"Initialized table {table}")

    @staticmethod
    def _row_values(record: VoterRecord) -> tuple:
        row = record.to_dict()
        row["pollingStation"] = Json(row["pollingStation"])
        return tuple(row[c] for c in COLUMNS)

    def upsert(self, records: Iterable[VoterRecord]) -> int:
        # One INSERT cannot touch the same key twice; keep the last occurrence
        unique = {r.epic_no: r for r in records}
        if not unique:
            return 0

        columns = sql.SQL(", ").join(sql.Identifier(c) for c in COLUMNS)
        updates = sql.SQL(", ").join(
            sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(c))
            for c in COLUMNS if c != "epicNo"
        )
        query = sql.SQL(
            'INSERT INTO {table} ({columns}) VALUES %s '
            'ON CONFLICT ("epicNo") DO UPDATE SET {updates}'
        ).format(table=self._table, columns=columns, updates=updates)

        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                execute_values(cur, query.as_string(conn), [self._row_values(r) for r in unique.values()])
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"upsert failed: {e}")
            raise DataPersistenceError(str(e), operation="upsert") from e

        logger.debug(f"Upserted {len(unique)} voters into {self.config.table}")
        return len(unique)

    def delete(self, epic_no: str) -> bool:
        query = sql.SQL('DELETE FROM {table} WHERE "epicNo" = %s').format(table=self._table)
        return self._execute("delete", query, (epic_no,)) > 0

    def delete_all(self) -> int:
        query = sql.SQL("DELETE FROM {table}").format(table=self._table)
        return self._execute("delete_all", query)

    def list_all(self) -> List[VoterRecord]:
        query = sql.SQL('SELECT * FROM {table} ORDER BY "lastUpdated" DESC').format(table=self._table)
        rows = self._execute("list_all", query, fetch=True)
        return [VoterRecord.from_dict(dict(row)) for row in rows]

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> List[VoterRecord]:
        if not query:
            return []
        pattern = f"%{query}%"
        stmt = sql.SQL(
            'SELECT * FROM {table} WHERE name ILIKE %s OR "epicNo" ILIKE %s LIMIT %s'
        ).format(table=self._table)
        rows = self._execute("search", stmt, (pattern, pattern, limit), fetch=True)
        return [VoterRecord.from_dict(dict(row)) for row in rows]

    def count(self) -> int:
        query = sql.SQL("SELECT COUNT(*) AS total FROM {table}").format(table=self._table)
        rows = self._execute("count", query, fetch=True)
        return int(rows[0]["total"]) if rows else 0

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None
