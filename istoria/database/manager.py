"""
Database manager for Istoria.

This module owns the DuckDB ``memory`` table that every importer writes to
and every exporter reads from.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

import duckdb

from ..config import config
from ..errors import StorageError
from ..models import Memory, NewMemory

IN_MEMORY_DATABASE = ":memory:"

_MEMORY_COLUMNS = """
    id, source, title, metadata, created_at, memory_created_at, content, content_blob
"""


def _utc_naive(value: datetime) -> datetime:
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DatabaseManager:
    """
    Manages the DuckDB database holding imported memories.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the database manager.

        Args:
            db_path: Path to the DuckDB database file (defaults to config value)
        """
        self.db_path = db_path or config.database_filename
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        try:
            self.connection = duckdb.connect(self.db_path)
        except duckdb.Error as e:
            raise StorageError(f"Failed to open database {self.db_path}: {e}") from e
        logging.debug(f"Connected to database: {self.db_path}")

    def disconnect(self):
        """Flush and close the database connection."""
        if self.connection:
            if self.db_path != IN_MEMORY_DATABASE:
                self.connection.execute("CHECKPOINT")
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def initialize_database(self):
        """
        Create all necessary tables if they don't exist.
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        # memory_created_at keeps the ISO text so the original offset survives;
        # memory_created_at_utc is the ordering key.
        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS memory (
                id VARCHAR PRIMARY KEY,
                source VARCHAR NOT NULL,
                title VARCHAR NOT NULL,
                metadata VARCHAR NOT NULL DEFAULT '{}',
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                memory_created_at VARCHAR NOT NULL,
                memory_created_at_utc TIMESTAMP NOT NULL,
                content VARCHAR,
                content_blob BLOB
            )
        """)

        self.connection.execute("CREATE INDEX IF NOT EXISTS idx_memory_source ON memory (source)")
        self.connection.execute("CREATE INDEX IF NOT EXISTS idx_memory_created_at ON memory (created_at)")

    def import_memories(self, memories: Iterable[NewMemory]) -> List[Memory]:
        """
        Insert a batch of memories in a single transaction.

        Every memory gets a fresh id and created_at. Nothing is deduplicated:
        importing the same source twice stores it twice.

        Args:
            memories: The memories produced by one import run

        Returns:
            The stored memories, in the order given

        Raises:
            StorageError: if the database rejects the batch; no rows are kept
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        created_at = datetime.now(timezone.utc)
        # Ids and created_at are always assigned here, even for memories read back earlier
        stored = [
            Memory(
                id=uuid.uuid4().hex,
                created_at=created_at,
                **memory.model_dump(include=set(NewMemory.model_fields))
            )
            for memory in memories
        ]

        logging.info(f"Importing {len(stored)} records to memory table")
        if not stored:
            return stored

        rows = [
            [
                memory.id,
                memory.source,
                memory.title,
                json.dumps(memory.metadata, ensure_ascii=False),
                _utc_naive(memory.created_at),
                memory.memory_created_at.isoformat(),
                _utc_naive(memory.memory_created_at),
                memory.content,
                memory.content_blob,
            ]
            for memory in stored
        ]

        self.connection.begin()
        try:
            self.connection.executemany("""
                INSERT INTO memory (
                    id, source, title, metadata, created_at,
                    memory_created_at, memory_created_at_utc, content, content_blob
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, rows)
            self.connection.commit()
        except duckdb.Error as e:
            self.connection.rollback()
            raise StorageError(f"Failed to import memories: {e}") from e

        logging.info("Import completed")
        return stored

    def get_all_memories(self, source: Optional[str] = None) -> List[Memory]:
        """
        List stored memories, oldest event first.

        Args:
            source: Optional filter by importer source

        Returns:
            List of memories ordered by memory_created_at
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        query = f"SELECT {_MEMORY_COLUMNS} FROM memory"
        params = []

        if source:
            query += " WHERE source = ?"
            params.append(source)

        query += " ORDER BY memory_created_at_utc ASC, rowid ASC"

        results = self.connection.execute(query, params).fetchall()
        logging.debug(f"Fetched {len(results)} memories")

        return [self._row_to_memory(row) for row in results]

    def count_memories(self, source: Optional[str] = None) -> int:
        """
        Count stored memories, optionally for one source.
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        if source:
            result = self.connection.execute(
                "SELECT COUNT(*) FROM memory WHERE source = ?", [source]
            ).fetchone()
        else:
            result = self.connection.execute("SELECT COUNT(*) FROM memory").fetchone()

        return result[0] if result else 0

    @staticmethod
    def _row_to_memory(row) -> Memory:
        created_at = row[4]
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return Memory(
            id=row[0],
            source=row[1],
            title=row[2],
            metadata=json.loads(row[3]),
            created_at=created_at,
            memory_created_at=datetime.fromisoformat(row[5]),
            content=row[6],
            content_blob=bytes(row[7]) if row[7] is not None else None,
        )
