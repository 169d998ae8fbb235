# ========================
# geoload/pipeline/storage.py
# ========================

"""
Data Storage Module

Repositories that persist validated attribute sets with an insert-if-absent
policy, and a writer for JSON run reports.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import MetaData, Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..db.models import Base
from .errors import ConfigurationError, UnknownTargetError

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "ingestion_summary.json"

INSERT_BUILDERS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class Repository(ABC):
    """Persistence capability used by the ingestion pipeline."""

    @abstractmethod
    def bulk_insert_ignore_conflicts(self, target: str, rows: List[Dict[str, Any]]) -> int:
        """
        Insert rows into target in a single request, skipping rows whose
        uniqueness key already exists.

        Args:
            target (str): Name of the target table
            rows (list[dict]): Attribute sets to insert

        Returns:
            int: Number of rows actually written
        """


class SQLAlchemyRepository(Repository):
    """
    Writes each chunk with one INSERT ... ON CONFLICT DO NOTHING statement
    in its own transaction.
    """

    def __init__(self, engine: Engine, metadata: Optional[MetaData] = None):
        """
        Initialize the repository.

        Args:
            engine (Engine): SQLAlchemy engine for a SQLite or PostgreSQL database
            metadata (MetaData): Tables that may be targeted; defaults to the
                project's declarative models
        """
        dialect = engine.dialect.name
        if dialect not in INSERT_BUILDERS:
            raise ConfigurationError(f"Dialect '{dialect}' does not support insert-if-absent writes")

        self.engine = engine
        self.metadata = metadata if metadata is not None else Base.metadata
        self._insert = INSERT_BUILDERS[dialect]
        self._session_factory = sessionmaker(
            bind=engine,
            class_=Session,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(f"SQLAlchemyRepository initialized for {engine.url.render_as_string(hide_password=True)}")

    def bulk_insert_ignore_conflicts(self, target: str, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0

        table = self._table(target)
        stmt = self._insert(table).values(self._pad_rows(rows)).on_conflict_do_nothing()

        with self._session_factory() as session:
            try:
                inserted = session.execute(stmt).rowcount
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Bulk insert into '{target}' failed: {e}")
                raise

        logger.debug(f"Inserted {inserted}/{len(rows)} rows into '{target}'")
        return inserted

    def _table(self, target: str) -> Table:
        try:
            return self.metadata.tables[target]
        except KeyError:
            raise UnknownTargetError(target) from None

    @staticmethod
    def _pad_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # A multi-row VALUES clause needs the same columns in every row
        columns: List[str] = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
        return [{column: row.get(column) for column in columns} for row in rows]


class InMemoryRepository(Repository):
    """
    Dict-backed repository honouring the same insert-if-absent contract.
    Useful for tests and dry runs.
    """

    def __init__(self, unique_keys: Dict[str, Sequence[str]]):
        """
        Args:
            unique_keys (dict): target name -> fields forming its uniqueness key
        """
        self.unique_keys: Dict[str, Tuple[str, ...]] = {
            target: tuple(fields) for target, fields in unique_keys.items()
        }
        self._rows: Dict[str, List[Dict[str, Any]]] = {target: [] for target in unique_keys}
        self._keys: Dict[str, set] = {target: set() for target in unique_keys}

    @classmethod
    def for_schemas(cls, *schemas) -> "InMemoryRepository":
        return cls({schema.name: schema.unique_key for schema in schemas})

    def bulk_insert_ignore_conflicts(self, target: str, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        if target not in self._rows:
            raise UnknownTargetError(target)

        key_fields = self.unique_keys[target]
        existing = self._keys[target]
        inserted = 0

        for row in rows:
            key = tuple(row.get(field) for field in key_fields)
            # As in SQL, a key containing NULL never conflicts
            if key_fields and None not in key:
                if key in existing:
                    continue
                existing.add(key)
            self._rows[target].append(dict(row))
            inserted += 1

        return inserted

    def all(self, target: str) -> List[Dict[str, Any]]:
        if target not in self._rows:
            raise UnknownTargetError(target)
        return list(self._rows[target])


def save_run_report(result, output_dir) -> str:
    """
    Save an ingestion result as JSON.

    Args:
        result: IngestionResult to serialize
        output_dir (str): Directory to write the report into

    Returns:
        str: Path of the written report
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    file_path = output_path / REPORT_FILE_NAME

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False, default=str)

    logger.info(f"Run report saved to {file_path}")
    return str(file_path)
