# ========================
# geoload/pipeline/registry.py
# ========================

"""
Named Ingestion Registry

Maps a symbolic ingestion name to the repository, schema and chunk size it
runs with, so callers only need to supply a name and a CSV path.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import ConfigurationError, UnknownIngestionError
from .schema import RecordSchema, get_schema
from .storage import Repository

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000


def validate_chunk_size(chunk_size) -> int:
    """Return chunk_size if it is a positive integer, else raise ConfigurationError."""
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be a positive integer, got {chunk_size!r}")
    return chunk_size


@dataclass(frozen=True)
class IngestionConfig:
    repository: Repository
    schema: RecordSchema
    chunk_size: int = DEFAULT_CHUNK_SIZE


class IngestionRegistry:
    """
    Registry of named ingestion configurations.
    """

    def __init__(self, entries: Optional[Dict[str, IngestionConfig]] = None):
        self._entries: Dict[str, IngestionConfig] = dict(entries or {})

    def register(self,
                 name: str,
                 repository: Repository,
                 schema: RecordSchema,
                 chunk_size: Optional[int] = None) -> IngestionConfig:
        """
        Register an ingestion under a name, replacing any previous entry.

        Args:
            name (str): Symbolic ingestion name
            repository (Repository): Persistence target
            schema (RecordSchema): Schema used to convert and validate rows
            chunk_size (int): Rows per insert; defaults to 1000

        Returns:
            IngestionConfig: The stored configuration
        """
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Ingestion name must be a non-empty string, got {name!r}")

        size = DEFAULT_CHUNK_SIZE if chunk_size is None else validate_chunk_size(chunk_size)
        entry = IngestionConfig(repository=repository, schema=schema, chunk_size=size)
        self._entries[name] = entry
        logger.debug(f"Registered ingestion '{name}' -> schema={schema.name}, chunk_size={size}")
        return entry

    def get(self, name: str) -> IngestionConfig:
        try:
            return self._entries[name]
        except (KeyError, TypeError):
            raise UnknownIngestionError(name) from None

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_file(cls,
                  file_path: str,
                  repository: Repository,
                  default_chunk_size: int = DEFAULT_CHUNK_SIZE) -> 'IngestionRegistry':
        """
        Load named ingestions from a JSON file.

        Expected layout::

            {"ingestions": {"uk_daily": {"schema": "geolocations", "chunk_size": 500}}}

        All entries share the given repository.
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid ingestion config file {file_path}: {e}") from e

        ingestions = data.get('ingestions') if isinstance(data, dict) else None
        if not isinstance(ingestions, dict):
            raise ConfigurationError(f"{file_path} must contain an 'ingestions' object")

        registry = cls()
        for name, entry in ingestions.items():
            if not isinstance(entry, dict) or 'schema' not in entry:
                raise ConfigurationError(f"Ingestion '{name}' in {file_path} must name a schema")

            registry.register(
                name,
                repository,
                get_schema(entry['schema']),
                entry.get('chunk_size', default_chunk_size),
            )

        if not registry:
            logger.warning(f"No ingestions configured in {file_path}")
        else:
            logger.info(f"Loaded {len(registry)} ingestion(s) from {file_path}: {registry.names()}")

        return registry
