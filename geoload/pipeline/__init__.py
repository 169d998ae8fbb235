# ========================
# geoload/pipeline/__init__.py
# ========================

"""
Ingestion Pipeline Package

This package contains all core components of the CSV ingestion pipeline:
- ingestion: Header check, lazy CSV decoding and chunking
- schema: Declarative record schemas
- cleaning: Field casters, validators and per-chunk record validation
- storage: Insert-if-absent repositories and run reports
- metrics: Per-chunk and running outcome counts
- registry: Named ingestion configurations
- orchestrator: Pipeline coordination
"""

from .errors import ConfigurationError, IngestionError, UnknownIngestionError, UnknownTargetError
from .ingestion import CSVReader, chunked, headers_match_schema
from .schema import GEOLOCATION_SCHEMA, FieldSpec, RecordSchema, ValidationResult, get_schema
from .cleaning import RecordValidator
from .storage import InMemoryRepository, Repository, SQLAlchemyRepository, save_run_report
from .metrics import ChunkMetrics, IngestionMetrics
from .registry import IngestionConfig, IngestionRegistry
from .orchestrator import IngestionPipeline, IngestionResult, ingest, ingest_named

__all__ = [
    'CSVReader',
    'ChunkMetrics',
    'ConfigurationError',
    'FieldSpec',
    'GEOLOCATION_SCHEMA',
    'IngestionConfig',
    'IngestionError',
    'IngestionMetrics',
    'IngestionPipeline',
    'IngestionRegistry',
    'IngestionResult',
    'InMemoryRepository',
    'RecordSchema',
    'RecordValidator',
    'Repository',
    'SQLAlchemyRepository',
    'UnknownIngestionError',
    'UnknownTargetError',
    'ValidationResult',
    'chunked',
    'get_schema',
    'headers_match_schema',
    'ingest',
    'ingest_named',
    'save_run_report',
]
