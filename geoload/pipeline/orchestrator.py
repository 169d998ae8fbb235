# ========================
# geoload/pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Coordinates header validation, chunked reading, record validation, batched
persistence and metrics aggregation for one CSV file.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .cleaning import RecordValidator
from .ingestion import DEFAULT_READ_AHEAD, CSVReader, headers_match_schema
from .metrics import ChunkMetrics, IngestionMetrics
from .registry import DEFAULT_CHUNK_SIZE, IngestionRegistry, validate_chunk_size
from .schema import RecordSchema
from .storage import Repository
from ..utils.performance_monitor import monitor_performance

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_INVALID_HEADERS = "invalid_csv_headers"


@dataclass(frozen=True)
class IngestionResult:
    """
    Outcome of an ingestion run: either final metrics or a header mismatch.
    """

    status: str
    metrics: Optional[IngestionMetrics] = None

    @classmethod
    def success(cls, metrics: IngestionMetrics) -> "IngestionResult":
        return cls(status=STATUS_OK, metrics=metrics)

    @classmethod
    def invalid_headers(cls) -> "IngestionResult":
        return cls(status=STATUS_INVALID_HEADERS)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status,
            'metrics': self.metrics.to_dict() if self.metrics is not None else None,
        }


class IngestionPipeline:
    """
    Orchestrates the ingestion of one CSV file into one target table.
    Chunks are validated and persisted strictly one after another.
    """

    def __init__(self,
                 repository: Repository,
                 schema: RecordSchema,
                 input_file: str,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 read_ahead: int = DEFAULT_READ_AHEAD,
                 delimiter: str = ',',
                 log_interval: int = 100):
        """
        Initialize the ingestion pipeline.

        Args:
            repository (Repository): Persistence target
            schema (RecordSchema): Schema used to convert and validate rows
            input_file (str): Path to input CSV file
            chunk_size (int): Number of rows validated and inserted together
            read_ahead (int): Read buffer size in bytes
            delimiter (str): CSV field delimiter
            log_interval (int): Chunks between progress log lines

        Raises:
            ConfigurationError: If chunk_size is not a positive integer
        """
        self.repository = repository
        self.schema = schema
        self.input_file = input_file
        self.chunk_size = validate_chunk_size(chunk_size)
        self.log_interval = log_interval

        self.reader = CSVReader(input_file, read_ahead=read_ahead, delimiter=delimiter)
        self.validator = RecordValidator(schema)

        logger.info("IngestionPipeline initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Target: {self.schema.name}")
        logger.info(f"  Chunk size: {self.chunk_size}")

    def run(self) -> IngestionResult:
        """
        Execute the ingestion from start to finish.

        Returns:
            IngestionResult: Final metrics, or an invalid_csv_headers result
                when the header row names fields the schema does not declare

        Raises:
            OSError: If the input file cannot be opened
            csv.Error: If a row is syntactically malformed
            Exception: Whatever the repository raises when a bulk insert fails
        """
        logger.info(f"Starting ingestion of '{self.input_file}' into '{self.schema.name}'...")

        with monitor_performance(f"Ingestion[{self.schema.name}]", self.log_interval) as monitor:
            headers = self.reader.read_header()
            if not headers_match_schema(headers, self.schema.field_names()):
                logger.error(f"Invalid CSV headers in '{self.input_file}': {headers}")
                return IngestionResult.invalid_headers()

            metrics = self._process_chunks(monitor)

        metrics.finalize(monitor.elapsed_microseconds)
        self._log_final_summary(metrics)
        return IngestionResult.success(metrics)

    def _process_chunks(self, monitor) -> IngestionMetrics:
        """Process input data chunk by chunk, accumulating metrics."""
        metrics = IngestionMetrics()
        chunk_num = 0

        for raw_chunk in self.reader.read_in_chunks(self.chunk_size):
            chunk_num += 1
            chunk_metrics = self._process_chunk(raw_chunk)
            metrics.add(chunk_metrics)

            logger.info(
                f"Chunk {chunk_num}: {chunk_metrics.processed - chunk_metrics.invalid}/{chunk_metrics.processed} "
                f"records passed validation, {chunk_metrics.imported} imported"
            )
            monitor.update_progress(len(raw_chunk))

        return metrics

    def _process_chunk(self, raw_chunk: List[Dict[str, Any]]) -> ChunkMetrics:
        attrs_list = self.validator.validate_chunk(raw_chunk)
        imported_count = self.repository.bulk_insert_ignore_conflicts(self.schema.name, attrs_list)

        return ChunkMetrics.from_counts(
            chunk_size=len(raw_chunk),
            valid_count=len(attrs_list),
            imported_count=imported_count,
        )

    def _log_final_summary(self, metrics: IngestionMetrics) -> None:
        logger.info("=" * 60)
        logger.info("INGESTION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Input file: {self.input_file}")
        logger.info(f"Target: {self.schema.name}")
        logger.info(f"Records processed: {metrics.processed:,}")
        logger.info(f"Records imported: {metrics.imported:,}")
        logger.info(f"Records invalid: {metrics.invalid:,}")
        logger.info(f"Records not persisted: {metrics.errors:,}")
        logger.info(f"Elapsed time: {metrics.elapsed_time:,} us")

        validation_stats = self.validator.get_statistics()
        logger.info("Validation statistics:")
        for key, value in validation_stats.items():
            logger.info(f"  {key}: {value:,}")
        logger.info("=" * 60)


def ingest(repository: Repository,
           schema: RecordSchema,
           csv_path: str,
           chunk_size: int = DEFAULT_CHUNK_SIZE,
           **options) -> IngestionResult:
    """
    Ingest a CSV file into the schema's table through the given repository.

    Args:
        repository (Repository): Persistence target
        schema (RecordSchema): Schema used to convert and validate rows
        csv_path (str): Path to the CSV file; its headers must be schema fields
        chunk_size (int): Rows per bulk insert, defaults to 1000
        **options: read_ahead, delimiter or log_interval for IngestionPipeline

    Returns:
        IngestionResult: Metrics on success, invalid_csv_headers otherwise
    """
    pipeline = IngestionPipeline(repository, schema, csv_path, chunk_size=chunk_size, **options)
    return pipeline.run()


def ingest_named(name: str, csv_path: str, registry: IngestionRegistry, **options) -> IngestionResult:
    """
    Ingest a CSV file using the configuration registered under name.

    Raises:
        UnknownIngestionError: If no ingestion is registered under name
    """
    config = registry.get(name)
    return ingest(config.repository, config.schema, csv_path, config.chunk_size, **options)
