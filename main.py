#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Geolocation CSV Ingestion Tool

Ingests a CSV file using a named ingestion configuration:

    python main.py <ingestion_name> <csv_path>

The named ingestions are read from GEOLOAD_INGESTIONS_FILE and all write to
the database at DATABASE_URL.
"""

import logging
import sys
from typing import List, Optional

from geoload.db import create_db_engine, create_tables
from geoload.pipeline import IngestionRegistry, SQLAlchemyRepository, ingest_named, save_run_report
from geoload.utils import Config, setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_HEADERS = 2

USAGE = "Usage: python main.py <ingestion_name> <csv_path>"


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 2:
        print(USAGE, file=sys.stderr)
        return EXIT_FAILURE

    ingestion_name, csv_path = args

    try:
        config = Config()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file=config.LOG_FILE,
        log_dir=config.LOG_DIR
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info(f"CSV INGESTION - {ingestion_name}: {csv_path}")
    logger.info("=" * 60)

    validations = config.validate_config()
    failed = [name for name, passed in validations.items() if not passed]
    if failed:
        logger.error(f"Invalid configuration settings: {', '.join(failed)}")
        return EXIT_FAILURE

    try:
        engine = create_db_engine(config.DATABASE_URL, echo=config.SQL_ECHO)
        create_tables(engine)

        repository = SQLAlchemyRepository(engine)
        registry = IngestionRegistry.from_file(
            config.INGESTIONS_FILE,
            repository,
            default_chunk_size=config.DEFAULT_CHUNK_SIZE
        )

        result = ingest_named(
            ingestion_name,
            csv_path,
            registry,
            read_ahead=config.READ_AHEAD_BYTES,
            delimiter=config.CSV_DELIMITER,
            log_interval=config.LOG_CHUNK_INTERVAL
        )

        if config.REPORT_DIR:
            save_run_report(result, config.REPORT_DIR)

        if not result.ok:
            logger.error(f"Ingestion '{ingestion_name}' rejected: {result.status}")
            return EXIT_INVALID_HEADERS

        logger.info(f"Ingestion '{ingestion_name}' completed: {result.metrics}")
        return EXIT_OK

    except Exception as e:
        logger.error(f"Ingestion '{ingestion_name}' failed: {e}", exc_info=True)
        return EXIT_FAILURE


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
