#!/usr/bin/env python3
# ========================
# scripts/run_large_scale_test.py
# ========================

"""
Script to test the ingestion pipeline with a large generated dataset.
It checks the final metrics against what the generator injected.
"""

import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geoload.db import create_db_engine, create_tables
from geoload.pipeline import GEOLOCATION_SCHEMA, SQLAlchemyRepository, ingest
from geoload.utils import GeolocationDataGenerator, setup_logging


def main():
    """Run a large-scale ingestion test."""

    if len(sys.argv) > 1:
        try:
            num_rows = int(sys.argv[1])
        except ValueError:
            print("Usage: python run_large_scale_test.py [num_rows]")
            print("Example: python run_large_scale_test.py 1000000")
            sys.exit(1)
    else:
        num_rows = 1_000_000

    input_file = 'data/raw/large_geoloc_data.csv'
    database_url = 'sqlite:///data/large_scale_test.db'
    chunk_size = 1000

    setup_logging(log_level="INFO")

    print("=" * 60)
    print("LARGE SCALE INGESTION TEST")
    print("=" * 60)
    print(f"Target dataset size: {num_rows:,} rows")
    print(f"Chunk size: {chunk_size:,} rows")
    print(f"Input file: {input_file}")
    print(f"Database: {database_url}")
    print("=" * 60)

    print(f"\nStep 1: Generating {num_rows:,} rows of sample data...")
    stats = GeolocationDataGenerator(seed=42).generate_dataset(input_file, num_rows)

    print("\nStep 2: Ingesting...")
    if os.path.exists('data/large_scale_test.db'):
        os.remove('data/large_scale_test.db')
    engine = create_db_engine(database_url)
    create_tables(engine)

    result = ingest(SQLAlchemyRepository(engine), GEOLOCATION_SCHEMA, input_file, chunk_size)
    metrics = result.metrics

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"Processed: {metrics.processed:,} (expected {stats['total_rows']:,})")
    print(f"Invalid:   {metrics.invalid:,} (expected {stats['invalid_rows']:,})")
    print(f"Imported:  {metrics.imported:,} (expected {stats['expected_imported_rows']:,})")
    print(f"Errors:    {metrics.errors:,} (expected {stats['duplicate_rows']:,})")
    print(f"Elapsed:   {metrics.elapsed_time / 1_000_000:.2f} s")

    matches = (
        metrics.processed == stats['total_rows']
        and metrics.invalid == stats['invalid_rows']
        and metrics.imported == stats['expected_imported_rows']
        and metrics.errors == stats['duplicate_rows']
    )
    print("Metrics match generator stats" if matches else "Metrics DO NOT match generator stats")
    sys.exit(0 if matches else 1)


if __name__ == '__main__':
    main()
