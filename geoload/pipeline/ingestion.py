# ========================
# geoload/pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Handles memory-efficient reading of large CSV files: header inspection,
lazy record decoding and chunked iteration.
"""

import csv
import logging
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_READ_AHEAD = 100_000


def headers_match_schema(headers: Optional[Sequence[str]], field_names: Iterable[str]) -> bool:
    """
    Check that every CSV header is a schema field.

    Schema fields without a matching header are allowed. A missing header
    row (empty file) never matches.
    """
    if not headers:
        return False

    allowed = {str(name) for name in field_names}
    unknown = [header for header in headers if header not in allowed]
    if unknown:
        logger.warning(f"CSV headers not declared by the schema: {unknown}")
        return False
    return True


def chunked(records: Iterable[Dict[str, Any]], chunk_size: int) -> Iterator[List[Dict[str, Any]]]:
    """
    A generator grouping records into lists of at most chunk_size items.
    The final chunk may be smaller.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    iterator = iter(records)
    while True:
        chunk = list(islice(iterator, chunk_size))
        if not chunk:
            return
        yield chunk


class CSVReader:
    """
    A memory-efficient CSV reader that streams a file record by record.
    Only one chunk of decoded records is ever held in memory, plus the
    file object's read-ahead buffer.
    """

    def __init__(self, file_path, read_ahead: int = DEFAULT_READ_AHEAD, delimiter: str = ','):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
            read_ahead (int): Size in bytes of the file read buffer
            delimiter (str): Field delimiter
        """
        self.file_path = file_path
        self.read_ahead = read_ahead
        self.delimiter = delimiter
        self.header: List[str] = []
        logger.info(f"Initialized CSVReader for file: {file_path}")

    def _open(self):
        # utf-8-sig drops a leading BOM so it does not end up in the first header
        return open(self.file_path, 'r', newline='', encoding='utf-8-sig', buffering=self.read_ahead)

    def read_header(self) -> List[str]:
        """
        Read only the first row of the file.

        Returns:
            list[str]: Header strings, empty if the file has no rows
        """
        try:
            with self._open() as f:
                reader = csv.reader(f, delimiter=self.delimiter, strict=True)
                self.header = next(reader, [])
        except OSError as e:
            logger.error(f"Cannot open CSV file '{self.file_path}': {e}")
            raise

        logger.info(f"CSV header: {self.header}")
        return self.header

    def iter_records(self) -> Iterator[Dict[str, Any]]:
        """
        A generator that yields one header-keyed dictionary per data row.

        Raises:
            OSError: If the file cannot be opened
            csv.Error: On malformed row syntax such as unbalanced quotes
        """
        row_count = 0
        try:
            with self._open() as f:
                reader = csv.DictReader(f, delimiter=self.delimiter, strict=True)
                self.header = reader.fieldnames or []

                for row in reader:
                    row_count += 1
                    yield row

        except OSError as e:
            logger.error(f"Cannot open CSV file '{self.file_path}': {e}")
            raise
        except csv.Error as e:
            logger.error(f"Malformed CSV in '{self.file_path}' after {row_count} rows: {e}")
            raise

        logger.info(f"Total rows read: {row_count}")

    def read_in_chunks(self, chunk_size: int) -> Iterator[List[Dict[str, Any]]]:
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.
        """
        for chunk in chunked(self.iter_records(), chunk_size):
            logger.debug(f"Yielding chunk with {len(chunk)} rows")
            yield chunk
