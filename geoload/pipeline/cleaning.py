# ========================
# geoload/pipeline/cleaning.py
# ========================

"""
Record Cleaning Module

Field casters and validators used by schema definitions, and the per-chunk
validator that turns raw CSV records into attribute sets ready for insert.
"""

import logging
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

BLANK = "can't be blank"
INVALID = "is invalid"

# Timestamp fields stamped when a schema does not name its own
DEFAULT_TIMESTAMP_FIELDS = ("inserted_at", "updated_at")

# Plain decimal notation only: no surrounding whitespace, no digit-grouping underscores
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_blank(value: Any) -> bool:
    """Empty and whitespace-only strings count as missing values."""
    return value is None or (isinstance(value, str) and not value.strip())


# ------------------------
# Casters
#
# Each caster takes a raw, non-blank string and returns the converted value,
# or None when the string cannot be converted.
# ------------------------

def cast_string(value: str) -> Optional[str]:
    return value if isinstance(value, str) else None


def cast_decimal(value: str) -> Optional[Decimal]:
    """Converts a plain decimal string to Decimal. NaN, infinities and padded values are rejected."""
    if not isinstance(value, str) or not DECIMAL_PATTERN.fullmatch(value):
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


# ------------------------
# Validators
#
# A validator receives a successfully cast value and returns an error
# message, or None when the value is acceptable.
# ------------------------

def validate_length(min: Optional[int] = None, max: Optional[int] = None) -> Callable[[Any], Optional[str]]:
    """Build a validator bounding the length of a string value."""
    def validator(value: Any) -> Optional[str]:
        length = len(value)
        if min is not None and length < min:
            return f"should be at least {min} character(s)"
        if max is not None and length > max:
            return f"should be at most {max} character(s)"
        return None
    return validator


def validate_number(min: Optional[Any] = None, max: Optional[Any] = None) -> Callable[[Any], Optional[str]]:
    """Build a validator bounding a numeric value (inclusive)."""
    def validator(value: Any) -> Optional[str]:
        if min is not None and value < min:
            return f"must be greater than or equal to {min}"
        if max is not None and value > max:
            return f"must be less than or equal to {max}"
        return None
    return validator


def utc_now_truncated() -> datetime:
    """Current UTC time as a naive datetime with whole-second resolution."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class RecordValidator:
    """
    Applies a schema's validate-and-convert operation to every record of a
    chunk and stamps auto-generated timestamps on the valid ones.
    """

    def __init__(self, schema, clock: Callable[[], datetime] = utc_now_truncated):
        """
        Initialize the record validator.

        Args:
            schema: Schema descriptor providing validate_and_convert and
                has_auto_timestamps; timestamp_fields is optional and
                defaults to inserted_at and updated_at
            clock (callable): Source of the per-chunk timestamp
        """
        self.schema = schema
        self.clock = clock
        self.records_processed = 0
        self.records_rejected = 0

    def validate_chunk(self, chunk: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Validate and convert one chunk of raw records.

        Args:
            chunk (list[dict]): Raw header-keyed records

        Returns:
            list[dict]: Attribute sets for the records that passed validation,
                in input order
        """
        timestamps = self._chunk_timestamps()
        attrs_list = []

        for record in chunk:
            self.records_processed += 1
            result = self.schema.validate_and_convert(record)

            if not result.valid:
                self.records_rejected += 1
                logger.debug(f"Record rejected: {result.errors}, Record: {record}")
                continue

            attrs = dict(result.changes)
            attrs.update(timestamps)
            attrs_list.append(attrs)

        return attrs_list

    def _chunk_timestamps(self) -> Dict[str, datetime]:
        # One value for the whole chunk so every row in it shares the same stamp
        if not self.schema.has_auto_timestamps():
            return {}

        timestamp_fields = getattr(self.schema, "timestamp_fields", None)
        fields = timestamp_fields() if timestamp_fields is not None else DEFAULT_TIMESTAMP_FIELDS

        now = self.clock()
        return {field: now for field in fields}

    def get_statistics(self) -> Dict[str, int]:
        """Get validation statistics."""
        return {
            'records_processed': self.records_processed,
            'records_rejected': self.records_rejected,
            'records_valid': self.records_processed - self.records_rejected,
        }
