# ========================
# geoload/pipeline/schema.py
# ========================

"""
Schema Definitions

A schema declares, once and up front, which fields a target table has, how
each raw CSV value is converted and which rules a converted record must
satisfy before it is persisted.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from .cleaning import (
    BLANK,
    INVALID,
    cast_decimal,
    cast_string,
    is_blank,
    validate_length,
    validate_number,
)
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Caster = Callable[[str], Any]
Validator = Callable[[Any], Optional[str]]


@dataclass(frozen=True)
class FieldSpec:
    """A castable schema field and the rules applied to it."""

    name: str
    caster: Caster = cast_string
    required: bool = False
    validators: Tuple[Validator, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of converting one raw record."""

    changes: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RecordSchema:
    """
    Statically declared description of a target table.

    Attributes:
        name (str): Target table name, used as the persistence target
        fields (tuple[FieldSpec]): Castable fields in declaration order
        primary_key (str): Store-generated key; accepted as a header, never cast
        timestamps (tuple[str]): Fields stamped once per chunk at insert time
        unique_key (tuple[str]): Natural uniqueness constraint of the table
    """

    name: str
    fields: Tuple[FieldSpec, ...]
    primary_key: Optional[str] = "id"
    timestamps: Tuple[str, ...] = ("inserted_at", "updated_at")
    unique_key: Tuple[str, ...] = ()

    def __post_init__(self):
        names = [spec.name for spec in self.fields]
        if len(names) != len(set(names)):
            raise ConfigurationError(f"Duplicate field names in schema '{self.name}': {names}")

        for key in self.unique_key:
            if key not in names:
                raise ConfigurationError(f"Unique key field '{key}' is not declared in schema '{self.name}'")

    def field_names(self) -> Tuple[str, ...]:
        """All field names a CSV header may use, as strings."""
        names = [self.primary_key] if self.primary_key else []
        names.extend(spec.name for spec in self.fields)
        names.extend(self.timestamps)
        return tuple(names)

    def has_auto_timestamps(self) -> bool:
        return bool(self.timestamps)

    def timestamp_fields(self) -> Tuple[str, ...]:
        return self.timestamps

    def validate_and_convert(self, raw: Dict[str, Any]) -> ValidationResult:
        """
        Cast the declared fields of a raw record and run their validations.

        Only fields that are present and non-blank end up in ``changes``.
        Headers that name non-castable fields (primary key, timestamps) are
        ignored.

        Args:
            raw (dict): Header-keyed raw string values

        Returns:
            ValidationResult: Converted changes and a field -> message error map
        """
        changes: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        for spec in self.fields:
            value = raw.get(spec.name)
            if is_blank(value):
                continue

            converted = spec.caster(value)
            if converted is None:
                errors[spec.name] = INVALID
            else:
                changes[spec.name] = converted

        for spec in self.fields:
            if spec.required and spec.name not in changes and spec.name not in errors:
                errors[spec.name] = BLANK

        for spec in self.fields:
            if spec.name not in changes:
                continue
            for validator in spec.validators:
                message = validator(changes[spec.name])
                if message:
                    errors.setdefault(spec.name, message)
                    break

        return ValidationResult(changes=changes, errors=errors)


GEOLOCATION_SCHEMA = RecordSchema(
    name="geolocations",
    fields=(
        FieldSpec("ip_address", required=True, validators=(validate_length(min=7, max=15),)),
        FieldSpec("country_code", required=True, validators=(validate_length(min=2, max=3),)),
        FieldSpec("country", required=True, validators=(validate_length(max=100),)),
        FieldSpec("city", required=True, validators=(validate_length(max=100),)),
        FieldSpec(
            "latitude",
            caster=cast_decimal,
            required=True,
            validators=(validate_number(min=Decimal(-90), max=Decimal(90)),),
        ),
        FieldSpec(
            "longitude",
            caster=cast_decimal,
            required=True,
            validators=(validate_number(min=Decimal(-180), max=Decimal(180)),),
        ),
        FieldSpec("mystery_value"),
    ),
    unique_key=("ip_address",),
)

SCHEMAS: Dict[str, RecordSchema] = {
    GEOLOCATION_SCHEMA.name: GEOLOCATION_SCHEMA,
}


def get_schema(name: str) -> RecordSchema:
    """Look up a schema by its table name."""
    try:
        return SCHEMAS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown schema '{name}'. Available: {sorted(SCHEMAS)}") from None
