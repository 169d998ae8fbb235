# ========================
# geoload/pipeline/errors.py
# ========================

"""
Exception types raised by the ingestion pipeline.

Header mismatches are not exceptions; they are returned as an
``IngestionResult`` with status ``invalid_csv_headers``.
"""


class IngestionError(Exception):
    """Base class for ingestion failures."""


class ConfigurationError(IngestionError, ValueError):
    """Raised for unusable chunk sizes, schemas, targets or registry entries."""


class UnknownIngestionError(ConfigurationError):
    """Raised when a named ingestion is not present in the registry."""

    def __init__(self, name: str):
        super().__init__(f"No ingestion configured under the name '{name}'")
        self.name = name


class UnknownTargetError(ConfigurationError):
    """Raised when a repository is asked to write to a target it does not know."""

    def __init__(self, target: str):
        super().__init__(f"Unknown persistence target '{target}'")
        self.target = target
