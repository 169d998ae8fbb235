# ========================
# geoload/__init__.py
# ========================

"""
geoload

Streaming, chunked CSV ingestion into a relational store with per-record
validation and auditable outcome metrics.
"""

__version__ = "1.0.0"
