# ========================
# geoload/db/__init__.py
# ========================

"""
Relational storage for ingested records.
"""

from .models import Base, Geolocation
from .session import create_db_engine, create_tables

__all__ = [
    'Base',
    'Geolocation',
    'create_db_engine',
    'create_tables',
]
