# ========================
# geoload/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the ingestion tool with environment support.
"""

import os
from typing import Any, Dict, Optional


class Config:
    """
    Configuration class for the ingestion tool.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Ingestion
        self.DEFAULT_CHUNK_SIZE = int(os.getenv('GEOLOAD_CHUNK_SIZE', '1000'))
        self.READ_AHEAD_BYTES = int(os.getenv('GEOLOAD_READ_AHEAD_BYTES', '100000'))
        self.CSV_DELIMITER = os.getenv('GEOLOAD_CSV_DELIMITER', ',')

        # Named ingestions and run reports
        self.INGESTIONS_FILE = os.getenv('GEOLOAD_INGESTIONS_FILE', 'config/ingestions.json')
        self.REPORT_DIR = os.getenv('GEOLOAD_REPORT_DIR') or None

        # Database
        self.DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///data/geoload.db')
        self.SQL_ECHO = os.getenv('SQL_ECHO', 'false').strip().lower() in {'1', 'true', 'yes', 'on'}

        # Logging
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')
        self.LOG_FILE = os.getenv('LOG_FILE', 'ingestion.log')
        self.LOG_CHUNK_INTERVAL = int(os.getenv('LOG_CHUNK_INTERVAL', '100'))

        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['chunk_size'] = self.DEFAULT_CHUNK_SIZE > 0
        validations['read_ahead'] = self.READ_AHEAD_BYTES > 0
        validations['delimiter'] = len(self.CSV_DELIMITER) == 1
        validations['log_chunk_interval'] = self.LOG_CHUNK_INTERVAL >= 0

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations
