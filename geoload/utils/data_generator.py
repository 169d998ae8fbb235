# ========================
# geoload/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Synthetic geolocation CSV files with controlled error and duplicate injection,
for load testing the ingestion pipeline.
"""

import csv
import logging
import random
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

HEADERS = ['ip_address', 'country_code', 'country', 'city', 'latitude', 'longitude', 'mystery_value']

ERROR_TYPES = [
    'missing_city',
    'latitude_out_of_range',
    'longitude_not_a_number',
    'short_ip_address',
    'long_country_code',
]


class GeolocationDataGenerator:
    """
    Data generator for creating realistic geolocation test datasets.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.random = random.Random(seed)

        self.locations = [
            {"country_code": "GB", "country": "United Kingdom", "city": "London", "lat": 51.5072, "lon": -0.1276},
            {"country_code": "GB", "country": "United Kingdom", "city": "Manchester", "lat": 53.4808, "lon": -2.2426},
            {"country_code": "US", "country": "United States", "city": "New York", "lat": 40.7128, "lon": -74.0060},
            {"country_code": "US", "country": "United States", "city": "Chicago", "lat": 41.8781, "lon": -87.6298},
            {"country_code": "DE", "country": "Germany", "city": "Berlin", "lat": 52.5200, "lon": 13.4050},
            {"country_code": "BG", "country": "Bulgaria", "city": "Sofia", "lat": 42.6977, "lon": 23.3219},
            {"country_code": "JP", "country": "Japan", "city": "Tokyo", "lat": 35.6762, "lon": 139.6503},
            {"country_code": "BR", "country": "Brazil", "city": "Sao Paulo", "lat": -23.5558, "lon": -46.6396},
        ]
        logger.info(f"GeolocationDataGenerator initialized with seed: {seed}")

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.15,
                         duplicate_rate: float = 0.05) -> Dict[str, Any]:
        """
        Generate a geolocation CSV file, one row at a time.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of data rows to generate
            error_rate (float): Fraction of rows that fail validation
            duplicate_rate (float): Fraction of valid rows reusing an earlier IP address

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} rows with {error_rate:.1%} error rate...")

        stats = {
            'total_rows': num_rows,
            'error_rate': error_rate,
            'invalid_rows': 0,
            'duplicate_rows': 0,
            'error_types': {},
        }
        used_ips: List[str] = []

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADERS)

            for i in range(num_rows):
                row = self._generate_valid_row(i)

                if self.random.random() < error_rate:
                    error_type = self._inject_error(row)
                    stats['invalid_rows'] += 1
                    stats['error_types'][error_type] = stats['error_types'].get(error_type, 0) + 1
                elif used_ips and self.random.random() < duplicate_rate:
                    row['ip_address'] = self.random.choice(used_ips)
                    stats['duplicate_rows'] += 1
                else:
                    used_ips.append(row['ip_address'])

                writer.writerow([row[header] for header in HEADERS])

                if (i + 1) % 100000 == 0:
                    logger.debug(f"Generated {i + 1:,} rows")

        stats['expected_valid_rows'] = num_rows - stats['invalid_rows']
        stats['expected_imported_rows'] = stats['expected_valid_rows'] - stats['duplicate_rows']

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Error breakdown: {stats['error_types']}")
        return stats

    def _generate_valid_row(self, index: int) -> Dict[str, str]:
        location = self.random.choice(self.locations)
        return {
            'ip_address': self._ip_address(index),
            'country_code': location['country_code'],
            'country': location['country'],
            'city': location['city'],
            'latitude': f"{location['lat'] + self.random.uniform(-0.5, 0.5):.6f}",
            'longitude': f"{location['lon'] + self.random.uniform(-0.5, 0.5):.6f}",
            'mystery_value': str(self.random.randint(0, 9_999_999_999)),
        }

    @staticmethod
    def _ip_address(index: int) -> str:
        # Unique per index, always at least 7 characters long
        return f"10.{(index >> 16) & 255}.{(index >> 8) & 255}.{index & 255}"

    def _inject_error(self, row: Dict[str, str]) -> str:
        error_type = self.random.choice(ERROR_TYPES)

        if error_type == 'missing_city':
            row['city'] = ''
        elif error_type == 'latitude_out_of_range':
            row['latitude'] = f"{self.random.uniform(90.5, 180):.6f}"
        elif error_type == 'longitude_not_a_number':
            row['longitude'] = 'east'
        elif error_type == 'short_ip_address':
            row['ip_address'] = '1.2.3'
        elif error_type == 'long_country_code':
            row['country_code'] = 'ABCD'

        return error_type
