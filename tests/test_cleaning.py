# ========================
# tests/test_cleaning.py
# ========================

import unittest
import sys
import os
from datetime import datetime
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geoload.pipeline.cleaning import (
    DEFAULT_TIMESTAMP_FIELDS,
    RecordValidator,
    cast_decimal,
    cast_string,
    is_blank,
    utc_now_truncated,
    validate_length,
    validate_number,
)
from geoload.pipeline.schema import GEOLOCATION_SCHEMA, FieldSpec, RecordSchema, ValidationResult


def geolocation_row(ip_address='10.0.0.1', **overrides):
    row = {
        'ip_address': ip_address,
        'country_code': 'GB',
        'country': 'United Kingdom',
        'city': 'London',
        'latitude': '51.5072',
        'longitude': '-0.1276',
        'mystery_value': '42',
    }
    row.update(overrides)
    return row


class MinimalCitySchema:
    """Schema exposing only field_names, validate_and_convert and has_auto_timestamps."""

    def field_names(self):
        return ('id', 'city', 'inserted_at', 'updated_at')

    def validate_and_convert(self, raw):
        city = raw.get('city')
        if not city:
            return ValidationResult(changes={}, errors={'city': "can't be blank"})
        return ValidationResult(changes={'city': city}, errors={})

    def has_auto_timestamps(self):
        return True


class TestCasters(unittest.TestCase):

    def test_decimal_casting(self):
        """
        Tests decimal casting with valid values and edge cases.
        """
        decimal_tests = [
            ('51.5072', Decimal('51.5072')),
            ('-0.1276', Decimal('-0.1276')),
            ('+90', Decimal('90')),
            ('.5', Decimal('0.5')),
            ('1e2', Decimal('100')),
            ('4_0', None),
            (' 1.5', None),
            ('1.5 ', None),
            ('1,5', None),
            ('-', None),
            ('not-a-number', None),
            ('NaN', None),
            ('Infinity', None),
        ]

        for input_val, expected in decimal_tests:
            self.assertEqual(cast_decimal(input_val), expected, f"Failed for decimal: {input_val}")

    def test_string_casting_keeps_value(self):
        self.assertEqual(cast_string('  Sofia '), '  Sofia ')

    def test_is_blank(self):
        for value in (None, '', '   ', '\t'):
            self.assertTrue(is_blank(value), repr(value))
        for value in ('0', 'x', ' x '):
            self.assertFalse(is_blank(value), repr(value))


class TestValidators(unittest.TestCase):

    def test_length_bounds(self):
        validator = validate_length(min=7, max=15)
        self.assertIsNone(validator('1.2.3.4'))
        self.assertIsNone(validator('255.255.255.255'))
        self.assertIsNotNone(validator('1.2.3'))
        self.assertIsNotNone(validator('1234.1234.1234.1'))

    def test_number_bounds_are_inclusive(self):
        validator = validate_number(min=Decimal(-90), max=Decimal(90))
        self.assertIsNone(validator(Decimal('-90')))
        self.assertIsNone(validator(Decimal('90')))
        self.assertIsNotNone(validator(Decimal('90.000001')))
        self.assertIsNotNone(validator(Decimal('-91')))


class TestRecordValidator(unittest.TestCase):

    def setUp(self):
        self.stamp = datetime(2024, 3, 1, 12, 30, 15)
        self.validator = RecordValidator(GEOLOCATION_SCHEMA, clock=lambda: self.stamp)

    def test_valid_records_are_converted_and_stamped(self):
        attrs_list = self.validator.validate_chunk([geolocation_row()])

        self.assertEqual(len(attrs_list), 1)
        attrs = attrs_list[0]
        self.assertEqual(attrs['ip_address'], '10.0.0.1')
        self.assertEqual(attrs['latitude'], Decimal('51.5072'))
        self.assertEqual(attrs['inserted_at'], self.stamp)
        self.assertEqual(attrs['updated_at'], self.stamp)

    def test_invalid_records_are_dropped(self):
        chunk = [
            geolocation_row('10.0.0.1'),
            geolocation_row('10.0.0.2', latitude='123'),
            geolocation_row('10.0.0.3', city=''),
            geolocation_row('10.0.0.4'),
        ]

        attrs_list = self.validator.validate_chunk(chunk)

        self.assertEqual([attrs['ip_address'] for attrs in attrs_list], ['10.0.0.1', '10.0.0.4'])
        self.assertEqual(self.validator.get_statistics(), {
            'records_processed': 4,
            'records_rejected': 2,
            'records_valid': 2,
        })

    def test_timestamps_override_input_values(self):
        row = geolocation_row(inserted_at='1999-01-01 00:00:00', updated_at='garbage')

        attrs = self.validator.validate_chunk([row])[0]

        self.assertEqual(attrs['inserted_at'], self.stamp)
        self.assertEqual(attrs['updated_at'], self.stamp)

    def test_one_timestamp_per_chunk(self):
        """Every record in a chunk shares one timestamp; chunks may differ."""
        stamps = iter([datetime(2024, 1, 1, 0, 0, 1), datetime(2024, 1, 1, 0, 0, 2)])
        validator = RecordValidator(GEOLOCATION_SCHEMA, clock=lambda: next(stamps))

        first = validator.validate_chunk([geolocation_row('10.0.0.1'), geolocation_row('10.0.0.2')])
        second = validator.validate_chunk([geolocation_row('10.0.0.3')])

        self.assertEqual({attrs['inserted_at'] for attrs in first}, {datetime(2024, 1, 1, 0, 0, 1)})
        self.assertEqual(second[0]['inserted_at'], datetime(2024, 1, 1, 0, 0, 2))

    def test_schema_without_timestamps(self):
        schema = RecordSchema(name='cities', fields=(FieldSpec('city', required=True),), timestamps=())
        validator = RecordValidator(schema)

        self.assertEqual(validator.validate_chunk([{'city': 'Sofia'}]), [{'city': 'Sofia'}])

    def test_schema_without_timestamp_field_names(self):
        """Schemas that only report has_auto_timestamps get the default timestamp fields."""
        validator = RecordValidator(MinimalCitySchema(), clock=lambda: self.stamp)

        attrs_list = validator.validate_chunk([{'city': 'Sofia'}, {'city': ''}])

        self.assertEqual(attrs_list, [{'city': 'Sofia', 'inserted_at': self.stamp, 'updated_at': self.stamp}])
        self.assertEqual(DEFAULT_TIMESTAMP_FIELDS, ('inserted_at', 'updated_at'))

    def test_empty_chunk(self):
        self.assertEqual(self.validator.validate_chunk([]), [])

    def test_default_clock_has_whole_second_resolution(self):
        now = utc_now_truncated()
        self.assertEqual(now.microsecond, 0)
        self.assertIsNone(now.tzinfo)


if __name__ == '__main__':
    unittest.main()
