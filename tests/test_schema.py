# ========================
# tests/test_schema.py
# ========================

import unittest
import sys
import os
from decimal import Decimal

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geoload.pipeline.cleaning import BLANK, INVALID, cast_decimal
from geoload.pipeline.errors import ConfigurationError
from geoload.pipeline.schema import GEOLOCATION_SCHEMA, FieldSpec, RecordSchema, get_schema


class TestGeolocationSchema(unittest.TestCase):

    def setUp(self):
        self.raw_record = {
            'ip_address': '200.106.141.15',
            'country_code': 'SI',
            'country': 'Nepal',
            'city': 'DuBuquemouth',
            'latitude': '-84.87503094689836',
            'longitude': '7.206435933364332',
            'mystery_value': '7823011346',
        }

    def test_field_names(self):
        self.assertEqual(GEOLOCATION_SCHEMA.field_names(), (
            'id', 'ip_address', 'country_code', 'country', 'city',
            'latitude', 'longitude', 'mystery_value', 'inserted_at', 'updated_at',
        ))

    def test_has_auto_timestamps(self):
        self.assertTrue(GEOLOCATION_SCHEMA.has_auto_timestamps())
        self.assertEqual(GEOLOCATION_SCHEMA.timestamp_fields(), ('inserted_at', 'updated_at'))

    def test_valid_record(self):
        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertTrue(result.valid)
        self.assertEqual(result.errors, {})
        self.assertEqual(result.changes['latitude'], Decimal('-84.87503094689836'))
        self.assertEqual(result.changes['mystery_value'], '7823011346')

    def test_blank_optional_field_is_not_a_change(self):
        self.raw_record['mystery_value'] = ''

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertTrue(result.valid)
        self.assertNotIn('mystery_value', result.changes)

    def test_missing_optional_field_is_not_a_change(self):
        del self.raw_record['mystery_value']

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertTrue(result.valid)
        self.assertNotIn('mystery_value', result.changes)

    def test_non_castable_fields_are_ignored(self):
        self.raw_record.update({'id': '99', 'inserted_at': 'yesterday'})

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertTrue(result.valid)
        self.assertNotIn('id', result.changes)
        self.assertNotIn('inserted_at', result.changes)

    def test_missing_required_fields(self):
        self.raw_record.update({'ip_address': '', 'city': '   '})

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertFalse(result.valid)
        self.assertEqual(result.errors, {'ip_address': BLANK, 'city': BLANK})

    def test_uncastable_value(self):
        self.raw_record['longitude'] = 'east'

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertFalse(result.valid)
        self.assertEqual(result.errors, {'longitude': INVALID})

    def test_loosely_formatted_coordinates_are_invalid(self):
        self.raw_record.update({'latitude': '4_0', 'longitude': ' 1.5'})

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertFalse(result.valid)
        self.assertEqual(result.errors, {'latitude': INVALID, 'longitude': INVALID})

    def test_out_of_range_coordinates(self):
        self.raw_record.update({'latitude': '90.1', 'longitude': '-180.5'})

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertEqual(set(result.errors), {'latitude', 'longitude'})

    def test_length_rules(self):
        self.raw_record.update({'ip_address': '1.2.3', 'country_code': 'ABCD', 'country': 'x' * 101})

        result = GEOLOCATION_SCHEMA.validate_and_convert(self.raw_record)

        self.assertEqual(set(result.errors), {'ip_address', 'country_code', 'country'})

    def test_get_schema(self):
        self.assertIs(get_schema('geolocations'), GEOLOCATION_SCHEMA)
        with self.assertRaises(ConfigurationError):
            get_schema('missing')


class TestRecordSchemaDeclaration(unittest.TestCase):

    def test_custom_schema(self):
        schema = RecordSchema(
            name='readings',
            fields=(FieldSpec('sensor', required=True), FieldSpec('value', caster=cast_decimal)),
            primary_key=None,
            timestamps=(),
        )

        self.assertEqual(schema.field_names(), ('sensor', 'value'))
        self.assertFalse(schema.has_auto_timestamps())
        self.assertEqual(
            schema.validate_and_convert({'sensor': 's1', 'value': '12'}).changes,
            {'sensor': 's1', 'value': Decimal('12')},
        )

    def test_duplicate_fields_rejected(self):
        with self.assertRaises(ConfigurationError):
            RecordSchema(name='bad', fields=(FieldSpec('a'), FieldSpec('a')))

    def test_unique_key_must_be_declared(self):
        with self.assertRaises(ConfigurationError):
            RecordSchema(name='bad', fields=(FieldSpec('a'),), unique_key=('b',))


if __name__ == '__main__':
    unittest.main()
