import datetime
import decimal

import pytest
from datahelpers import MappingError, ValidationError, format_csv_value, to_csv
from datahelpers.cache import DescriptorCache
from tests.fixtures.records import Broken, Person, Point, Settings


def test_person_csv(people):
    """One line per record, strings quoted, null as empty quotes"""
    assert to_csv(people) == '1,"A"\n2,""\n'


def test_empty_input():
    """No records produce an empty string"""
    assert to_csv([]) == ''
    assert to_csv([], Person) == ''


def test_custom_line_separator(people):
    """Every line, including the last, ends with the separator"""
    assert to_csv(people, line_separator='\r\n') == '1,"A"\r\n2,""\r\n'


def test_empty_line_separator(people):
    with pytest.raises(ValidationError):
        to_csv(people, line_separator='')


def test_empty_line_separator_with_empty_input():
    """The separator is validated whether or not there are records"""
    with pytest.raises(ValidationError):
        to_csv([], Person, line_separator='')


def test_plain_dict_records_rejected():
    with pytest.raises(ValidationError, match='TypedDict'):
        to_csv([{'Id': 1}])


def test_typeddict_records():
    assert to_csv([{'key': 'a', 'value': None}], Settings) == '"a",""\n'


@pytest.mark.parametrize(('value', 'expected'), [
    (None, '""'),
    ('', '""'),
    ('plain', '"plain"'),
    ('say "hi"', '"say \\"hi\\""'),
    ('12', '"12"'),
    (42, '42'),
    (-1.25, '-1.25'),
    (decimal.Decimal('10.50'), '10.50'),
    (float('nan'), 'nan'),
    (True, '"True"'),
    (datetime.date(2024, 1, 2), '"2024-01-02"'),
])
def test_format_csv_value(value, expected):
    """Strings are always quoted; other values only when not numeric text"""
    assert format_csv_value(value) == expected


def test_numeric_strings_stay_quoted():
    """A str is quoted even when its text is numeric"""
    assert to_csv([Person(7, '3.14')]) == '7,"3.14"\n'


def test_namedtuple_records():
    assert to_csv([Point(1, 2), Point(3, 4)]) == '1,2\n3,4\n'


def test_failing_getter():
    with pytest.raises(MappingError):
        to_csv([Broken()])


def test_uses_given_cache(people):
    """Descriptors are stored in the cache passed in"""
    cache = DescriptorCache()
    to_csv(people, cache=cache)
    assert Person in cache


if __name__ == '__main__':
    __import__('pytest').main([__file__])
