"""
Round-trip behaviour of the binary, XML and JSON codecs.
"""
import datetime

import pytest
from datahelpers import FormatError, clone, deserialize_from_binary
from datahelpers import deserialize_from_json, deserialize_from_xml
from datahelpers import serialize_to_binary, serialize_to_json, serialize_to_xml
from tests.fixtures.records import Account, Address, Customer, Person, Trade
from tests.fixtures.records import Widget


@pytest.fixture
def customer():
    return Customer(
        name='Ada',
        address=Address(street='1 Main St', city='Springfield'),
        tags=['vip', 'early'],
        birthday=datetime.date(1990, 12, 10),
    )


class TestBinary:

    def test_round_trip(self, trades):
        text = serialize_to_binary(trades)
        assert isinstance(text, str)
        assert deserialize_from_binary(text) == trades

    def test_expected_type(self, people):
        text = serialize_to_binary(people[0])
        assert deserialize_from_binary(text, Person) == people[0]
        with pytest.raises(FormatError):
            deserialize_from_binary(text, Trade)

    @pytest.mark.parametrize('text', ['not base64!', '', 'aGVsbG8='])
    def test_malformed(self, text):
        """Invalid base64 or a non-pickle payload raises FormatError"""
        with pytest.raises(FormatError):
            deserialize_from_binary(text)


class TestXml:

    def test_layout(self, people):
        """Root named after the type, one child per attribute, None omitted"""
        assert serialize_to_xml(people[0]) == '<Person><Id>1</Id><Name>A</Name></Person>'
        assert serialize_to_xml(people[1]) == '<Person><Id>2</Id></Person>'

    def test_empty_string_has_end_tag(self):
        assert serialize_to_xml(Person(3, '')) == '<Person><Id>3</Id><Name></Name></Person>'

    def test_round_trip_with_nulls(self, people):
        for person in people:
            assert deserialize_from_xml(serialize_to_xml(person), Person) == person

    def test_round_trip_scalars(self, trades):
        """Decimal, datetime and bool values survive the text form"""
        for trade in trades:
            assert deserialize_from_xml(serialize_to_xml(trade), Trade) == trade

    def test_round_trip_nested(self, customer):
        text = serialize_to_xml(customer)
        assert '<address><street>1 Main St</street>' in text
        assert '<tags><str>vip</str><str>early</str></tags>' in text
        assert deserialize_from_xml(text, Customer) == customer

    def test_round_trip_pydantic(self):
        account = Account(number='A-1', balance=12.5)
        assert deserialize_from_xml(serialize_to_xml(account), Account) == account

    def test_malformed(self):
        with pytest.raises(FormatError):
            deserialize_from_xml('<Person><Id>1</Id>', Person)

    def test_wrong_root(self, people):
        with pytest.raises(FormatError, match='root'):
            deserialize_from_xml(serialize_to_xml(people[0]), Trade)

    def test_invalid_value(self):
        with pytest.raises(FormatError):
            deserialize_from_xml('<Person><Id>one</Id></Person>', Person)


class TestJson:

    def test_round_trip(self, people):
        text = serialize_to_json(people[0])
        assert text == '{"Id":1,"Name":"A"}'
        assert deserialize_from_json(text, Person) == people[0]

    def test_generic_container(self, trades):
        text = serialize_to_json(trades, list[Trade])
        assert deserialize_from_json(text, list[Trade]) == trades

    def test_malformed(self):
        with pytest.raises(FormatError):
            deserialize_from_json('{"Id": 1', Person)

    def test_invalid_value(self):
        with pytest.raises(FormatError):
            deserialize_from_json('{"Id": "x", "Name": null}', Person)


class TestUnstructuredTypes:
    """Plain classes serialize to XML but cannot be rebuilt structurally"""

    def test_xml_round_trip_raises_format_error(self):
        text = serialize_to_xml(Widget('a', 2, 3))
        assert text.startswith('<Widget><sku>a</sku>')
        with pytest.raises(FormatError, match='Widget'):
            deserialize_from_xml(text, Widget)

    def test_json_raises_format_error(self):
        with pytest.raises(FormatError):
            serialize_to_json(Widget('a', 2, 3))
        with pytest.raises(FormatError):
            deserialize_from_json('{"sku": "a"}', Widget)

    def test_clone_raises_format_error(self):
        with pytest.raises(FormatError):
            clone(Widget('a', 2, 3))


class TestClone:

    def test_clone_is_equal_and_independent(self, customer):
        copy = clone(customer)
        assert copy == customer
        assert copy is not customer
        assert copy.address is not customer.address
        copy.tags.append('new')
        assert customer.tags == ['vip', 'early']

    def test_clone_none(self):
        assert clone(None) is None

    def test_clone_list(self, people):
        copy = clone(people, list[Person])
        assert copy == people
        assert copy[0] is not people[0]


if __name__ == '__main__':
    __import__('pytest').main([__file__])
