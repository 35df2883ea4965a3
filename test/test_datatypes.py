# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import pytest

from raml2swagger.datatypes import (DataType, TypeConverter, example_value,
                                    split_union)
from raml2swagger.raml_loader import json_dict
from raml2swagger.exceptions import ConversionError


@pytest.fixture
def converter():
    types = {
        'Author': DataType('Author', {'properties': {'name': 'string'}}),
        'lib.Publisher': DataType('lib.Publisher', 'object', 'lib.'),
    }
    return TypeConverter(types)


@pytest.mark.parametrize('expr,expected', [
    ('string', {'type': 'string'}),
    ('integer', {'type': 'integer'}),
    ('boolean', {'type': 'boolean'}),
    ('date-only', {'type': 'string', 'format': 'date'}),
    ('datetime', {'type': 'string', 'format': 'date-time'}),
    ('file', {'type': 'file'}),
    ('any', {}),
    ('object', {'type': 'object'}),
    ('string[]', {'type': 'array', 'items': {'type': 'string'}}),
    ('(string | nil)[]', {'type': 'array',
                          'items': {'type': 'string', 'x-nullable': True}}),
])
def test_builtin_expressions(converter, expr, expected):
    assert converter.convert(expr) == expected


def test_named_type_is_ref(converter):
    assert converter.convert('Author') == {'$ref': '#/definitions/Author'}
    assert converter.convert('Author[]') == {
        'type': 'array', 'items': {'$ref': '#/definitions/Author'}}


def test_library_namespace(converter):
    assert converter.convert('Publisher', 'lib.') == {
        '$ref': '#/definitions/lib.Publisher'}
    assert converter.resolve_name('Publisher') is None
    assert converter.resolve_name('Author', 'lib.') == 'Author'


def test_unknown_type(converter):
    with pytest.raises(ConversionError) as excinfo:
        converter.convert('Missing')
    assert "Unknown type 'Missing'" in str(excinfo.value)


def test_union_rejected(converter):
    with pytest.raises(ConversionError) as excinfo:
        converter.convert('Author | string')
    assert 'Union type' in str(excinfo.value)


def test_nullable_ref(converter):
    assert converter.convert('Author | nil') == {
        'allOf': [{'$ref': '#/definitions/Author'}], 'x-nullable': True}


def test_nil_rejected(converter):
    with pytest.raises(ConversionError):
        converter.convert('nil')


def test_xml_schema_rejected(converter):
    with pytest.raises(ConversionError):
        converter.convert('<xs:schema/>')


def test_default_type(converter):
    assert converter.convert(None) == {'type': 'string'}
    assert converter.convert(None, default='any') == {}
    assert converter.convert({'description': 'x'}, default='object') == {
        'type': 'object', 'description': 'x'}


def test_object(converter):
    schema = converter.convert({
        'type': 'object',
        'displayName': 'Book',
        'properties': {
            'title': {'type': 'string', 'minLength': 1},
            'isbn?': 'string',
            'tags': {'type': 'string[]', 'required': False},
            'author': 'Author',
        },
        'additionalProperties': False,
    })
    assert schema == {
        'type': 'object',
        'properties': {
            'title': {'type': 'string', 'minLength': 1},
            'isbn': {'type': 'string'},
            'tags': {'type': 'array', 'items': {'type': 'string'}},
            'author': {'$ref': '#/definitions/Author'},
        },
        'required': ['title', 'author'],
        'additionalProperties': False,
        'title': 'Book',
    }


def test_implicit_object_and_array(converter):
    assert converter.convert({'properties': {'a': 'integer'}}) == {
        'type': 'object', 'properties': {'a': {'type': 'integer'}},
        'required': ['a']}
    assert converter.convert({'items': 'Author'}) == {
        'type': 'array', 'items': {'$ref': '#/definitions/Author'}}
    assert converter.convert({'type': 'array'}) == {
        'type': 'array', 'items': {}}


def test_pattern_properties(converter):
    schema = converter.convert({'properties': {'/^x-/': 'string'}})
    assert schema == {'type': 'object',
                      'additionalProperties': {'type': 'string'}}


def test_discriminator(converter):
    schema = converter.convert({
        'type': 'object',
        'discriminator': 'kind',
        'discriminatorValue': 'book',
        'properties': {'kind?': 'string'},
    })
    assert schema['required'] == ['kind']
    assert schema['discriminator'] == 'kind'
    assert schema['x-discriminator-value'] == 'book'


def test_inheritance(converter):
    schema = converter.convert({'type': 'Author',
                                'properties': {'born': 'date-only'}})
    assert schema == {'allOf': [
        {'$ref': '#/definitions/Author'},
        {'type': 'object',
         'properties': {'born': {'type': 'string', 'format': 'date'}},
         'required': ['born']}]}

    multiple = converter.convert({'type': ['Author', 'lib.Publisher']})
    assert multiple == {'allOf': [{'$ref': '#/definitions/Author'},
                                  {'$ref': '#/definitions/lib.Publisher'}]}


def test_ref_with_facets(converter):
    assert converter.convert({'type': 'Author'}) == {
        '$ref': '#/definitions/Author'}
    assert converter.convert({'type': 'Author', 'description': 'x'}) == {
        'allOf': [{'$ref': '#/definitions/Author'}], 'description': 'x'}


def test_number_format(converter):
    assert converter.convert({'type': 'integer', 'format': 'int8',
                              'minimum': 0}) == {
        'type': 'integer', 'minimum': 0, 'format': 'int32'}
    assert converter.convert({'type': 'number', 'format': 'double'}) == {
        'type': 'number', 'format': 'double'}


def test_examples(converter):
    schema = converter.convert({'type': 'string', 'example': 'abc'})
    assert schema['example'] == 'abc'

    schema = converter.convert({'type': 'string',
                                'examples': {'one': 'a', 'two': 'b'}})
    assert schema['example'] == 'a'

    assert example_value({'value': 3, 'strict': False}) == 3
    assert example_value({'value': 3, 'other': 4}) == {'value': 3,
                                                       'other': 4}


def test_json_schema(converter):
    schema = json_dict([('$schema', 'http://json-schema.org/draft-04/schema'),
                        ('type', 'object'),
                        ('required', ['name'])])
    assert converter.convert(schema) == {'type': 'object',
                                         'required': ['name']}

    assert converter.convert('{"type": "integer", "id": "x"}') == {
        'type': 'integer'}

    with pytest.raises(ConversionError):
        converter.convert('{"type": ')


def test_definitions(converter):
    definitions = converter.definitions()
    assert list(definitions.keys()) == ['Author', 'lib.Publisher']
    assert definitions['lib.Publisher'] == {'type': 'object'}


def test_split_union():
    assert split_union('A | (B | C)[] | nil') == ['A', '(B | C)[]', 'nil']
