# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
This module converts RAML 1.0 data type declarations into Swagger 2.0
schema objects.

A declaration may be a type expression, a mapping of facets, or a JSON
schema (inline text or an included `.json` file).  Consider:

    >>> types = {'Author': DataType('Author', {'properties': {'name': None}})}
    >>> TypeConverter(types).convert({
            'type': 'object',
            'properties': {
                'title': 'string',
                'authors': 'Author[]',
                'isbn?': {'type': 'string', 'pattern': '^[0-9-]+$'}
            }})
    {'type': 'object',
     'properties': {
        'title': {'type': 'string'},
        'authors': {'type': 'array',
                    'items': {'$ref': '#/definitions/Author'}},
        'isbn': {'type': 'string', 'pattern': '^[0-9-]+$'}},
     'required': ['title', 'authors']}

Named types always become references into the Swagger `definitions`.
"""

import json
import logging
from collections import OrderedDict

from raml2swagger.raml_loader import json_dict
from raml2swagger.exceptions import ConversionError
from raml2swagger.util import plain, pointer

__all__ = ['DataType', 'TypeConverter']

logger = logging.getLogger(__name__)

# Map of RAML built-in type to the Swagger schema that represents it
SCALAR_TYPES = {
    'string': {'type': 'string'},
    'number': {'type': 'number'},
    'integer': {'type': 'integer'},
    'boolean': {'type': 'boolean'},
    'date-only': {'type': 'string', 'format': 'date'},
    'datetime': {'type': 'string', 'format': 'date-time'},
    'datetime-only': {'type': 'string'},
    'time-only': {'type': 'string'},
    'file': {'type': 'file'},
    'any': {},
}

# RAML facet name, Swagger schema property name
FACETS = [
    ('displayName', 'title'),
    ('description', 'description'),
    ('default', 'default'),
    ('enum', 'enum'),
    ('pattern', 'pattern'),
    ('minLength', 'minLength'),
    ('maxLength', 'maxLength'),
    ('minimum', 'minimum'),
    ('maximum', 'maximum'),
    ('multipleOf', 'multipleOf'),
    ('minItems', 'minItems'),
    ('maxItems', 'maxItems'),
    ('uniqueItems', 'uniqueItems'),
    ('minProperties', 'minProperties'),
    ('maxProperties', 'maxProperties'),
]

NUMBER_FORMATS = {
    'int8': 'int32',
    'int16': 'int32',
    'int32': 'int32',
    'int': 'int32',
    'int64': 'int64',
    'long': 'int64',
    'float': 'float',
    'double': 'double',
}

# Keys allowed next to 'value' when an example is given in expanded form
EXAMPLE_KEYS = frozenset(['value', 'strict', 'displayName', 'description'])


class DataType(object):
    """ A named type declared under `types` (or `schemas`).

    :param name: the name, qualified by its library namespace
    :param decl: the declaration as loaded
    :param namespace: prefix of the library that declared the type,
        e.g. 'lib.', used to resolve unqualified references in `decl`

    """
    def __init__(self, name, decl, namespace=''):
        self.name = name
        self.decl = decl
        self.namespace = namespace

    def __repr__(self):
        return "<DataType '%s'>" % self.name


def example_value(example):
    """Return the example value of a RAML `example` facet."""
    if (  isinstance(example, dict) and 'value' in example and
          set(k for k in example if not str(k).startswith('(')) <=
          EXAMPLE_KEYS):
        example = example['value']
    return plain(example)


def split_union(expr):
    """Split a type expression on top level '|' operators."""
    terms = []
    depth = 0
    start = 0
    for i, c in enumerate(expr):
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
        elif c == '|' and depth == 0:
            terms.append(expr[start:i].strip())
            start = i + 1
    terms.append(expr[start:].strip())
    return terms


class TypeConverter(object):
    """ Converts RAML type declarations to Swagger schema objects.

    :param types: mapping of qualified type name to DataType

    """
    def __init__(self, types):
        self.types = types

    def resolve_name(self, name, namespace=''):
        """Return the qualified name `name` refers to, or None."""
        if namespace and (namespace + name) in self.types:
            return namespace + name
        if name in self.types:
            return name
        return None

    def definitions(self):
        """Return the Swagger `definitions` for every declared type."""
        result = OrderedDict()
        for name, datatype in self.types.items():
            logger.debug("Converting type %s" % name)
            result[name] = self.convert(datatype.decl, datatype.namespace)
        return result

    def convert(self, decl, namespace='', default='string'):
        """Convert a declaration to a Swagger schema.

        :param decl: None, a type expression, a facet mapping or a
            JSON schema
        :param namespace: library prefix for resolving type names
        :param default: built-in type used when `decl` names none
        :raises ConversionError: if the type cannot be represented
        """
        if decl is None:
            return self.expression(default, namespace)

        if isinstance(decl, json_dict):
            return self.json_schema(decl)

        if isinstance(decl, str):
            return self.expression(decl, namespace)

        if isinstance(decl, list):
            return OrderedDict([('allOf', [self.convert(d, namespace)
                                           for d in decl])])

        if not isinstance(decl, dict):
            raise ConversionError("Invalid type declaration: %r" % (decl,),
                                  decl)

        return self.declaration(decl, namespace, default)

    def declaration(self, decl, namespace, default):
        base = decl.get('type', decl.get('schema'))
        if base is None:
            if 'properties' in decl:
                base = 'object'
            elif 'items' in decl:
                base = 'array'
            else:
                base = default

        if isinstance(base, str) and base.strip() == 'object':
            schema = self.object(decl, namespace)
        elif isinstance(base, str) and base.strip() == 'array':
            schema = self.array(decl, namespace)
        else:
            schema = self.convert(base, namespace)
            if 'properties' in decl or 'items' in decl:
                extension = (self.object(decl, namespace)
                             if 'properties' in decl
                             else self.array(decl, namespace))
                if 'allOf' in schema:
                    schema['allOf'].append(extension)
                else:
                    schema = OrderedDict([('allOf', [schema, extension])])
            elif '$ref' in schema:
                if not self.has_facets(decl):
                    return schema
                # Siblings of $ref are ignored, keep facets next to allOf
                schema = OrderedDict([('allOf', [schema])])

        self.facets(schema, decl)
        return schema

    def has_facets(self, decl):
        return (any(decl.get(k) is not None for k, _ in FACETS) or
                'example' in decl or 'examples' in decl)

    def facets(self, schema, decl):
        for raml_key, swagger_key in FACETS:
            if decl.get(raml_key) is not None:
                schema[swagger_key] = plain(decl[raml_key])

        fmt = decl.get('format')
        if fmt is not None and schema.get('type') in ('number', 'integer'):
            if fmt in NUMBER_FORMATS:
                schema['format'] = NUMBER_FORMATS[fmt]
            else:
                logger.warning("Ignoring unknown number format '%s'" % fmt)

        if 'example' in decl:
            schema['example'] = example_value(decl['example'])
        elif isinstance(decl.get('examples'), dict) and decl['examples']:
            first = next(iter(decl['examples'].values()))
            schema['example'] = example_value(first)

    def object(self, decl, namespace):
        schema = OrderedDict([('type', 'object')])
        properties = OrderedDict()
        required = []
        additional = None

        for name, pdecl in (decl.get('properties') or {}).items():
            name = str(name)
            if len(name) > 1 and name.startswith('/') and name.endswith('/'):
                # Pattern properties
                additional = self.convert(pdecl, namespace)
                continue

            is_required = True
            if name.endswith('?'):
                name = name[:-1]
                is_required = False
            if isinstance(pdecl, dict) and 'required' in pdecl:
                is_required = bool(pdecl['required'])

            properties[name] = self.convert(pdecl, namespace)
            if is_required:
                required.append(name)

        discriminator = decl.get('discriminator')
        if discriminator is not None and discriminator not in required:
            required.append(str(discriminator))

        if properties:
            schema['properties'] = properties
        if required:
            schema['required'] = required
        if discriminator is not None:
            schema['discriminator'] = str(discriminator)
        if decl.get('discriminatorValue') is not None:
            schema['x-discriminator-value'] = plain(
                decl['discriminatorValue'])

        if additional is not None:
            schema['additionalProperties'] = additional
        elif decl.get('additionalProperties') is False:
            schema['additionalProperties'] = False

        return schema

    def array(self, decl, namespace):
        schema = OrderedDict([('type', 'array')])
        schema['items'] = self.convert(decl.get('items'), namespace,
                                       default='any')
        return schema

    def expression(self, expr, namespace='', node=None):
        """Convert a type expression such as 'Book[] | nil'."""
        node = expr if node is None else node
        expr = expr.strip()

        if expr.startswith('{'):
            try:
                obj = json.loads(expr, object_pairs_hook=json_dict)
            except ValueError as e:
                raise ConversionError("Invalid JSON schema: %s" % e, node)
            return self.json_schema(obj)

        if expr.startswith('<'):
            raise ConversionError(
                "XML schemas cannot be represented in Swagger 2.0", node)

        terms = split_union(expr)
        if len(terms) > 1:
            others = [t for t in terms if t != 'nil']
            if len(others) == 1:
                schema = self.expression(others[0], namespace, node)
                if '$ref' in schema:
                    schema = OrderedDict([('allOf', [schema])])
                schema['x-nullable'] = True
                return schema
            raise ConversionError(
                "Union type '%s' cannot be represented in Swagger 2.0" %
                expr, node)

        if expr.endswith('[]'):
            return OrderedDict([
                ('type', 'array'),
                ('items', self.expression(expr[:-2], namespace, node))])

        if expr.startswith('(') and expr.endswith(')'):
            return self.expression(expr[1:-1], namespace, node)

        if expr == 'nil':
            raise ConversionError(
                "Type 'nil' cannot be represented in Swagger 2.0", node)

        if expr == 'object':
            return OrderedDict([('type', 'object')])

        if expr == 'array':
            return OrderedDict([('type', 'array'), ('items', OrderedDict())])

        if expr in SCALAR_TYPES:
            return OrderedDict(SCALAR_TYPES[expr])

        name = self.resolve_name(expr, namespace)
        if name is None:
            raise ConversionError("Unknown type '%s'" % expr, node)
        return OrderedDict([('$ref', pointer('definitions', name))])

    def json_schema(self, obj):
        schema = plain(obj)
        for key in ('$schema', 'id', '$id'):
            schema.pop(key, None)
        return schema
