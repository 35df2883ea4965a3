# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
This module walks a parsed `raml2swagger.raml.Api` and builds the
equivalent Swagger 2.0 document as nested ordered dicts.

Resources are flattened into `paths`, data types become `definitions`
and security schemes become `securityDefinitions`.  Anything Swagger 2.0
has no way to express raises a ConversionError naming the location in
the output document, for example:

    ConversionError: #/paths/~1books/get: query parameter 'filter' must
    be a primitive type or an array of primitive types, got object
"""

import logging
from collections import OrderedDict
from urllib.parse import urlsplit

import uritemplate
from jsonpointer import JsonPointer

from raml2swagger.datatypes import TypeConverter, example_value
from raml2swagger.exceptions import ConversionError
from raml2swagger.util import pointer, unique, uri_parameter_names

__all__ = ['SwaggerWriter']

logger = logging.getLogger(__name__)

SWAGGER_VERSION = '2.0'

SWAGGER_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head',
                   'patch')

FORM_MEDIA_TYPES = ('application/x-www-form-urlencoded',
                    'multipart/form-data')

PRIMITIVE_TYPES = ('string', 'number', 'integer', 'boolean')

# Fields of a schema that carry over to non-body parameters, items
# and headers
PARAMETER_FIELDS = ('type', 'format', 'items', 'collectionFormat',
                    'default', 'maximum', 'exclusiveMaximum', 'minimum',
                    'exclusiveMinimum', 'maxLength', 'minLength', 'pattern',
                    'maxItems', 'minItems', 'uniqueItems', 'enum',
                    'multipleOf')

# RAML OAuth 2.0 grant, Swagger 2.0 oauth2 flow
OAUTH2_FLOWS = OrderedDict([
    ('authorization_code', 'accessCode'),
    ('implicit', 'implicit'),
    ('password', 'password'),
    ('client_credentials', 'application'),
])


def _fields(schema, names):
    return OrderedDict((k, schema[k]) for k in names if k in schema)


class SwaggerWriter(object):
    """ Builds the Swagger 2.0 document for an Api.

    :param api: a parsed raml2swagger.raml.Api instance

    """
    def __init__(self, api):
        self.api = api
        self.types = TypeConverter(api.types)
        self.definitions = OrderedDict()

        # RAML security scheme name to the Swagger security definition
        # names it produced
        self.security_names = OrderedDict()

    def write(self):
        """Return the Swagger document as an OrderedDict."""
        api = self.api
        logger.info("Converting '%s' to Swagger %s" %
                    (api.title, SWAGGER_VERSION))

        doc = OrderedDict()
        doc['swagger'] = SWAGGER_VERSION
        doc['info'] = self.info()

        host, base_path, schemes = self.base_uri()
        if host:
            doc['host'] = host
        if base_path:
            doc['basePath'] = base_path
        if schemes:
            doc['schemes'] = schemes

        if api.media_types:
            doc['consumes'] = list(api.media_types)
            doc['produces'] = list(api.media_types)

        self.definitions = self.types.definitions()
        security_definitions = self.security_definitions()

        doc['paths'] = self.paths()

        if self.definitions:
            doc['definitions'] = self.definitions
        if security_definitions:
            doc['securityDefinitions'] = security_definitions
        if api.secured_by is not None:
            doc['security'] = self.security(api.secured_by)
        return doc

    def info(self):
        api = self.api
        info = OrderedDict()
        info['title'] = str(api.title)
        info['version'] = api.version if api.version is not None else ''

        parts = []
        if api.description:
            parts.append(str(api.description).strip())
        for title, content in api.documentation:
            parts.append('## %s\n\n%s' % (title, str(content).strip()))
        if parts:
            info['description'] = '\n\n'.join(parts)
        return info

    def base_uri(self):
        """Return (host, basePath, schemes) for the API's baseUri."""
        api = self.api
        protocols = [str(p).lower() for p in api.protocols]
        if not api.base_uri:
            return None, None, protocols

        values = {}
        if api.version is not None:
            values['version'] = api.version
        for name, param in api.base_uri_parameters.items():
            if param.default is not None:
                values[name] = str(param.default)

        for name in uri_parameter_names(api.base_uri):
            if name not in values:
                raise ConversionError(
                    "baseUri parameter '%s' has no default value, Swagger "
                    "2.0 host and basePath cannot be templated" % name,
                    api.base_uri)

        uri = uritemplate.expand(str(api.base_uri), values)
        parts = urlsplit(uri)
        scheme = None
        if parts.scheme and parts.netloc:
            scheme = parts.scheme.lower()
            host = parts.netloc
            path = parts.path
        elif not uri.startswith('/'):
            # No scheme, e.g. 'api.example.com/v1'
            host, _, path = uri.partition('/')
        else:
            host = None
            path = uri

        base_path = path.rstrip('/')
        if base_path and not base_path.startswith('/'):
            base_path = '/' + base_path

        if not protocols and scheme:
            protocols = [scheme]
        return host, base_path or None, protocols

    #
    # Security
    #
    def security_definitions(self):
        result = OrderedDict()
        for name, scheme in self.api.security_schemes.items():
            definitions = self.security_definition(name, scheme)
            self.security_names[name] = list(definitions.keys())
            result.update(definitions)
        return result

    def security_definition(self, name, scheme):
        where = pointer('securityDefinitions', name)
        result = OrderedDict()

        if scheme.type == 'OAuth 2.0':
            settings = scheme.settings or {}
            grants = settings.get('authorizationGrants') or []
            flows = []
            for grant in grants:
                if grant in OAUTH2_FLOWS:
                    flows.append(OAUTH2_FLOWS[grant])
                else:
                    logger.warning("%s: ignoring OAuth 2.0 grant '%s'" %
                                   (where, grant))
            if not flows:
                raise ConversionError(
                    "%s: OAuth 2.0 scheme declares no authorization grant "
                    "that Swagger 2.0 supports" % where, scheme.input)

            scopes = OrderedDict((str(s), '')
                                 for s in settings.get('scopes') or [])
            for flow in flows:
                definition = OrderedDict([('type', 'oauth2')])
                if scheme.description:
                    definition['description'] = str(scheme.description)
                definition['flow'] = flow
                if flow in ('implicit', 'accessCode'):
                    definition['authorizationUrl'] = self._setting(
                        scheme, 'authorizationUri', where)
                if flow in ('password', 'application', 'accessCode'):
                    definition['tokenUrl'] = self._setting(
                        scheme, 'accessTokenUri', where)
                definition['scopes'] = OrderedDict(scopes)

                defname = name if len(flows) == 1 else '%s_%s' % (name, flow)
                result[defname] = definition

        elif scheme.type == 'Basic Authentication':
            result[name] = OrderedDict([('type', 'basic')])
            if scheme.description:
                result[name]['description'] = str(scheme.description)

        elif scheme.type == 'Pass Through' or scheme.type.startswith('x-'):
            params = ([(p, 'header') for p in scheme.headers] +
                      [(p, 'query') for p in scheme.query_parameters])
            if len(params) != 1:
                raise ConversionError(
                    "%s: '%s' security scheme must describe exactly one "
                    "header or query parameter to convert to an API key" %
                    (where, scheme.type), scheme.input)

            definition = OrderedDict([('type', 'apiKey')])
            if scheme.description:
                definition['description'] = str(scheme.description)
            definition['name'] = params[0][0]
            definition['in'] = params[0][1]
            result[name] = definition

        else:
            raise ConversionError(
                "%s: security scheme type '%s' cannot be represented in "
                "Swagger 2.0" % (where, scheme.type), scheme.type)

        return result

    def _setting(self, scheme, key, where):
        value = (scheme.settings or {}).get(key)
        if not value:
            raise ConversionError("%s: OAuth 2.0 setting '%s' is required" %
                                  (where, key), scheme.input)
        return str(value)

    def security(self, secured_by, obj=None):
        """Convert a RAML `securedBy` list to Swagger requirements."""
        requirements = []
        for entry in secured_by:
            if entry is None:
                requirements.append(OrderedDict())
                continue

            if isinstance(entry, str):
                name, params = entry, {}
            elif isinstance(entry, dict) and len(entry) == 1:
                name, params = next(iter(entry.items()))
                params = params or {}
            else:
                raise ConversionError("Invalid securedBy entry: %r" %
                                      (entry,), entry)

            if name not in self.security_names:
                raise ConversionError("Unknown security scheme '%s'" % name,
                                      name, obj)

            scopes = [str(s) for s in params.get('scopes') or []]
            for defname in self.security_names[name]:
                requirements.append(OrderedDict([(defname, list(scopes))]))
        return requirements

    #
    # Parameters
    #
    def resolve(self, schema, seen=()):
        """Inline $ref and allOf so the schema can describe a parameter."""
        if '$ref' in schema:
            name = JsonPointer(schema['$ref'][1:]).parts[-1]
            if name in seen:
                raise ConversionError(
                    "Recursive type '%s' cannot describe a parameter" % name)
            resolved = self.resolve(self.definitions[name], seen + (name,))
        elif 'allOf' in schema:
            resolved = OrderedDict()
            for part in schema['allOf']:
                resolved.update(self.resolve(part, seen))
        else:
            return OrderedDict(schema)

        for key, value in schema.items():
            if key not in ('$ref', 'allOf'):
                resolved[key] = value
        return resolved

    def primitive(self, schema, what, where):
        """Check and return a schema usable for a non-body parameter."""
        schema = self.resolve(schema)
        if not schema.get('type'):
            schema['type'] = 'string'

        ptype = schema['type']
        if ptype == 'array':
            items = self.resolve(schema.get('items') or {})
            if not items.get('type'):
                items['type'] = 'string'
            if items['type'] not in PRIMITIVE_TYPES:
                raise ConversionError(
                    "%s: %s must be an array of primitive types, got an "
                    "array of %s" % (where, what, items['type']))
            schema['items'] = _fields(items, PARAMETER_FIELDS)

        elif ptype not in PRIMITIVE_TYPES and ptype != 'file':
            raise ConversionError(
                "%s: %s must be a primitive type or an array of primitive "
                "types, got %s" % (where, what, ptype))

        return schema

    def parameter(self, name, location, required, schema, where):
        what = "%s parameter '%s'" % (location, name)
        schema = self.primitive(schema, what, where)
        if schema['type'] == 'file' and location != 'formData':
            raise ConversionError("%s: %s cannot be a file" % (where, what))

        param = OrderedDict()
        param['name'] = str(name)
        param['in'] = location
        if schema.get('description'):
            param['description'] = schema['description']
        param['required'] = True if location == 'path' else bool(required)
        param.update(_fields(schema, PARAMETER_FIELDS))
        if schema['type'] == 'array' and 'collectionFormat' not in param:
            param['collectionFormat'] = ('multi'
                                         if location in ('query', 'formData')
                                         else 'csv')
        if 'example' in schema:
            param['x-example'] = schema['example']
        return param

    def raml_parameter(self, param, location, where):
        schema = self.types.convert(param.decl)
        return self.parameter(param.name, location, param.required, schema,
                              where)

    def header(self, param, where):
        what = "header '%s'" % param.name
        schema = self.primitive(self.types.convert(param.decl), what, where)
        if schema['type'] == 'file':
            raise ConversionError("%s: %s cannot be a file" % (where, what))

        header = OrderedDict()
        if schema.get('description'):
            header['description'] = schema['description']
        header.update(_fields(schema, PARAMETER_FIELDS))
        return header

    def object_parameters(self, schema, location, what, where):
        """Expand an object schema into one parameter per property."""
        schema = self.resolve(schema)
        if schema.get('type') != 'object':
            raise ConversionError(
                "%s: %s must be an object type" % (where, what))

        required = schema.get('required') or []
        return [self.parameter(name, location, name in required, pschema,
                               where)
                for name, pschema in (schema.get('properties') or {}).items()]

    def path_parameters(self, resource):
        declared = OrderedDict()
        for r in resource.ancestors():
            declared.update(r.uri_parameters)

        where = pointer('paths', resource.path)
        params = []
        for name in uri_parameter_names(resource.path):
            if name in declared:
                params.append(self.raml_parameter(declared[name], 'path',
                                                  where))
            else:
                params.append(OrderedDict([('name', name),
                                           ('in', 'path'),
                                           ('required', True),
                                           ('type', 'string')]))
        return params

    #
    # Paths and operations
    #
    def paths(self):
        paths = OrderedDict()
        for resource in self.api.resource_iter():
            item = self.path_item(resource)
            if item is None:
                continue
            if resource.path in paths:
                paths[resource.path].update(item)
            else:
                paths[resource.path] = item
        return paths

    def path_item(self, resource):
        operations = OrderedDict()
        for name, method in resource.methods.items():
            if name not in SWAGGER_METHODS:
                raise ConversionError(
                    "%s: HTTP method '%s' is not supported by Swagger 2.0" %
                    (pointer('paths', resource.path), name.upper()),
                    name, resource.input)
            operations[name] = self.operation(method)

        if not operations:
            return None

        item = OrderedDict()
        params = self.path_parameters(resource)
        if params:
            item['parameters'] = params
        item.update(operations)
        return item

    def operation(self, method):
        resource = method.resource
        where = pointer('paths', resource.path, method.method)
        logger.debug("Converting %s" % where)

        params = []
        for param in method.query_parameters.values():
            params.append(self.raml_parameter(param, 'query', where))
        if method.query_string is not None:
            params.extend(self.object_parameters(
                self.types.convert(method.query_string, default='object'),
                'query', 'queryString', where))
        for param in method.headers.values():
            params.append(self.raml_parameter(param, 'header', where))

        body_params, consumes = self.request_body(method, where)
        params.extend(body_params)

        responses, produces = self.responses(method, where)

        op = OrderedDict()
        if method.display_name:
            op['summary'] = str(method.display_name)
        if method.description:
            op['description'] = str(method.description)
        if consumes and consumes != self.api.media_types:
            op['consumes'] = consumes
        if produces and produces != self.api.media_types:
            op['produces'] = produces
        if params:
            op['parameters'] = params
        op['responses'] = responses
        if method.protocols:
            op['schemes'] = [str(p).lower() for p in method.protocols]

        secured_by = method.secured_by
        for r in reversed(resource.ancestors()):
            if secured_by is not None:
                break
            secured_by = r.secured_by
        if secured_by is not None:
            op['security'] = self.security(secured_by, method.input)

        return op

    def request_body(self, method, where):
        """Return (parameters, consumes) for the method's request body."""
        if not method.body:
            return [], []

        consumes = list(method.body.keys())
        forms = [mt for mt in consumes if mt in FORM_MEDIA_TYPES]
        if forms:
            if len(forms) != len(consumes):
                raise ConversionError(
                    "%s: form and non-form request bodies cannot be "
                    "combined in Swagger 2.0" % where)
            schema = self.types.convert(method.body[forms[0]],
                                        default='object')
            return (self.object_parameters(schema, 'formData',
                                           'form body', where),
                    consumes)

        param = OrderedDict()
        param['name'] = 'body'
        param['in'] = 'body'
        param['required'] = True
        param['schema'] = self.types.convert(method.body[consumes[0]],
                                             default='any')
        return [param], consumes

    def responses(self, method, where):
        """Return (responses, produces) for the method."""
        responses = OrderedDict()
        produces = []
        for code, response in method.responses.items():
            r = OrderedDict()
            r['description'] = str(response.description or '')

            if response.body:
                media_types = list(response.body.keys())
                produces.extend(media_types)

                decl = response.body[media_types[0]]
                if decl is not None:
                    schema = self.types.convert(decl, default='any')
                    if schema:
                        r['schema'] = schema

                examples = OrderedDict()
                for mt, decl in response.body.items():
                    if isinstance(decl, dict) and 'example' in decl:
                        examples[mt] = example_value(decl['example'])
                if examples:
                    r['examples'] = examples

            if response.headers:
                r['headers'] = OrderedDict(
                    (name, self.header(param, where))
                    for name, param in response.headers.items())

            responses[code] = r

        if not responses:
            responses['default'] = OrderedDict([('description', '')])
        return responses, unique(produces)
