# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
The `Api` class represents a single RAML 1.0 API definition as a tree
of resources, methods and responses plus the declarations they refer
to (types, traits, resource types and security schemes).  An instance
is normally created by parsing a RAML file:

.. code-block:: python

   >>> bookstore = Api.create_from_file('bookstore.raml')
   >>> [r.path for r in bookstore.resource_iter()]
   ['/books', '/books/{bookId}', '/authors']

   >>> books = bookstore.find_resource('/books')
   >>> books.methods['get'].query_parameters['page'].required
   False

Resource types and traits are applied while parsing, so the methods,
parameters and bodies they contribute show up on the resources and
methods directly.  Libraries pulled in with `uses` register their
declarations under their namespace, e.g. ``lib.Book``.
"""

import os
import copy
import logging
from collections import OrderedDict

from raml2swagger import raml_loader
from raml2swagger.parser import Parser
from raml2swagger.merge import overlay
from raml2swagger.templates import substitute
from raml2swagger.datatypes import DataType
from raml2swagger.exceptions import ParseError
from raml2swagger.util import is_annotation, unique

__all__ = ['Api']
logger = logging.getLogger(__name__)

METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch',
           'trace', 'connect')

DEFAULT_MEDIA_TYPE = 'application/json'


def parse_reference(ref, kind):
    """Split a trait or resource type reference into (name, params).

    A reference is either a plain name or a single-key mapping of the
    name to its parameters:

        is: [ secured, { paged: { maxPages: 10 } } ]

    """
    if isinstance(ref, str):
        return ref, {}

    if isinstance(ref, dict) and len(ref) == 1:
        name, params = next(iter(ref.items()))
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ParseError("Parameters of %s '%s' must be a mapping" %
                             (kind, name), params)
        return name, params

    raise ParseError("Invalid %s reference: %r" % (kind, ref), ref)


def resource_path_name(path):
    """Rightmost path segment that holds no URI parameter."""
    segments = [s for s in path.split('/') if s and '{' not in s]
    return segments[-1] if segments else ''


def parse_body(body, media_types):
    """Return an ordered mapping of media type to type declaration.

    Bodies are either keyed by media type, or a single type declaration
    that applies to each of the API's default media types.

    """
    if body is None:
        return OrderedDict()

    if isinstance(body, dict):
        keys = [k for k in body if not is_annotation(k)]
        if keys and all(isinstance(k, str) and '/' in k for k in keys):
            return OrderedDict((k, body[k]) for k in keys)

    return OrderedDict((mt, body) for mt in (media_types or
                                             [DEFAULT_MEDIA_TYPE]))


class Parameter(object):
    """ A named URI, query or header parameter.

    :param name: parameter name, without any trailing '?'
    :param decl: the type declaration of the parameter
    :param required: whether the parameter must be supplied

    """
    def __init__(self, name, decl, required=True):
        self.name = name
        self.decl = decl
        self.required = required

    def __repr__(self):
        return "<Parameter '%s'>" % self.name

    @property
    def default(self):
        if isinstance(self.decl, dict):
            return self.decl.get('default')
        return None

    @classmethod
    def parse_all(cls, input, name, always_required=False):
        """Parse a mapping of parameter declarations.

        Names ending in '?' are optional, as are declarations that set
        ``required: false``.

        """
        if input is None:
            return OrderedDict()
        if not isinstance(input, dict):
            raise ParseError('%s: definition should be a mapping, got: %s' %
                             (name, type(input).__name__), input)

        params = OrderedDict()
        for key, decl in input.items():
            if is_annotation(key):
                continue
            pname = str(key)
            required = True
            if pname.endswith('?'):
                pname = pname[:-1]
                required = False
            if isinstance(decl, dict) and 'required' in decl:
                required = bool(decl['required'])
            params[pname] = cls(pname, decl, always_required or required)
        return params


class SecurityScheme(object):
    """ A declared security scheme.

    :param name: the scheme name, qualified by library namespace
    :param input: the scheme declaration

    """
    def __init__(self, name, input):
        self.name = name
        self.input = input

        with Parser(input, name, self) as parser:
            parser.parse('type', required=True, types=str)
            parser.parse('displayName', types=str, save_as='display_name')
            parser.parse('description', '', types=str)
            parser.parse('settings', {}, types=dict)

            described_by = parser.parse('describedBy', {}, types=dict,
                                        save=False)
            with Parser(described_by, '%s.describedBy' % name) as dparser:
                self.headers = Parameter.parse_all(
                    dparser.parse('headers', save=False),
                    '%s.describedBy.headers' % name)
                self.query_parameters = Parameter.parse_all(
                    dparser.parse('queryParameters', save=False),
                    '%s.describedBy.queryParameters' % name)
                dparser.parse('queryString', save=False)
                dparser.parse('responses', save=False)

    def __repr__(self):
        return "<SecurityScheme '%s' %s>" % (self.name, self.type)


class Response(object):
    """ One response of a method, by status code. """

    def __init__(self, method, code, input):
        self.method = method
        self.code = str(code)
        name = '%s %s' % (method.name, self.code)

        if not (self.code.isdigit() or self.code == 'default'):
            raise ParseError("%s: invalid response status code" % name,
                             code, method.input.get('responses'))

        with Parser(input, name, self) as parser:
            parser.parse('description', '', types=str)
            self.headers = Parameter.parse_all(
                parser.parse('headers', save=False), name + ' headers')
            self.body = parse_body(parser.parse('body', save=False),
                                   method.resource.api.media_types)


class Method(object):
    """ An HTTP method on a resource, with its traits applied. """

    def __init__(self, resource, method, input):
        self.resource = resource
        self.method = method
        self.name = '%s %s' % (method.upper(), resource.path)

        api = resource.api
        self.input = input = api.apply_traits(resource, method, input)

        with Parser(input, self.name, self) as parser:
            parser.parse('displayName', types=str, save_as='display_name')
            parser.parse('description', '', types=str)
            self.query_parameters = Parameter.parse_all(
                parser.parse('queryParameters', save=False),
                self.name + ' queryParameters')
            parser.parse('queryString', save_as='query_string')
            self.headers = Parameter.parse_all(
                parser.parse('headers', save=False),
                self.name + ' headers')
            self.body = parse_body(parser.parse('body', save=False),
                                   api.media_types)

            self.responses = OrderedDict()
            responses = parser.parse('responses', {}, types=dict, save=False)
            for code, rinput in responses.items():
                if is_annotation(code):
                    continue
                response = Response(self, code, rinput)
                self.responses[response.code] = response

            parser.parse('is', save=False)
            parser.parse('securedBy', types=list, save_as='secured_by')
            parser.parse('protocols', [], types=list)

    def __repr__(self):
        return "<Method '%s'>" % self.name


class Resource(object):
    """ A resource and, recursively, its nested resources.

    :param api: the Api this resource belongs to
    :param relative_uri: the key of the resource, e.g. '/{bookId}'
    :param input: the resource definition
    :param parent: enclosing resource, None for top level resources

    """
    def __init__(self, api, relative_uri, input, parent=None):
        self.api = api
        self.parent = parent
        self.relative_uri = relative_uri
        self.path = (parent.path if parent else '') + relative_uri

        self.input = input = api.apply_resource_type(self, input)

        with Parser(input, self.path, self) as parser:
            parser.parse('displayName', types=str, save_as='display_name')
            parser.parse('description', '', types=str)
            self.uri_parameters = Parameter.parse_all(
                parser.parse('uriParameters', save=False),
                self.path + ' uriParameters', always_required=True)
            parser.parse('type', save=False)
            parser.parse('is', [], types=list, save_as='traits')
            parser.parse('securedBy', types=list, save_as='secured_by')

            self.methods = OrderedDict()
            for key in parser.parse_matching(lambda k: k in METHODS):
                self.methods[key] = Method(self, key, input[key])

            self.resources = []
            for key in parser.parse_matching(lambda k: k.startswith('/')):
                self.resources.append(Resource(api, key, input[key], self))

    def __repr__(self):
        return "<Resource '%s'>" % self.path

    def ancestors(self):
        """Return this resource and its parents, outermost first."""
        chain = []
        resource = self
        while resource is not None:
            chain.insert(0, resource)
            resource = resource.parent
        return chain

    def resource_iter(self):
        """ Generator over this resource and all nested resources """
        yield self
        for r in self.resources:
            for nested in r.resource_iter():
                yield nested


class Api(object):
    """ Loads and represents a complete RAML 1.0 API definition.

    :param filename: the RAML file this definition comes from, if any.
        Relative includes and libraries are resolved from its directory.
    """

    def __init__(self, filename=None, base_dir=None):
        self.filename = filename
        if base_dir is None:
            base_dir = (os.path.dirname(os.path.abspath(filename))
                        if filename else os.getcwd())
        self.base_dir = base_dir

        self.types = OrderedDict()
        self.traits = OrderedDict()
        self.resource_types = OrderedDict()
        self.security_schemes = OrderedDict()
        self.resources = []

    @classmethod
    def create_from_file(cls, filename):
        api = Api(filename)
        api.parse(raml_loader.load_file(filename))
        return api

    @classmethod
    def create_from_text(cls, text, base_dir=None):
        api = Api(base_dir=base_dir)
        api.parse(raml_loader.load_document(text, base_dir=api.base_dir))
        return api

    def parse(self, obj):
        """Parses a Python data object representing a RAML API.

        :param obj: The loaded RAML document
        :type obj: dict
        """
        with Parser(obj, '<api>', self) as parser:
            parser.parse('title', required=True, types=str)
            parser.parse('description', '', types=str)

            version = parser.parse('version', types=[str, int, float],
                                   save=False)
            self.version = str(version) if version is not None else None

            parser.parse('baseUri', types=str, save_as='base_uri')
            self.base_uri_parameters = Parameter.parse_all(
                parser.parse('baseUriParameters', save=False),
                'baseUriParameters', always_required=True)
            parser.parse('protocols', [], types=list)

            media_types = parser.parse('mediaType', [], types=[str, list],
                                       save=False)
            if isinstance(media_types, str):
                media_types = [media_types]
            self.media_types = [str(mt) for mt in media_types]

            self.documentation = []
            for i, doc in enumerate(parser.parse('documentation', [],
                                                 types=list, save=False)):
                with Parser(doc, 'documentation[%d]' % i) as dparser:
                    title = dparser.parse('title', required=True, types=str,
                                          save=False)
                    content = dparser.parse('content', required=True,
                                            types=str, save=False)
                self.documentation.append((title, content))

            parser.parse('securedBy', types=list, save_as='secured_by')
            parser.parse('annotationTypes', {}, types=dict, save=False)

            self.register(parser, '', self.base_dir)

            logger.info("Parsing resources of '%s'" % self.title)
            self.resources = []
            for key in parser.parse_matching(lambda k: k.startswith('/')):
                self.resources.append(Resource(self, key, obj[key]))

    def register(self, parser, namespace, base_dir, seen=()):
        """Register the declarations found in a document.

        Handles `uses`, `types`, `schemas`, `traits`, `resourceTypes`
        and `securitySchemes` for both the API and its libraries.

        :param parser: Parser attached to the document
        :param namespace: prefix for the declared names, '' or 'lib.'
        :param base_dir: directory library paths are relative to
        """
        uses = parser.parse('uses', {}, types=dict, save=False)
        for ns, path in uses.items():
            filename = os.path.join(base_dir, str(path))
            realname = os.path.realpath(filename)
            if realname in seen:
                raise ParseError("Library cycle detected: %s" % path, path)

            logger.debug("Loading library %s%s from %s" %
                         (namespace, ns, filename))
            lib = raml_loader.load_file(filename, fragment='Library')
            with Parser(lib, filename) as libparser:
                libparser.parse('usage', save=False)
                libparser.parse('annotationTypes', save=False)
                self.register(libparser, '%s%s.' % (namespace, ns),
                              os.path.dirname(filename),
                              seen + (realname,))

        for key in ('types', 'schemas'):
            decls = parser.parse(key, {}, types=dict, save=False)
            for name, decl in decls.items():
                qname = namespace + name
                self.types[qname] = DataType(qname, decl, namespace)

        for name, decl in parser.parse('traits', {}, types=dict,
                                       save=False).items():
            self.traits[namespace + name] = decl

        for name, decl in parser.parse('resourceTypes', {}, types=dict,
                                       save=False).items():
            self.resource_types[namespace + name] = decl

        for name, decl in parser.parse('securitySchemes', {}, types=dict,
                                       save=False).items():
            qname = namespace + name
            self.security_schemes[qname] = SecurityScheme(qname, decl)

    def _resource_type_body(self, ref, resource, seen=()):
        name, params = parse_reference(ref, 'resource type')
        if name not in self.resource_types:
            raise ParseError("%s: undefined resource type '%s'" %
                             (resource.path, name), name)
        if name in seen:
            raise ParseError("Resource type cycle detected: %s" %
                             ' -> '.join(seen + (name,)), name)

        params = dict(params)
        params['resourcePath'] = resource.path
        params['resourcePathName'] = resource_path_name(resource.path)

        decl = self.resource_types[name]
        if decl is not None and not isinstance(decl, dict):
            raise ParseError("Resource type '%s' must be a mapping" % name,
                             decl)

        body = substitute(decl or {}, params)
        body.pop('usage', None)
        if 'type' in body:
            parent = self._resource_type_body(body.pop('type'), resource,
                                              seen + (name,))
            body = overlay(parent, body)
        return body

    def apply_resource_type(self, resource, input):
        """Return the resource definition with its resource type applied."""
        if not isinstance(input, dict) or input.get('type') is None:
            return input

        input = copy.copy(input)
        body = self._resource_type_body(input.pop('type'), resource)

        # Optional methods only apply if the resource declares them
        for key in list(body.keys()):
            if isinstance(key, str) and key.endswith('?'):
                value = body.pop(key)
                if key[:-1] in input:
                    body[key[:-1]] = value

        merged = overlay(body, input)
        if body.get('is') and input.get('is'):
            merged['is'] = unique(list(body['is']) + list(input['is']))

        # Traits of a method in the resource type add to the method's own
        for key in METHODS:
            rt_method, method = body.get(key), input.get(key)
            if (  isinstance(rt_method, dict) and rt_method.get('is') and
                  isinstance(method, dict) and method.get('is')):
                merged[key]['is'] = unique(list(rt_method['is']) +
                                           list(method['is']))

        logger.debug("%s: applied resource type" % resource.path)
        return merged

    def apply_traits(self, resource, method, input):
        """Return the method definition with all its traits applied.

        Traits named on the resource apply before those named on the
        method; values on the method itself always win.

        """
        traits = list(resource.traits)
        if isinstance(input, dict) and input.get('is'):
            traits.extend(input['is'])
        if not traits:
            return input

        input = copy.copy(input) if input is not None else {}
        input.pop('is', None)

        base = {}
        for ref in traits:
            name, params = parse_reference(ref, 'trait')
            if name not in self.traits:
                raise ParseError("%s %s: undefined trait '%s'" %
                                 (method.upper(), resource.path, name), name)

            params = dict(params)
            params['methodName'] = method
            params['resourcePath'] = resource.path
            params['resourcePathName'] = resource_path_name(resource.path)

            decl = self.traits[name]
            if decl is not None and not isinstance(decl, dict):
                raise ParseError("Trait '%s' must be a mapping" % name, decl)

            body = substitute(decl or {}, params)
            body.pop('usage', None)
            base = overlay(base, body)

        logger.debug("%s %s: applied traits %s" %
                     (method.upper(), resource.path,
                      ', '.join(parse_reference(r, 'trait')[0]
                                for r in traits)))
        return overlay(base, input)

    def resource_iter(self):
        """ Generator for iterating over all resources, depth first """
        for r in self.resources:
            for nested in r.resource_iter():
                yield nested

    def find_resource(self, path):
        """ Look up and return a resource by its full path """
        for r in self.resource_iter():
            if r.path == path:
                return r
        return None

    def find_type(self, name):
        """ Look up and return a type by qualified name """
        return self.types.get(name, None)
