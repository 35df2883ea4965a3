# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import os
import logging
import unittest

from raml2swagger.raml import Api, parse_reference, resource_path_name
from raml2swagger.exceptions import LoadError, ParseError

logger = logging.getLogger(__name__)

TEST_PATH = os.path.abspath(os.path.dirname(__file__))
BOOKSTORE = os.path.join(TEST_PATH, 'raml', 'bookstore.raml')


def create(body):
    return Api.create_from_text('#%RAML 1.0\ntitle: Test\n' + body)


class TestBookstore(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.api = Api.create_from_file(BOOKSTORE)

    def test_api(self):
        api = self.api
        self.assertEqual(api.title, 'Bookstore')
        self.assertEqual(api.version, 'v1')
        self.assertEqual(api.base_uri, 'https://api.example.com/{version}')
        self.assertEqual(api.media_types, ['application/json'])
        self.assertEqual(api.protocols, ['HTTPS'])
        self.assertEqual(api.documentation[0][0], 'Introduction')

    def test_resources(self):
        paths = [r.path for r in self.api.resource_iter()]
        self.assertEqual(paths, ['/books', '/books/{bookId}', '/authors',
                                 '/publishers'])

        book = self.api.find_resource('/books/{bookId}')
        self.assertEqual(book.parent.path, '/books')
        self.assertEqual([r.path for r in book.ancestors()],
                         ['/books', '/books/{bookId}'])
        self.assertIsNone(self.api.find_resource('/nothing'))

    def test_declarations(self):
        self.assertEqual(list(self.api.types.keys()),
                         ['lib.Publisher', 'Author', 'Book'])
        self.assertEqual(self.api.find_type('lib.Publisher').namespace,
                         'lib.')
        self.assertEqual(list(self.api.security_schemes.keys()),
                         ['oauth_2_0', 'api_key'])

        api_key = self.api.security_schemes['api_key']
        self.assertEqual(api_key.type, 'Pass Through')
        self.assertEqual(list(api_key.headers.keys()), ['X-Api-Key'])

    def test_resource_type_applied(self):
        books = self.api.find_resource('/books')
        self.assertEqual(books.description, 'Collection of books')
        self.assertEqual(list(books.methods.keys()), ['get', 'post'])

        post = books.methods['post']
        self.assertEqual(post.description, 'Create a book')
        self.assertEqual(post.body['application/json'], {'type': 'Book'})
        self.assertEqual(list(post.responses.keys()), ['201'])

        # Optional methods only apply where the resource declares them
        authors = self.api.find_resource('/authors')
        self.assertEqual(list(authors.methods.keys()), ['get'])

    def test_traits_applied(self):
        get = self.api.find_resource('/books').methods['get']
        self.assertEqual(get.description, 'List all books')
        self.assertEqual(list(get.query_parameters.keys()),
                         ['page', 'limit', 'sort'])

        limit = get.query_parameters['limit']
        self.assertFalse(limit.required)
        self.assertEqual(limit.decl['maximum'], 50)
        self.assertEqual(get.query_parameters['page'].default, 1)

    def test_method(self):
        get = self.api.find_resource('/books/{bookId}').methods['get']
        self.assertEqual(get.name, 'GET /books/{bookId}')
        self.assertEqual(get.display_name, 'Get a book')
        self.assertFalse(get.headers['If-None-Match'].required)
        self.assertEqual(list(get.responses.keys()), ['200', '404'])
        self.assertEqual(get.responses['404'].description, 'Book not found')
        self.assertIsNone(get.secured_by)

        book = self.api.find_resource('/books/{bookId}')
        self.assertTrue(book.uri_parameters['bookId'].required)


class TestTraitsAndResourceTypes(unittest.TestCase):

    def test_parse_reference(self):
        self.assertEqual(parse_reference('paged', 'trait'), ('paged', {}))
        self.assertEqual(parse_reference({'paged': {'max': 1}}, 'trait'),
                         ('paged', {'max': 1}))
        with self.assertRaises(ParseError):
            parse_reference(['paged'], 'trait')

    def test_resource_path_name(self):
        self.assertEqual(resource_path_name('/books/{bookId}'), 'books')
        self.assertEqual(resource_path_name('/users/{id}/books'), 'books')
        self.assertEqual(resource_path_name('/{id}'), '')

    def test_method_wins_over_trait(self):
        api = create(
            'traits:\n'
            '  described:\n'
            '    description: From trait\n'
            '    headers:\n'
            '      X-Trait: string\n'
            '/items:\n'
            '  get:\n'
            '    is: [ described ]\n'
            '    description: From method\n')
        get = api.find_resource('/items').methods['get']
        self.assertEqual(get.description, 'From method')
        self.assertEqual(list(get.headers.keys()), ['X-Trait'])

    def test_resource_traits_and_method_name(self):
        api = create(
            'traits:\n'
            '  named:\n'
            '    description: <<methodName | !uppercase>> <<resourcePath>>\n'
            '/items:\n'
            '  is: [ named ]\n'
            '  get:\n'
            '  delete:\n')
        items = api.find_resource('/items')
        self.assertEqual(items.methods['get'].description, 'GET /items')
        self.assertEqual(items.methods['delete'].description,
                         'DELETE /items')

    def test_resource_type_inheritance(self):
        api = create(
            'resourceTypes:\n'
            '  base:\n'
            '    get:\n'
            '      description: Base get\n'
            '  collection:\n'
            '    type: base\n'
            '    post:\n'
            '/items:\n'
            '  type: collection\n')
        items = api.find_resource('/items')
        self.assertEqual(list(items.methods.keys()), ['get', 'post'])
        self.assertEqual(items.methods['get'].description, 'Base get')

    def test_empty_trait_and_type_lists(self):
        api = create('/items:\n'
                     '  type:\n'
                     '  get:\n'
                     '    is: []\n'
                     '  put:\n'
                     '    is:\n')
        items = api.find_resource('/items')
        self.assertEqual(list(items.methods.keys()), ['get', 'put'])

    def test_empty_method_traits_with_resource_traits(self):
        api = create('traits:\n'
                     '  described:\n'
                     '    description: From trait\n'
                     '/items:\n'
                     '  is: [ described ]\n'
                     '  get:\n'
                     '    is: []\n')
        get = api.find_resource('/items').methods['get']
        self.assertEqual(get.description, 'From trait')

    def test_resource_type_method_traits_combined(self):
        api = create(
            'traits:\n'
            '  paged:\n'
            '    queryParameters:\n'
            '      page?: integer\n'
            '  sorted:\n'
            '    queryParameters:\n'
            '      sort?: string\n'
            'resourceTypes:\n'
            '  collection:\n'
            '    get:\n'
            '      is: [ paged ]\n'
            '/items:\n'
            '  type: collection\n'
            '  get:\n'
            '    is: [ sorted ]\n')
        get = api.find_resource('/items').methods['get']
        self.assertEqual(list(get.query_parameters.keys()), ['page', 'sort'])

    def test_resource_type_cycle(self):
        with self.assertRaises(ParseError) as cm:
            create('resourceTypes:\n'
                   '  a: { type: b }\n'
                   '  b: { type: a }\n'
                   '/items:\n'
                   '  type: a\n')
        self.assertIn('cycle', str(cm.exception))

    def test_undefined_trait(self):
        with self.assertRaises(ParseError) as cm:
            create('/items:\n  get:\n    is: [ missing ]\n')
        self.assertIn("undefined trait 'missing'", str(cm.exception))

    def test_undefined_resource_type(self):
        with self.assertRaises(ParseError):
            create('/items:\n  type: missing\n')

    def test_missing_trait_parameter(self):
        with self.assertRaises(ParseError):
            create('traits:\n'
                   '  t:\n'
                   '    description: <<what>>\n'
                   '/items:\n'
                   '  get:\n'
                   '    is: [ t ]\n')


class TestParseErrors(unittest.TestCase):

    def test_missing_title(self):
        with self.assertRaises(ParseError):
            Api.create_from_text('#%RAML 1.0\nversion: v1\n')

    def test_unknown_property(self):
        with self.assertRaises(ParseError) as cm:
            create('/items:\n  get:\n    bogus: 1\n')
        self.assertIn('bogus', str(cm.exception))
        self.assertIsNotNone(cm.exception.start_mark)

    def test_annotations_ignored(self):
        api = create('(internal): true\n'
                     '/items:\n'
                     '  (beta): yes\n'
                     '  get:\n')
        self.assertEqual(list(api.find_resource('/items').methods), ['get'])

    def test_invalid_response_code(self):
        with self.assertRaises(ParseError):
            create('/items:\n  get:\n    responses:\n      ok:\n')

    def test_parse_error_is_load_error(self):
        self.assertTrue(issubclass(ParseError, LoadError))
