# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import os
import unittest

from raml2swagger import raml_loader
from raml2swagger.raml_loader import (dict_node, list_node, str_node,
                                      json_dict)
from raml2swagger.exceptions import LoadError

TEST_PATH = os.path.abspath(os.path.dirname(__file__))
RAML_PATH = os.path.join(TEST_PATH, 'raml')


def raml_file(name):
    return os.path.join(RAML_PATH, name)


raml_snippet = """\
#%RAML 1.0
title: Marks
/books:
  get:
    description: List books
"""


class TestMarkedLoad(unittest.TestCase):

    def test_nodes_are_marked(self):
        obj = raml_loader.load_document(raml_snippet, name='marks.raml')

        self.assertIsInstance(obj, dict_node)
        self.assertIsInstance(obj['title'], str_node)
        self.assertEqual(obj['title'], 'Marks')
        self.assertEqual(obj['title'].start_mark.name, 'marks.raml')
        self.assertEqual(obj['title'].start_mark.line, 1)

        get = obj['/books']['get']
        self.assertEqual(get.start_mark.line, 4)

    def test_keys_are_marked(self):
        obj = raml_loader.load_document(raml_snippet)
        key = [k for k in obj if k == '/books'][0]
        self.assertIsInstance(key, str_node)
        self.assertEqual(key.start_mark.line, 2)

    def test_sequences_are_marked(self):
        obj = raml_loader.load_document('#%RAML 1.0\nprotocols: [HTTP]\n')
        self.assertIsInstance(obj['protocols'], list_node)


class TestHeader(unittest.TestCase):

    def test_parse_header(self):
        self.assertEqual(raml_loader.parse_header('#%RAML 1.0\n'),
                         ('1.0', None))
        self.assertEqual(raml_loader.parse_header('#%RAML 1.0 Library\n'),
                         ('1.0', 'Library'))
        self.assertEqual(raml_loader.parse_header('title: x\n'),
                         (None, None))

    def test_missing_header(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_document('title: No header\n')
        self.assertIn('missing', str(cm.exception))

    def test_raml08_rejected(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(raml_file('raml08.raml'))
        self.assertIn('unsupported RAML version 0.8', str(cm.exception))

    def test_library_is_not_an_api(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(raml_file('library.raml'))
        self.assertIn("'Library' fragment", str(cm.exception))

    def test_api_is_not_a_library(self):
        with self.assertRaises(LoadError):
            raml_loader.load_file(raml_file('bookstore.raml'),
                                  fragment='Library')


class TestLoadErrors(unittest.TestCase):

    def test_no_filename(self):
        for filename in (None, ''):
            with self.assertRaises(LoadError) as cm:
                raml_loader.load_file(filename)
            self.assertIn('No RAML file specified', str(cm.exception))

    def test_missing_file(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(raml_file('does-not-exist.raml'))
        self.assertIn('does-not-exist.raml', str(cm.exception))

    def test_empty_file(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(raml_file('empty.raml'))
        self.assertIn('empty', str(cm.exception))

    def test_header_only(self):
        with self.assertRaises(LoadError):
            raml_loader.load_document('#%RAML 1.0\n')

    def test_not_a_mapping(self):
        with self.assertRaises(LoadError):
            raml_loader.load_document('#%RAML 1.0\n- one\n- two\n')

    def test_invalid_yaml_has_location(self):
        filename = raml_file('invalid_yaml.raml')
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(filename)

        e = cm.exception
        self.assertIsNotNone(e.start_mark)
        self.assertIn('Source data locations', str(e))
        self.assertIn('invalid_yaml.raml', str(e))


class TestInclude(unittest.TestCase):

    def test_include_types(self):
        obj = raml_loader.load_file(raml_file('bookstore.raml'))

        author = obj['types']['Author']
        self.assertIsInstance(author, json_dict)
        self.assertEqual(author['required'], ['name'])

        content = obj['documentation'][0]['content']
        self.assertEqual(content.strip(), 'Welcome to the bookstore API.')

    def test_include_relative_to_base_dir(self):
        text = '#%RAML 1.0\ntitle: Inc\ntypes:\n  A: !include author.json\n'
        obj = raml_loader.load_document(
            text, base_dir=os.path.join(RAML_PATH, 'schemas'))
        self.assertEqual(obj['types']['A']['type'], 'object')

    def test_include_missing(self):
        text = '#%RAML 1.0\ntitle: Inc\ndescription: !include nope.md\n'
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_document(text, base_dir=RAML_PATH)
        self.assertIsNotNone(cm.exception.start_mark)

    def test_remote_include_rejected(self):
        text = ('#%RAML 1.0\ntitle: Inc\n'
                'description: !include http://example.com/x.md\n')
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_document(text, base_dir=RAML_PATH)
        self.assertIn('Remote includes', str(cm.exception))

    def test_include_cycle(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader.load_file(raml_file('cycle.raml'))
        self.assertIn('Include cycle detected', str(cm.exception))

    def test_invalid_json_include(self):
        with self.assertRaises(LoadError) as cm:
            raml_loader._load_json('{"a": ', 'bad.json', None)
        self.assertEqual(cm.exception.start_mark.name, 'bad.json')
