# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
A PyYAML loader for RAML 1.0 documents.

The loader is based on `SafeConstructor`, i.e., the behaviour of
`yaml.safe_load`, but in addition:

 - Every dict/list/str is replaced with dict_node/list_node/str_node,
   which subclass dict/list/str to add the attributes `start_mark`
   and `end_mark`. (See the yaml.error module for the `Mark` class.)
   Mapping keys are marked as well.

 - The RAML `!include` tag is resolved relative to the including file.
   `.raml`, `.yaml` and `.yml` files are loaded as YAML, `.json` files as
   JSON (returned as `json_dict` instances) and anything else is
   included as a string.

 - The `#%RAML 1.0` header line is checked before loading.
"""

import os
import re
import json
import logging

import yaml
from yaml.error import Mark
from yaml.composer import Composer
from yaml.reader import Reader
from yaml.scanner import Scanner
from yaml.resolver import Resolver
from yaml.parser import Parser
from yaml.constructor import SafeConstructor

from raml2swagger.exceptions import LoadError

logger = logging.getLogger(__name__)

RAML_VERSION = '1.0'

HEADER_RE = re.compile(r'^#%RAML[ \t]+(\S+)(?:[ \t]+(\S+))?[ \t]*$')

YAML_EXTENSIONS = ('.raml', '.yaml', '.yml')


def _add_marks(obj, start_mark, end_mark):
    obj.start_mark = start_mark
    obj.end_mark = end_mark if end_mark is not None else start_mark


class dict_node(dict):
    def __init__(self, x=(), start_mark=None, end_mark=None):
        super(dict_node, self).__init__(x)
        _add_marks(self, start_mark, end_mark)


class list_node(list):
    def __init__(self, x=(), start_mark=None, end_mark=None):
        super(list_node, self).__init__(x)
        _add_marks(self, start_mark, end_mark)


class str_node(str):
    def __new__(cls, x='', start_mark=None, end_mark=None):
        obj = super(str_node, cls).__new__(cls, x)
        _add_marks(obj, start_mark, end_mark)
        return obj


class json_dict(dict):
    """ Mapping loaded from an included JSON document. """


class MarkedNodeConstructor(SafeConstructor):

    def construct_yaml_map(self, node):
        obj, = super().construct_yaml_map(node)
        return dict_node(obj, node.start_mark, node.end_mark)

    def construct_yaml_seq(self, node):
        obj, = super().construct_yaml_seq(node)
        return list_node(obj, node.start_mark, node.end_mark)

    def construct_yaml_str(self, node):
        value = self.construct_scalar(node)
        return str_node(value, node.start_mark, node.end_mark)

    def construct_include(self, node):
        path = self.construct_scalar(node)
        return self.include(path, node)

MarkedNodeConstructor.add_constructor(
    'tag:yaml.org,2002:map', MarkedNodeConstructor.construct_yaml_map)

MarkedNodeConstructor.add_constructor(
    'tag:yaml.org,2002:seq', MarkedNodeConstructor.construct_yaml_seq)

MarkedNodeConstructor.add_constructor(
    'tag:yaml.org,2002:str', MarkedNodeConstructor.construct_yaml_str)

MarkedNodeConstructor.add_constructor(
    '!include', MarkedNodeConstructor.construct_include)


class RamlLoader(Reader, Scanner, Parser,
                 Composer, MarkedNodeConstructor, Resolver):
    """ Marked YAML loader that knows where its document came from.

    :param stream: document text
    :param name: file name reported in marks
    :param base_dir: directory relative includes are resolved against
    :param root_dir: directory absolute (``/``) includes are resolved
        against, defaults to `base_dir`
    :param including: real paths of the files currently being included,
        used to detect include cycles

    """
    def __init__(self, stream, name='<string>', base_dir=None,
                 root_dir=None, including=()):
        Reader.__init__(self, stream)
        Scanner.__init__(self)
        Parser.__init__(self)
        Composer.__init__(self)
        MarkedNodeConstructor.__init__(self)
        Resolver.__init__(self)

        self.name = name
        self.base_dir = base_dir or os.getcwd()
        self.root_dir = root_dir or self.base_dir
        self.including = tuple(including)

    def include(self, path, node):
        if re.match(r'^[a-zA-Z][a-zA-Z0-9+.-]*://', path):
            raise LoadError("Remote includes are not supported: %s" % path,
                            mark=node.start_mark)

        if path.startswith('/'):
            filename = os.path.join(self.root_dir, path.lstrip('/'))
        else:
            filename = os.path.join(self.base_dir, path)

        realname = os.path.realpath(filename)
        if realname in self.including:
            raise LoadError("Include cycle detected: %s" % path,
                            mark=node.start_mark)

        logger.debug("%s: including %s" % (self.name, filename))
        text = read_file(filename, mark=node.start_mark)
        including = self.including + (realname,)

        if filename.endswith('.json'):
            return _load_json(text, filename, node.start_mark)

        if filename.endswith(YAML_EXTENSIONS):
            version, fragment = parse_header(text, filename)
            if version is not None:
                check_version(version, filename)
            return load_text(text, name=filename,
                             base_dir=os.path.dirname(filename),
                             root_dir=self.root_dir, including=including)

        return str_node(text, node.start_mark, node.end_mark)


def read_file(filename, mark=None):
    """ Return the text of `filename`, raising LoadError on failure. """
    if not filename:
        raise LoadError("No RAML file specified", mark=mark)
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError("Unable to read %s: %s" % (filename, e), mark=mark)


def parse_header(text, name='<string>'):
    """ Parse the `#%RAML <version> [<fragment>]` header line.

    :return: tuple of (version, fragment), both None if the first line
        is not a RAML header.  fragment is None for API definitions.

    """
    first = text.lstrip('\ufeff').split('\n', 1)[0].rstrip('\r')
    if not first.startswith('#%RAML'):
        return None, None

    g = HEADER_RE.match(first)
    if g is None:
        raise LoadError("%s: malformed RAML header: %s" % (name, first),
                        mark=Mark(name, 0, 0, 0, None, None))
    return g.group(1), g.group(2)


def check_version(version, name):
    if version != RAML_VERSION:
        raise LoadError("%s: unsupported RAML version %s, expected %s" %
                        (name, version, RAML_VERSION),
                        mark=Mark(name, 0, 0, 0, None, None))


def _load_json(text, name, mark):
    try:
        return json.loads(text, object_pairs_hook=json_dict)
    except json.JSONDecodeError as e:
        raise LoadError("Invalid JSON in %s: %s" % (name, e.msg),
                        mark=Mark(name, e.pos, e.lineno - 1, e.colno - 1,
                                  None, None))
    except ValueError as e:
        raise LoadError("Invalid JSON in %s: %s" % (name, e), mark=mark)


def load_text(text, name='<string>', base_dir=None, root_dir=None,
              including=()):
    """ Load a YAML document, wrapping YAML errors as LoadError. """
    loader = RamlLoader(text, name=name, base_dir=base_dir,
                        root_dir=root_dir, including=including)
    try:
        return loader.get_single_data()
    except yaml.MarkedYAMLError as e:
        problem = e.problem or str(e)
        if e.context:
            problem = '%s %s' % (e.context, problem)
        raise LoadError("Invalid YAML in %s: %s" % (name, problem),
                        mark=e.problem_mark)
    except yaml.YAMLError as e:
        raise LoadError("Invalid YAML in %s: %s" % (name, e))
    finally:
        loader.dispose()


def load_document(text, name='<string>', base_dir=None, fragment=None,
                  including=()):
    """ Load a RAML 1.0 document from text.

    :param text: the document, starting with its RAML header
    :param name: file name reported in marks and errors
    :param base_dir: directory includes are resolved against
    :param fragment: the fragment type expected in the header, None
        for an API definition, 'Library' for a library
    :param including: real paths of the documents including this one
    :return: the marked root mapping

    """
    if not text.strip():
        raise LoadError("RAML document is empty: %s" % name)

    version, found = parse_header(text, name)
    if version is None:
        raise LoadError("%s: missing '#%%RAML %s' header" %
                        (name, RAML_VERSION),
                        mark=Mark(name, 0, 0, 0, None, None))
    check_version(version, name)

    if found != fragment:
        raise LoadError("%s: expected %s, got %s" %
                        (name, _describe(fragment), _describe(found)),
                        mark=Mark(name, 0, 0, 0, None, None))

    obj = load_text(text, name=name, base_dir=base_dir, including=including)
    if obj is None:
        raise LoadError("RAML document is empty: %s" % name)
    if not isinstance(obj, dict):
        raise LoadError("%s: RAML document must be a mapping, got %s" %
                        (name, type(obj).__name__), obj)
    return obj


def _describe(fragment):
    if fragment is None:
        return 'an API definition'
    return "a '%s' fragment" % fragment


def load_file(filename, fragment=None):
    """ Load the RAML 1.0 document at `filename`.

    See `load_document` for `fragment`.

    """
    text = read_file(filename)
    logger.info("Loading RAML document %s" % filename)
    return load_document(text, name=filename,
                         base_dir=os.path.dirname(os.path.abspath(filename)),
                         fragment=fragment,
                         including=(os.path.realpath(filename),))
