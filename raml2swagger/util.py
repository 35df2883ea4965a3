# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import re
from collections import OrderedDict

import uritemplate
from jsonpointer import JsonPointer

from raml2swagger.exceptions import ParseError

ANNOTATION = re.compile(r'^\(.+\)$')


def check_type(prop, val, valid_type, obj=None):
    if type(valid_type) is not list:
        valid_type = [valid_type]

    valid = False
    for t in valid_type:
        if isinstance(val, t):
            valid = True
            break

    if not valid:
        msg = ("Value provided for '%s' must be %s, got %s" %
               (prop, ' or '.join(t.__name__ for t in valid_type),
                type(val).__name__))
        raise ParseError(msg, prop, obj)


def is_annotation(key):
    """Return True if `key` names a RAML annotation, e.g. ``(deprecated)``."""
    return isinstance(key, str) and ANNOTATION.match(key) is not None


def uri_parameter_names(template):
    """Returns the variables of a uri template in order of appearance.

       template = '/books/{bookId}/chapters/{chapterId}'

    returns ['bookId', 'chapterId'].

    """
    def position(name):
        pos = template.find('{%s}' % name)
        return pos if pos >= 0 else template.find(name)

    return sorted(uritemplate.variables(template), key=position)


def pointer(*parts):
    """Return the JSON pointer fragment ('#/a/b') addressing `parts`."""
    return '#' + JsonPointer.from_parts([str(p) for p in parts]).path


def plain(obj):
    """Return a copy of loaded data with marked nodes turned into plain
    dict/list/str values."""
    if isinstance(obj, dict):
        return OrderedDict((plain(k), plain(v)) for k, v in obj.items())
    if isinstance(obj, list):
        return [plain(v) for v in obj]
    if isinstance(obj, str):
        return str(obj)
    return obj


def unique(items):
    """Return a list of the distinct `items`, keeping the first of each."""
    result = []
    for item in items:
        if item not in result:
            result.append(item)
    return result
