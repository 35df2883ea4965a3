# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
Parameter substitution for RAML resource types and traits.

Values in a resource type or trait may reference parameters as
``<<name>>``, optionally followed by transform functions:

    >>> substitute('<<resourcePathName | !singularize>>Id',
                   {'resourcePathName': 'books'})
    'bookId'

A value that is exactly one parameter reference is replaced by the
parameter value itself, which need not be a string.
"""

import re

from raml2swagger.exceptions import ParseError

PARAM = re.compile(r'<<\s*([^<>|\s]+)\s*((?:\|\s*![a-zA-Z]+\s*)*)>>')
FUNCTION = re.compile(r'!([a-zA-Z]+)')
WORD = re.compile(r'[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+')


def _words(s):
    return WORD.findall(s)


def singularize(s):
    if s.endswith('ies') and len(s) > 3:
        return s[:-3] + 'y'
    if s.endswith(('sses', 'shes', 'ches', 'xes', 'zes')):
        return s[:-2]
    if s.endswith('s') and not s.endswith('ss'):
        return s[:-1]
    return s


def pluralize(s):
    if s.endswith('y') and len(s) > 1 and s[-2] not in 'aeiou':
        return s[:-1] + 'ies'
    if s.endswith(('s', 'sh', 'ch', 'x', 'z')):
        return s + 'es'
    return s + 's'


def lowercamelcase(s):
    words = _words(s)
    if not words:
        return s
    return words[0].lower() + ''.join(w.capitalize() for w in words[1:])


def uppercamelcase(s):
    return ''.join(w.capitalize() for w in _words(s)) or s


FUNCTIONS = {
    'singularize': singularize,
    'pluralize': pluralize,
    'uppercase': lambda s: s.upper(),
    'lowercase': lambda s: s.lower(),
    'lowercamelcase': lowercamelcase,
    'uppercamelcase': uppercamelcase,
    'lowerunderscorecase': lambda s: '_'.join(_words(s)).lower(),
    'upperunderscorecase': lambda s: '_'.join(_words(s)).upper(),
    'lowerhyphencase': lambda s: '-'.join(_words(s)).lower(),
    'upperhyphencase': lambda s: '-'.join(_words(s)).upper(),
}


def _value(match, params, obj):
    name, functions = match.group(1), match.group(2)
    if name not in params:
        raise ParseError("Parameter '%s' was not provided" % name, obj)

    value = params[name]
    for function in FUNCTION.findall(functions):
        if function not in FUNCTIONS:
            raise ParseError("Unknown transform function '!%s'" % function,
                             obj)
        value = FUNCTIONS[function](str(value))
    return value


def substitute(obj, params):
    """Return a copy of obj with every ``<<name>>`` reference replaced.

    Mapping keys are substituted as well.

    :param obj: the resource type or trait body
    :param params: mapping of parameter name to value
    :raises ParseError: if a referenced parameter is not in params
    """
    if isinstance(obj, dict):
        result = type(obj)()
        for key, value in obj.items():
            result[substitute(key, params)] = substitute(value, params)
        if hasattr(obj, 'start_mark'):
            result.start_mark = obj.start_mark
            result.end_mark = obj.end_mark
        return result

    if isinstance(obj, list):
        return type(obj)(substitute(value, params) for value in obj)

    if not isinstance(obj, str) or '<<' not in obj:
        return obj

    match = PARAM.fullmatch(obj.strip())
    if match is not None:
        return _value(match, params, obj)

    return PARAM.sub(lambda m: str(_value(m, params, obj)), obj)
