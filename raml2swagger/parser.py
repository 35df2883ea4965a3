# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

from raml2swagger.exceptions import ParseError
from raml2swagger.util import check_type, is_annotation


class Parser(object):
    """ Reads the properties of one RAML mapping onto an object.

    Each call to `parse` consumes one key of the mapping, applying a
    default, a required check and a type check, and by default stores
    the value as an attribute of the target object.  Nested mappings
    get parsers of their own.

    Used as a context manager, a Parser raises ParseError on a clean
    exit if the mapping holds keys nobody consumed.  Annotations,
    i.e. keys like ``(deprecated)``, never count as unconsumed.

    :param dict input: the RAML mapping; None reads as empty
    :param name: label used in error messages, e.g. 'GET /books'
    :param obj: target object for parsed attributes, may be supplied
        later (once) via set_context()

    """
    def __init__(self, input, name, obj=None):
        if input is None:
            input = {}
        elif not isinstance(input, dict):
            raise ParseError('%s: definition should be a mapping, got: %s' %
                             (name, type(input).__name__), input)

        self.input = input
        self.name = name
        self.obj = None
        self.parsed_props = set()

        if obj:
            self.set_context(name, obj)

    def __enter__(self):
        return self

    def __exit__(self, type, value, tb):
        # Leftover keys only matter if everything else went fine
        if type is None:
            self.check_input()

    def set_context(self, name, obj):
        """Attach the object parsed attributes are stored on."""
        if self.obj is not None:
            raise ParseError('%s: parser target is already set' % self.name,
                             self.input)

        self.obj = obj
        self.name = name
        self.mark_object(obj)

    def mark_object(self, obj):
        """Give obj the source marks of the input mapping, if it has none."""
        if hasattr(obj, 'start_mark') or not hasattr(self.input, 'start_mark'):
            return
        obj.start_mark = self.input.start_mark
        obj.end_mark = self.input.end_mark

    def parse(self, prop, default_value=None, required=False,
              types=None, save=True, save_as=None):
        """Consume `prop` from the input mapping and return its value.

        A key that is absent, or present with a null value, yields
        `default_value` unless `required` is set, in which case it is
        an error.

        :param prop: key to read
        :param default_value: value used for an absent or null key
        :param required: raise ParseError if the key is absent or null
        :param types: type or list of types the value must be an
            instance of; null values are not checked
        :param save: store the value as an attribute of the target
        :param save_as: attribute name, `prop` by default

        :raises raml2swagger.exceptions.ParseError: on a missing
            required key or a value of the wrong type
        """
        if prop not in self.input:
            if required:
                raise ParseError("%s: missing required property '%s'" %
                                 (self.name, prop), self.input)
            val = default_value
        else:
            self.parsed_props.add(prop)
            val = self.input[prop]
            if val is None and required:
                raise ParseError("%s: property '%s' may not be null" %
                                 (self.name, prop), prop, self.input)
            elif val is None:
                val = default_value
            elif types:
                check_type(prop, val, types, self.input)

        if save:
            if not self.obj:
                raise ParseError("%s: no target to store '%s' on" %
                                 (self.name, prop), self.input)
            setattr(self.obj, save_as or prop, val)

        return val

    def parse_matching(self, match):
        """Consume every string key for which `match(key)` holds.

        :return: the matching keys, in input order
        """
        keys = [key for key in self.input
                if isinstance(key, str) and match(key)]
        self.parsed_props.update(keys)
        return keys

    def check_input(self):
        """Raise ParseError if any non-annotation key was not consumed."""
        unparsed = [key for key in self.input
                    if key not in self.parsed_props and not is_annotation(key)]
        if unparsed:
            raise ParseError('%s: unrecognized properties in definition: %s' %
                             (self.name, ','.join(str(k) for k in unparsed)),
                             unparsed[0], self.input)
