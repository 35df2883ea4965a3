# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
The `Converter` class loads an API definition in one format and
serializes it in another.  The only supported pair is RAML 1.0 to
Swagger 2.0:

.. code-block:: python

   >>> converter = Converter(Formats.RAML10, Formats.SWAGGER)
   >>> converter.load_file('bookstore.raml')
   >>> print(converter.convert('yaml'))
   swagger: '2.0'
   info:
     title: Bookstore
   ...

Loading raises LoadError, converting raises ConversionError.
"""

import json
import logging

import yaml

from raml2swagger.raml import Api
from raml2swagger.swagger import SwaggerWriter
from raml2swagger.exceptions import ConversionError, UnsupportedFormat

__all__ = ['Formats', 'Converter']

logger = logging.getLogger(__name__)


class Formats(object):
    RAML10 = 'RAML10'
    SWAGGER = 'SWAGGER'


SUPPORTED_CONVERSIONS = [(Formats.RAML10, Formats.SWAGGER)]

SYNTAXES = ('yaml', 'json')


class SwaggerDumper(yaml.SafeDumper):
    """ Block style YAML dumper that keeps mapping order. """

    def ignore_aliases(self, data):
        return True


def _represent_dict(dumper, data):
    return dumper.represent_mapping('tag:yaml.org,2002:map', data.items())


def _represent_list(dumper, data):
    return dumper.represent_sequence('tag:yaml.org,2002:seq', data)


def _represent_str(dumper, data):
    return dumper.represent_str(str(data))

# Marked nodes and OrderedDicts are subclasses of the builtins
SwaggerDumper.add_multi_representer(dict, _represent_dict)
SwaggerDumper.add_multi_representer(list, _represent_list)
SwaggerDumper.add_multi_representer(str, _represent_str)


class Converter(object):
    """ Converts an API definition between formats.

    :param from_format: format of the input, `Formats.RAML10`
    :param to_format: format of the output, `Formats.SWAGGER`
    :raises UnsupportedFormat: for any other pair of formats

    """
    def __init__(self, from_format, to_format):
        if (from_format, to_format) not in SUPPORTED_CONVERSIONS:
            raise UnsupportedFormat(
                "Conversion from %s to %s is not supported" %
                (from_format, to_format))

        self.from_format = from_format
        self.to_format = to_format
        self.api = None

    def load_file(self, filename):
        """Load the RAML file `filename`, replacing any loaded API."""
        self.api = None
        self.api = Api.create_from_file(filename)
        logger.debug("Loaded '%s' from %s" % (self.api.title, filename))

    def load_data(self, text, base_dir=None):
        """Load a RAML document from text.

        :param base_dir: directory includes and libraries are resolved
            against, defaults to the current directory
        """
        self.api = None
        self.api = Api.create_from_text(text, base_dir=base_dir)

    def get_swagger(self):
        """Return the Swagger document as an OrderedDict."""
        if self.api is None:
            raise ConversionError("No API definition has been loaded")
        return SwaggerWriter(self.api).write()

    def convert(self, syntax='yaml'):
        """Return the loaded API serialized as Swagger.

        :param syntax: 'yaml' or 'json'
        :raises UnsupportedFormat: if syntax is neither
        :raises ConversionError: if nothing was loaded, or the API uses
            something Swagger 2.0 cannot represent
        """
        if syntax not in SYNTAXES:
            raise UnsupportedFormat("Unsupported output syntax '%s'" % syntax)

        swagger = self.get_swagger()
        if syntax == 'json':
            return json.dumps(swagger, indent=2, default=str)

        return yaml.dump(swagger, Dumper=SwaggerDumper,
                         default_flow_style=False, allow_unicode=True,
                         sort_keys=False)


def convert_file(filename, syntax='yaml'):
    """Convert the RAML file `filename` to Swagger text."""
    converter = Converter(Formats.RAML10, Formats.SWAGGER)
    converter.load_file(filename)
    return converter.convert(syntax)

