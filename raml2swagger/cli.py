# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import sys
import logging
import traceback

from optparse import OptionParser

import raml2swagger.settings
from raml2swagger.converter import Converter, Formats
from raml2swagger.exceptions import UsageError

logger = logging.getLogger(__name__)


class Raml2SwaggerOptionParser(OptionParser):
    """ OptionParser that raises UsageError instead of exiting. """

    def error(self, msg):
        raise UsageError(msg)


def load_spec(path):
    """Load the RAML file at `path`, returning a loaded Converter."""
    converter = Converter(Formats.RAML10, Formats.SWAGGER)
    converter.load_file(path)
    return converter


def convert(converter, target_format='yaml'):
    return converter.convert(target_format)


class Raml2Swagger(object):
    def __init__(self, stdout=None):
        self.stdout = stdout or sys.stdout
        self.options = None
        self.filename = None

    def parse_args(self, args):
        self.parser = parser = Raml2SwaggerOptionParser(
            usage='%prog <path-to-raml-file>',
            description="Convert a RAML 1.0 API definition to Swagger 2.0 "
                        "YAML, written to stdout.")

        (options, args) = parser.parse_args(args)

        if len(args) > 1:
            logger.warning("Ignoring extra arguments: %s" %
                           ' '.join(args[1:]))

        self.options = options
        self.filename = args[0] if args else None

    def run(self):
        converter = load_spec(self.filename)
        output = convert(converter, 'yaml')
        self.stdout.write(output)
        self.stdout.write('\n')


def main(argv=None, stdout=None, stderr=None):
    """Run the command line tool, returning the exit code.

    :param argv: arguments after the program name, defaults to
        sys.argv[1:]
    """
    if argv is None:
        argv = sys.argv[1:]
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    if raml2swagger.settings.VERBOSE_DEBUG:
        logging.basicConfig(level=logging.DEBUG, stream=stderr)

    cmd = Raml2Swagger(stdout)
    try:
        cmd.parse_args(argv)
        cmd.run()
    except Exception:
        stderr.write(traceback.format_exc())
        return 1
    return 0
