# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

from raml2swagger.converter import Converter, Formats
from raml2swagger.raml import Api
from raml2swagger.exceptions import (Raml2SwaggerException, MarkedError,
                                     LoadError, ParseError, ConversionError,
                                     UnsupportedFormat, UsageError)

__all__ = ['Converter', 'Formats', 'Api', 'Raml2SwaggerException',
           'MarkedError', 'LoadError', 'ParseError', 'ConversionError',
           'UnsupportedFormat', 'UsageError']
