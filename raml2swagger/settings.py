# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

import os

#
# Set to True for verbose debugging.  The raml2swagger command then logs
# at DEBUG level to stderr, including every trait and resource type
# merge.  Output on stdout is unaffected.
#
VERBOSE_DEBUG = ('RAML2SWAGGER_VERBOSE_DEBUG' in os.environ)
