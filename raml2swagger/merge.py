# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

"""
This module implements the overlay used when applying RAML traits and
resource types.  It follows JSON merge-patch
(http://tools.ietf.org/html/rfc7386) with one difference: a null value
in the patch means "declared but empty" in RAML, so it keeps the source
value instead of deleting it.

Neither input is modified; the result shares no mutable containers
with either input.

"""

import copy
import json
import logging

import raml2swagger.settings


logger = logging.getLogger(__name__)


def isdebug():
    return (raml2swagger.settings.VERBOSE_DEBUG and
            logger.isEnabledFor(logging.DEBUG))


def _merge(source, with_):
    if with_ is None:
        return copy.deepcopy(source)

    if not isinstance(source, dict) or not isinstance(with_, dict):
        return copy.deepcopy(with_)

    # copy.copy keeps the node class, and with it the source marks
    result = copy.copy(source)
    for key, value in with_.items():
        if value is None and key in result:
            result[key] = copy.deepcopy(source[key])
        elif key in result:
            result[key] = _merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    for key in source:
        if key not in with_:
            result[key] = copy.deepcopy(source[key])

    return result


def overlay(source, with_):
    """Return a new mapping from source with with_ laid over it.

    Mappings present on both sides are merged recursively; for any
    other value the one in with_ wins.

    """
    if isdebug():
        logger.debug('RAML overlay:\nsource = %s\nwith = %s' %
                     (json.dumps(source, indent=2, default=str),
                      json.dumps(with_, indent=2, default=str)))

    result = _merge(source, with_)

    if isdebug():
        logger.debug('RAML overlay result:\n%s' %
                     json.dumps(result, indent=2, default=str))

    return result
