# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.


#
# General exception and base class
#
class Raml2SwaggerException(Exception):
    """ Base exception class for raml2swagger errors. """


class UsageError(Raml2SwaggerException):
    """ Command line tool invoked with bad arguments. """
    pass


#
# Errors that may point back into the RAML source
#
class MarkedError(Raml2SwaggerException):
    """ Base exception class for errors tied to marked RAML nodes.

    :param message: description of the problem
    :param obj: the offending node; its marks are used if it has any
    :param parent_obj: mapping holding ``obj`` as a key, used to find
        the marks of the key when ``obj`` itself is unmarked
    :param mark: explicit start mark, used when no node is available

    """
    def __init__(self, message, obj=None, parent_obj=None, mark=None):
        super(MarkedError, self).__init__(message)
        self.message = message

        if hasattr(obj, 'start_mark'):
            self.start_mark = obj.start_mark
            self.end_mark = obj.end_mark
        elif (  isinstance(parent_obj, dict) and
                not isinstance(obj, (dict, list)) and
                obj in parent_obj and
                hasattr(_key_node(parent_obj, obj), 'start_mark')):
            key = _key_node(parent_obj, obj)
            self.start_mark = key.start_mark
            self.end_mark = key.end_mark
        elif hasattr(parent_obj, 'start_mark'):
            self.start_mark = parent_obj.start_mark
            self.end_mark = parent_obj.end_mark
        else:
            self.start_mark = mark
            self.end_mark = None

    def __str__(self):
        msg = []
        msg.append(super(MarkedError, self).__str__())
        if self.start_mark:
            msg.append('Source data locations:')
            msg.append('Start mark: ' + str(self.start_mark))
        if self.end_mark:
            msg.append('End mark:   ' + str(self.end_mark))
        return '\n'.join(msg)


def _key_node(obj, prop):
    # Keys of a marked mapping carry their own marks
    for key in obj.keys():
        if key == prop:
            return key
    return None


class LoadError(MarkedError):
    """ RAML source could not be read or parsed. """


class ParseError(LoadError):
    """ RAML definition is structurally invalid. """


class ConversionError(MarkedError):
    """ Loaded RAML cannot be expressed as Swagger 2.0. """


class UnsupportedFormat(ConversionError):
    """ Requested source, target or output format is not supported. """
    pass
