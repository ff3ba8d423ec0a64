# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Exception & warning classes raised (or logged) by oracframe.
"""

__all__ = ['OracFrameError', 'MalformedHeaderError', 'ContainerIOError',
           'HeaderConflictWarning']


class OracFrameError(Exception):
    """
    Base class for the errors raised by this package.
    """
    error_message = None

    def __init__(self, error_message):
        Exception.__init__(self, error_message)
        self.error_message = error_message


class MalformedHeaderError(OracFrameError, IOError):
    """
    A file's header could not be read or parsed. Header assembly recovers
    from this locally by substituting an empty header for the file.
    """

    def __init__(self, error_message, filename=None):
        OracFrameError.__init__(self, error_message)
        self.filename = filename

    def __str__(self):
        return str(self.error_message)


class ContainerIOError(OracFrameError, IOError):
    """
    A container could not be opened, created or written while propagating
    header information. The destination is left as it was before the
    failed operation.

    Attributes
    ----------

    source : str or None
        The container from which the header was being read.

    dest : str or None
        The container that was to be written.

    status : str or None
        Description of the underlying failure (usually the text of the
        exception raised by the I/O library).

    """

    def __init__(self, error_message, source=None, dest=None, status=None):
        OracFrameError.__init__(self, error_message)
        self.source = source
        self.dest = dest
        self.status = status

    def __str__(self):
        return '{0} (source: {1}; dest: {2}; status: {3})'.format(
            self.error_message, self.source, self.dest, self.status)


class HeaderConflictWarning(UserWarning):
    """
    A keyword has different values in places that were expected to agree.
    The value already present in the primary header is kept.
    """
    pass
