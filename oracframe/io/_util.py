# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

# These are helper functions for the I/O routines in oracframe.io.

from functools import wraps
import importlib

from ..libutils import splitext, split_name
from .formats import formats


__all__ = ['get_backend_fn']


def get_backend_fn(funcname, filename):
    """
    Given a filename string and the name of a container function defined in
    oracframe.io, return the implementation of the latter function from the
    sub-module appropriate for the file format.

    Currently we use only the file extension names, rather than more foolproof
    magic or try-loader-except to determine file types, avoiding unnecessary
    I/O overheads & complication. Any "[component]" suffix on the filename is
    ignored for this purpose.

    This function may be used either directly by applications wanting to cache
    look-ups when doing repeated I/O operations or, internally (when defining
    new generic functions in oracframe.io), via the _get_loader decorator.

    """
    filename = split_name(str(filename))[0]
    fext = (splitext(filename)[1] or '').lower()
    backend_fn = None
    for fmt, vals in formats.items():
        if fext in vals:
            # Import back-end module if not done already; just assume it
            # exists if defined in formats dict, otherwise we have a bug.
            module = importlib.import_module('._{0}'.format(fmt), __package__)
            # Try to get the back-end function from the module:
            try:
                backend_fn = getattr(module, funcname)
            except AttributeError:
                raise IOError('back end \'%s\' has no function \'%s\'' \
                              % (fmt, funcname))
            break
    if not backend_fn:  # no back-end for file extension
        raise IOError('unsupported file format \'%s\'' % fext)
    return backend_fn


def _get_loader(fn):
    """
    A decorator that calls get_backend_fn() to determine automatically the
    appropriate back-end function corresponding to the generic one called
    directly and provide it to the latter as an additional argument (similar
    to 'self' in classes). Intended for internal use within oracframe.io.
    """
    @wraps(fn)  # use func's own name & docstring instead of the wrapper's
    def loader_wrapper(*args, **kwargs):
        loader = get_backend_fn(fn.__name__, args[0])
        return fn(loader, *args, **kwargs)
    return loader_wrapper
