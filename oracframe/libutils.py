# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Some lower-level utility functions (with minimal dependencies) that are used
internally and are also made available as part of the public API.
"""

import os, os.path
import tempfile

from . import config


def splitext(path):
    """
    A version of splitext that splits at the first separator rather than the
    last one (so 'file.fits.gz' gives 'file' & 'fits.gz'). It also returns
    None for the extension value where there isn't one (instead of ''), just
    to avoid incorrect reconstruction of 'file.' as 'file' or vice versa.
    """

    components = os.path.basename(path).split(os.extsep, 1)  # len always 1->2
    ext = None if len(components) == 1 else components[1]
    root = path if ext is None else path[:-len(os.extsep+ext)]

    return root, ext


def split_name(path):
    """
    Split a path of the form "file.fits[I1]" into the container filename and
    the component name within it, returning None for the latter when the path
    refers to a whole file. Component names are upper-cased, as for FITS
    EXTNAME look-ups.
    """
    match = config['component_regex'].match(path)
    if match:
        return match.group('file'), match.group('comp').strip().upper()
    return path, None


def join_name(filename, component=None):
    """
    Reconstruct a path from a (filename, component) tuple of the type
    produced by split_name().
    """
    return filename if component is None else \
           '{0}[{1}]'.format(filename, component)


def new_filename(purpose='tmp', base='', ext='', dirname='', full_path=False):
    """
    Generate a new filename string that is not already used in the specified
    directory (beginning with 'tmp' by default, for use as a temporary file).
    Unlike Python's tempfile module, this function does not actually open the
    file, making the result suitable for passing to other writers, but as
    a result, a race condition may occur if the file is not created
    immediately, which is the user's responsibility.

    Parameters
    ----------

    purpose : str, optional
        Starting string, used to indicate the file's purpose (default 'tmp').

    base : convertible to str, optional
        A base name to add between "tmp_" and the last few, randomized
        characters, to help distinguish temporary filenames, eg. for
        troubleshooting purposes.

    ext : convertible to str, optional
        An file extension name to use (eg 'fits'). The leading dot is optional
        and will be added if needed.

    dirname : str, optional
        Directory in which the name must be unique (default: the current
        working directory). Using the directory of the file to be replaced
        keeps a later os.replace() on the same file system.

    full_path : bool
        Return the full path to the file, rather than a name relative to
        `dirname` (default False)?


    Returns
    -------

    str
        A filename that doesn't already exist in the directory.

    """
    base = str(base)
    ext = str(ext)

    # Add the leading dot to any specified file extension, if necessary
    # (checking type to produce a less obscure error below if not a string):
    if ext and not ext.startswith(os.extsep):
        ext = os.extsep + ext

    # Python doesn't provide a (non-deprecated) way to produce a temporary
    # filename without actually creating and opening the file (to avoid
    # possible race conditions & exploits). One can, however, let Python close
    # the file again and then recycle its name, saving the file immediately
    # to avoid possible collisions.
    with tempfile.NamedTemporaryFile(
        prefix='{0}_{1}{2}'.format(purpose, base, '_' if base else ''),
        suffix=ext, dir=dirname or os.curdir) as tmpfile:

        tmpname = tmpfile.name

    if full_path:
        return tmpname
    return os.path.join(dirname, os.path.basename(tmpname)) if dirname \
           else os.path.basename(tmpname)
