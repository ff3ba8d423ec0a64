# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Public I/O routines used by oracframe. These are wrappers for their
format-specific back ends (which call astropy.io.fits etc.). Users should
normally work with Frame objects rather than calling these directly.
"""

# The functions defined in this file determine the API & doc-string for their
# format-specific counterparts, to which the work of loading/saving/etc. is
# delegated. Back-end look-up is done automatically by the _get_loader
# decorator, such that these can be minimal definitions, or can be cached by
# calling get_backend_fn() directly. Note that no common processing can be done
# here if the same behaviour is expected via either look-up method.

from .mapio import *            # want these in the public namespace
from .formats import formats
from ._util import _get_loader  # since private attributes get excluded from *
from ._util import *


@_get_loader
def load_common_meta(loader, filename):
    """
    Open an existing file and return the meta-data common to all its
    components (ie. the FITS primary header).

    Parameters
    ----------

    filename : `str`
        Name of an existing file.

    Returns
    -------

    `HeaderSet`
        The header, without structural keywords.

    Raises
    ------

    MalformedHeaderError
        If the file is missing or its header can't be parsed.

    """
    return loader(filename)


@_get_loader
def load_component_meta(loader, filename, component):
    """
    Load the header of a named component within a container file, returning
    a `HeaderSet` (raising MalformedHeaderError if it can't be read).
    """
    return loader(filename, component)


@_get_loader
def load_component_data(loader, filename, component):
    """
    Load the data array of a named component within a container file,
    returning None for a component that has a header but no data.
    """
    return loader(filename, component)


@_get_loader
def list_components(loader, filename):
    """
    Return the names of the image components within a container, in file
    order (an empty list for a simple file).
    """
    return loader(filename)


@_get_loader
def has_component(loader, filename, component):
    """
    Is there a component of the given name within an existing file?
    """
    return loader(filename, component)


@_get_loader
def load_card_images(loader, filename, component=None):
    """
    Return the header of the primary HDU, or of the named component, as a
    list of FITS card images (excluding structural keywords).
    """
    return loader(filename, component)


@_get_loader
def create_container(loader, filename, meta=None):
    """
    Create a new, empty container file, optionally with a primary header.
    The file must not exist already.
    """
    return loader(filename, meta)


@_get_loader
def save_common_meta(loader, filename, meta):
    """
    Replace the (non-structural) primary header of an existing file with the
    supplied `HeaderSet`, leaving the data & other components alone.
    """
    return loader(filename, meta)


@_get_loader
def save_component(loader, filename, component, meta=None, data=None):
    """
    Save a component with the given name, header and data array to a
    container, replacing any existing component of the same name and creating
    the file if it doesn't exist yet. If `data` is None, a 1-element
    placeholder array is written.
    """
    return loader(filename, component, meta, data)


@_get_loader
def save_card_images(loader, filename, images, component=None):
    """
    Replace the (non-structural) header of the primary HDU, or of the named
    component, with the supplied list of FITS card images.
    """
    return loader(filename, images, component)


@_get_loader
def delete_component(loader, filename, component):
    """
    Remove a named component from an existing container (doing nothing if
    it isn't there).
    """
    return loader(filename, component)


@_get_loader
def map_file(loader, filename):
    """
    Open an existing file and return a list of ComponentMapIO instances
    corresponding to its named image components.

    Returns
    -------

    list of ComponentMapIO

    """
    return loader(filename)
