# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Propagation of container header information to newly-created output files.

A container's header lives in a dedicated component (config['header_component'],
normally "HEADER"), distinct from the processed image components. When a
pipeline step turns one component of a raw container into a new output file,
these functions carry that header forward, either as a whole component or
by merging its cards into the output's own header.

Each operation works on a temporary copy of the destination, which only
replaces the original once completely written; on failure the destination
is left untouched and `ContainerIOError` is raised.
"""

import os
import shutil
import logging

from . import frame_defaults
from . import io as ofio
from .exceptions import ContainerIOError, MalformedHeaderError
from .header import HeaderSet
from .libutils import split_name, splitext, new_filename
from .merge import merge_card_images


__all__ = ['propagate_header', 'merge_fits_extension']


log = logging.getLogger(__name__)


def _atomic_update(dest, update_fn, source=None):
    """
    Apply update_fn to a temporary copy of `dest` (or to a not-yet-existing
    temporary name, if `dest` doesn't exist) and move the result over `dest`.
    """
    dirname = os.path.dirname(dest)
    ext = splitext(dest)[1] or ''
    tmpname = new_filename('tmp', base=os.path.basename(splitext(dest)[0]),
                           ext=ext, dirname=dirname)
    try:
        if os.path.exists(dest):
            shutil.copy2(dest, tmpname)
        update_fn(tmpname)
        os.replace(tmpname, dest)

    except (ContainerIOError, MalformedHeaderError, OSError) as err:
        if os.path.exists(tmpname):
            os.remove(tmpname)
        if isinstance(err, ContainerIOError):
            err.source = err.source or source
            err.dest = dest
            raise
        raise ContainerIOError('failed to update {0}'.format(dest),
                               source=source, dest=dest, status=str(err))


@frame_defaults
def propagate_header(source, dest, header=None, header_component=None):
    """
    Copy the header component of a source container into a destination
    container, creating the latter if it doesn't exist yet.

    Parameters
    ----------

    source : str
        The source container, or a component path within it (eg.
        "obs.fits[I1]"), in which case its container is used.

    dest : str
        Destination container filename. Any existing component with the
        same name as the header component is replaced completely.

    header : HeaderSet, optional
        The header to write if the source has no header component (normally
        the current in-memory header of the Frame), in which case a minimal
        placeholder component carrying it is synthesized.

    header_component : str, optional
        Name of the header component (default config['header_component']).

    Returns
    -------

    HeaderSet
        The header written to the destination component.

    Raises
    ------

    ContainerIOError
        If the source can't be read or the destination can't be written.

    """
    source_file = split_name(str(source))[0]
    dest = split_name(str(dest))[0]
    header_component = header_component.upper()

    if not os.path.exists(source_file):
        raise ContainerIOError('source container does not exist',
                               source=source_file, dest=dest,
                               status='missing')

    try:
        if ofio.has_component(source_file, header_component):
            meta = ofio.load_component_meta(source_file, header_component)
            data = ofio.load_component_data(source_file, header_component)
            log.debug('copying %s component from %s to %s',
                      header_component, source_file, dest)
        else:
            meta = header if header is not None else HeaderSet()
            data = None
            log.debug('no %s component in %s; writing %d cards to %s',
                      header_component, source_file, len(meta), dest)

    except MalformedHeaderError as err:
        raise ContainerIOError('failed to read header component',
                               source=source_file, dest=dest, status=str(err))
    except ContainerIOError as err:
        err.dest = dest
        raise

    def write(tmpname):
        if not os.path.exists(tmpname):
            ofio.create_container(tmpname)
        ofio.save_component(tmpname, header_component, meta, data)

    _atomic_update(dest, write, source=source_file)

    return meta.rename('{0}[{1}]'.format(dest, header_component))


@frame_defaults
def merge_fits_extension(source, dest, header_component=None):
    """
    Merge the header cards of a source container's header component into
    the primary header of an existing destination file.

    Cards of the destination that are textually identical to a source card
    are dropped, then the remaining destination cards are appended after the
    source cards and the destination header is rewritten with the combined
    list.

    Parameters
    ----------

    source : str
        The source container, or a component path within it.

    dest : str
        The destination file, which must exist.

    header_component : str, optional
        Name of the header component (default config['header_component']).

    Returns
    -------

    HeaderSet
        The merged header as written.

    Raises
    ------

    ContainerIOError
        If either file can't be read or the destination can't be written;
        the destination is then left as it was.

    """
    source_file = split_name(str(source))[0]
    dest = split_name(str(dest))[0]
    header_component = header_component.upper()

    if not os.path.exists(dest):
        raise ContainerIOError('destination does not exist',
                               source=source_file, dest=dest,
                               status='missing')

    try:
        first = ofio.load_card_images(source_file, header_component)
        second = ofio.load_card_images(dest)
    except MalformedHeaderError as err:
        raise ContainerIOError('failed to read FITS header cards',
                               source=source_file, dest=dest, status=str(err))

    merged = merge_card_images(first, second)
    log.debug('merging %d + %d header cards into %d for %s', len(first),
              len(second), len(merged), dest)

    _atomic_update(dest, lambda tmpname: ofio.save_card_images(tmpname,
                                                                merged),
                   source=source_file)

    return HeaderSet.from_images(merged, name=dest)
