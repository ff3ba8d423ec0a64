# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

import os

import numpy as np
import astropy.io.fits as pyfits
from astropy.io.fits.verify import VerifyError

from ..exceptions import MalformedHeaderError, ContainerIOError
from ..header import HeaderSet, is_structural
from ..libutils import join_name
from .mapio import ComponentMapIO


# Errors io.fits can produce for missing, truncated or garbled files:
_READ_ERRORS = (OSError, ValueError, KeyError, IndexError, VerifyError)


def _find(hdulist, component):
    # Return the index of the named image extension, or None:
    component = component.upper()
    for idx, hdu in enumerate(hdulist):
        if idx > 0 and hdu.name.upper() == component:
            return idx
    return None


def load_common_meta(filename):

    try:
        hdr = pyfits.getheader(filename, 0)
    except _READ_ERRORS as err:
        raise MalformedHeaderError('failed to read header of {0}: {1}'\
                                   .format(filename, err), filename)
    return HeaderSet.from_fits_header(hdr, name=filename)


def load_component_meta(filename, component):

    path = join_name(filename, component)
    try:
        hdr = pyfits.getheader(filename, extname=component)
    except _READ_ERRORS as err:
        raise MalformedHeaderError('failed to read header of {0}: {1}'\
                                   .format(path, err), path)
    return HeaderSet.from_fits_header(hdr, name=path)


def load_component_data(filename, component):

    # A header-only component (eg. HEADER) has no data array, giving None:
    try:
        with pyfits.open(filename, mode='readonly') as hdulist:
            idx = _find(hdulist, component)
            if idx is None:
                raise KeyError('no component {0}'.format(component))
            data = hdulist[idx].data
            return None if data is None else np.array(data)
    except _READ_ERRORS as err:
        raise ContainerIOError('failed to read component data', source=\
                               join_name(filename, component), status=str(err))


def list_components(filename):

    return [cmap.name for cmap in map_file(filename)]


def has_component(filename, component):

    try:
        with pyfits.open(filename, mode='readonly') as hdulist:
            return _find(hdulist, component) is not None
    except _READ_ERRORS:
        return False


def load_card_images(filename, component=None):

    if component is None:
        hset = load_common_meta(filename)
    else:
        hset = load_component_meta(filename, component)
    return hset.to_images()


def create_container(filename, meta=None):

    hdr = meta.to_fits_header() if meta else None
    phu = pyfits.PrimaryHDU(header=hdr)
    try:
        phu.writeto(filename, overwrite=False)
    except (OSError, VerifyError) as err:
        raise ContainerIOError('failed to create container', dest=filename,
                               status=str(err))


def save_common_meta(filename, meta):

    try:
        with pyfits.open(filename, mode='update') as hdulist:
            _replace_cards(hdulist[0].header,
                           [card.to_fits_card() for card in meta])
    except _READ_ERRORS as err:
        raise ContainerIOError('failed to update primary header',
                               dest=filename, status=str(err))


def save_component(filename, component, meta=None, data=None):

    # Components without data get a 1-element placeholder array, like the
    # minimal image synthesized for a container that had no header component:
    if data is None:
        data = np.zeros(1, dtype=np.float32)

    hdu = pyfits.ImageHDU(data=data,
                          header=meta.to_fits_header() if meta else None,
                          name=component)

    try:
        if not os.path.exists(filename):
            pyfits.HDUList([pyfits.PrimaryHDU(), hdu]).writeto(filename)
            return

        with pyfits.open(filename, mode='update') as hdulist:
            # Replace any same-named component completely, rather than
            # updating it in place:
            idx = _find(hdulist, component)
            if idx is not None:
                del hdulist[idx]
            hdulist.append(hdu)

    except _READ_ERRORS as err:
        raise ContainerIOError('failed to save component',
                               dest=join_name(filename, component),
                               status=str(err))


def save_card_images(filename, images, component=None):

    try:
        cards = [pyfits.Card.fromstring(image) for image in images]
        with pyfits.open(filename, mode='update') as hdulist:
            idx = 0 if component is None else _find(hdulist, component)
            if idx is None:
                raise KeyError('no component {0}'.format(component))
            _replace_cards(hdulist[idx].header, cards)

    except _READ_ERRORS as err:
        raise ContainerIOError('failed to write header cards',
                               dest=join_name(filename, component),
                               status=str(err))


def _replace_cards(hdr, cards):
    # Remove the existing non-structural cards, working backwards so the
    # indices stay valid, then add the new ones at the end:
    for idx in reversed(range(len(hdr))):
        if not is_structural(hdr.cards[idx].keyword):
            del hdr[idx]
    for card in cards:
        if not is_structural(card.keyword):
            hdr.append(card, useblanks=False, end=True)


def delete_component(filename, component):

    try:
        with pyfits.open(filename, mode='update') as hdulist:
            idx = _find(hdulist, component)
            if idx is not None:
                del hdulist[idx]
    except _READ_ERRORS as err:
        raise ContainerIOError('failed to delete component',
                               dest=join_name(filename, component),
                               status=str(err))


def map_file(filename):

    try:
        hdulist = pyfits.open(filename, mode='readonly')
    except _READ_ERRORS as err:
        raise MalformedHeaderError('failed to open {0}: {1}'\
                                   .format(filename, err), filename)

    # Classify image extensions by EXTNAME, remembering the original MEF
    # index (any unnamed extensions are not addressable as components):
    maplist = []
    with hdulist:
        for idx, hdu in enumerate(hdulist):
            if idx > 0 and isinstance(hdu, pyfits.ImageHDU) and hdu.name:
                maplist.append(ComponentMapIO(filename, hdu.name.upper(),
                                              idx=idx))

    # We don't keep the file open continually, since it may get updated later
    # by other pipeline steps.
    return maplist
