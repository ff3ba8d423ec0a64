import numpy as np
import astropy.io.fits as pyfits


def make_container(filename, primary=(), components=()):
    """
    Write a test MEF file with the given primary header cards, followed by a
    named image extension for each (name, cards) pair in `components`. Cards
    are (keyword, value) or (keyword, (value, comment)) tuples.
    """
    phu = pyfits.PrimaryHDU()
    for key, val in primary:
        phu.header[key] = val

    hdulist = pyfits.HDUList([phu])
    for n, (name, cards) in enumerate(components):
        hdu = pyfits.ImageHDU(data=np.full((2, 3), n, dtype=np.float32),
                              name=name)
        for key, val in cards:
            hdu.header[key] = val
        hdulist.append(hdu)

    hdulist.writeto(str(filename))

    return str(filename)
