# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Per-instrument configuration: how raw FITS keywords map onto the generic
ORAC_* header vocabulary used by the pipeline.

Most translations are simple keyword renames, defined by a look-up table.
Where a value needs more than a rename, an instrument registers a pair of
functions for that generic name instead, (to_fn, from_fn), where to_fn(frame)
returns the generic value and from_fn(frame) returns a dict of FITS
keyword/value pairs that would reproduce it.
"""

from collections import OrderedDict


__all__ = ['ORAC_INTERNAL_HEADERS', 'InstrumentConfig', 'INSTRUMENTS',
           'get_instrument', 'register_instrument', 'to_generic',
           'from_generic']


# The generic headers calculated for every frame where a translation exists:
ORAC_INTERNAL_HEADERS = [
    'AIRMASS_START', 'AIRMASS_END', 'DEC_BASE', 'EQUINOX', 'FILTER',
    'INSTRUMENT', 'NOFFSETS', 'OBJECT', 'OBSERVATION_MODE',
    'OBSERVATION_NUMBER', 'OBSERVATION_TYPE', 'RA_BASE', 'ROTATION',
    'DEC_SCALE', 'DETECTOR_READ_TYPE', 'EXPOSURE_TIME', 'GAIN', 'RA_SCALE',
    'DEC_TELESCOPE_OFFSET', 'RA_TELESCOPE_OFFSET', 'UTEND', 'UTSTART',
    'CONFIGURATION_INDEX', 'GRATING_DISPERSION', 'GRATING_NAME',
    'GRATING_ORDER', 'GRATING_WAVELENGTH', 'NUMBER_OF_EXPOSURES',
    'NUMBER_OF_READS', 'SLIT_ANGLE', 'SLIT_NAME', 'STANDARD', 'UTDATE',
    'X_DIM', 'Y_DIM', 'RECIPE', 'DR_RECIPE', 'GROUP', 'NSUBS'
]


def _strip_prefix(key):
    key = str(key).upper()
    return key[5:] if key.startswith('ORAC_') else key


class InstrumentConfig(object):
    """
    The instrument-specific settings for a `Frame`.

    Parameters
    ----------

    name : str
        Instrument name (eg. 'UFTI').

    raw_prefix : str, optional
        Fixed part at the start of raw filenames.

    raw_suffix : str, optional
        Raw filename extension, including the dot.

    keyword_map : dict of str : str, optional
        Generic name (without the "ORAC_" prefix) to raw FITS keyword.

    overrides : dict of str : (callable, callable), optional
        Generic name to (to_fn, from_fn) translation functions, taking
        precedence over `keyword_map`. Either function may be None, in which
        case the keyword_map entry (if any) applies in that direction.

    base : InstrumentConfig, optional
        Another configuration whose keyword_map & overrides this one extends
        (its own entries winning).

    """

    def __init__(self, name, raw_prefix='', raw_suffix='.fits',
                 keyword_map=None, overrides=None, base=None):

        self.name = str(name).upper()
        self.raw_prefix = raw_prefix
        self.raw_suffix = raw_suffix

        self.keyword_map = OrderedDict()
        self.overrides = OrderedDict()
        if base is not None:
            self.keyword_map.update(base.keyword_map)
            self.overrides.update(base.overrides)
        if keyword_map:
            self.keyword_map.update((_strip_prefix(key), val.upper())
                                    for key, val in keyword_map.items())
        if overrides:
            self.overrides.update((_strip_prefix(key), fns)
                                  for key, fns in overrides.items())

    def generic_keys(self):
        """
        Return the generic names this instrument can translate, in the order
        of ORAC_INTERNAL_HEADERS followed by any others.
        """
        known = set(self.keyword_map) | set(self.overrides)
        keys = [key for key in ORAC_INTERNAL_HEADERS if key in known]
        keys.extend(key for key in list(self.keyword_map) +
                    list(self.overrides) if key not in keys)
        return keys

    def __repr__(self):
        return 'InstrumentConfig \'{0}\''.format(self.name)


def to_generic(frame, key):
    """
    Return the value of generic header `key` (with or without the "ORAC_"
    prefix) for a frame, or None if no translation exists or the raw
    keyword is absent.
    """
    key = _strip_prefix(key)
    inst = frame.instrument

    to_fn = inst.overrides.get(key, (None, None))[0]
    if to_fn is not None:
        return to_fn(frame)

    fkey = inst.keyword_map.get(key)
    if fkey is None:
        return None
    return frame.hdr(fkey)


def from_generic(frame, key):
    """
    Translate the frame's current value of generic header `key` back into
    the equivalent FITS keyword(s), as a dict (empty if no translation is
    available).
    """
    key = _strip_prefix(key)
    inst = frame.instrument

    from_fn = inst.overrides.get(key, (None, None))[1]
    if from_fn is not None:
        return dict(from_fn(frame))

    fkey = inst.keyword_map.get(key)
    if fkey is None:
        return {}
    return {fkey : frame.uhdr.get('ORAC_' + key)}


INSTRUMENTS = OrderedDict()


def register_instrument(cfg):
    """
    Add an InstrumentConfig to the registry (replacing any of the same name)
    and return it.
    """
    INSTRUMENTS[cfg.name] = cfg
    return cfg


def get_instrument(name):
    """
    Look up a registered InstrumentConfig by name (case insensitive). An
    InstrumentConfig instance is returned unchanged.
    """
    if isinstance(name, InstrumentConfig):
        return name
    try:
        return INSTRUMENTS[str(name).upper()]
    except KeyError:
        raise KeyError('unknown instrument \'{0}\' (known: {1})'.format(
            name, ', '.join(INSTRUMENTS)))


# The translations common to all instruments:
GENERIC = register_instrument(InstrumentConfig('GENERIC', keyword_map={
    'INSTRUMENT' : 'INSTRUME',
    'OBJECT' : 'OBJECT',
    'OBSERVATION_NUMBER' : 'OBSNUM',
    'OBSERVATION_TYPE' : 'OBSTYPE',
    'RECIPE' : 'RECIPE',
    'DR_RECIPE' : 'DRRECIPE',
    'GROUP' : 'GRPNUM',
    'NSUBS' : 'N_SUBS',
    'STANDARD' : 'STANDARD',
    'UTDATE' : 'UTDATE',
    'UTSTART' : 'UTSTART',
    'UTEND' : 'UTEND'
}))

UFTI = register_instrument(InstrumentConfig('UFTI', raw_prefix='f',
    base=GENERIC, keyword_map={
        'EXPOSURE_TIME' : 'EXP_TIME',
        'DEC_SCALE' : 'CDELT2',
        'DEC_TELESCOPE_OFFSET' : 'TDECOFF',
        'FILTER' : 'FILTER',
        'GAIN' : 'GAIN',
        'RA_SCALE' : 'CDELT1',
        'RA_TELESCOPE_OFFSET' : 'TRAOFF'
    }))


def _uist_to_utstart(frame):
    # The exposure start is more accurately recorded in the header of the
    # first integration than in the container header:
    utstart = frame.get_named_subheader('I1', 'UTSTART')
    if utstart is None:
        utstart = frame.hdr('UTSTART')
    return utstart


def _uist_from_utstart(frame):
    return {'UTSTART' : frame.uhdr.get('ORAC_UTSTART')}


UIST = register_instrument(InstrumentConfig('UIST', raw_prefix='u',
    base=GENERIC, keyword_map={
        'DEC_TELESCOPE_OFFSET' : 'TDECOFF',
        'RA_SCALE' : 'CDELT2',
        'RA_TELESCOPE_OFFSET' : 'TRAOFF',
        'CONFIGURATION_INDEX' : 'CNFINDEX',
        'GRATING_DISPERSION' : 'CDELT1',
        'GRATING_NAME' : 'GRISM',
        'GRATING_ORDER' : 'GRATORD',
        'GRATING_WAVELENGTH' : 'CENWAVL',
        'SLIT_ANGLE' : 'SLIT_PA',
        'SLIT_NAME' : 'SLITNAME',
        'X_DIM' : 'DCOLUMNS',
        'Y_DIM' : 'DROWS',
        'OBSERVATION_MODE' : 'INSTMODE',
        'DETECTOR_READ_TYPE' : 'DET_MODE',
        'GAIN' : 'GAIN',
        'NUMBER_OF_EXPOSURES' : 'NEXP',
        'NUMBER_OF_READS' : 'NREADS'
    }, overrides={
        'UTSTART' : (_uist_to_utstart, _uist_from_utstart)
    }))

CGS4 = register_instrument(InstrumentConfig('CGS4', raw_prefix='c',
    base=GENERIC, keyword_map={
        'CONFIGURATION_INDEX' : 'CNFINDEX',
        'DETECTOR_READ_TYPE' : 'MODE',
        'EXPOSURE_TIME' : 'DEXPTIME',
        'GRATING_DISPERSION' : 'GDISP',
        'GRATING_NAME' : 'GRATING',
        'GRATING_ORDER' : 'GORDER',
        'GRATING_WAVELENGTH' : 'GLAMBDA',
        'NUMBER_OF_EXPOSURES' : 'NEXP',
        'SLIT_ANGLE' : 'SANGLE',
        'SLIT_NAME' : 'SLIT',
        'X_DIM' : 'DCOLUMNS',
        'Y_DIM' : 'DROWS'
    }))

WFCAM = register_instrument(InstrumentConfig('WFCAM', raw_prefix='w',
    base=GENERIC, keyword_map={
        'AIRMASS_START' : 'AMSTART',
        'AIRMASS_END' : 'AMEND',
        'EXPOSURE_TIME' : 'EXP_TIME',
        'FILTER' : 'FILTER',
        'GAIN' : 'GAIN',
        'NUMBER_OF_READS' : 'NREADS',
        'DEC_TELESCOPE_OFFSET' : 'TDECOFF',
        'RA_TELESCOPE_OFFSET' : 'TRAOFF'
    }))

ACSIS = register_instrument(InstrumentConfig('ACSIS', raw_prefix='a',
    raw_suffix='.fits', base=GENERIC, keyword_map={
        'AIRMASS_START' : 'AMSTART',
        'AIRMASS_END' : 'AMEND',
        'DEC_BASE' : 'CRVAL1',
        'DEC_SCALE' : 'CDELT1',
        'EQUINOX' : 'EQUINOX',
        'EXPOSURE_TIME' : 'INT_TIME',
        'GRATING_DISPERSION' : 'CDELT3',
        'GRATING_WAVELENGTH' : 'CRVAL3',
        'NUMBER_OF_EXPOSURES' : 'N_EXP',
        'RA_BASE' : 'CRVAL2',
        'RA_SCALE' : 'CDELT2'
    }))
