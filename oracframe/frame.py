# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
A module representing one pipeline observation (a "frame") as a high-level
object, owning its raw & intermediate filenames, its merged header state and
the generic ORAC_* values derived from that header.
"""

import os
import os.path
import re
import logging
from collections import OrderedDict

import astropy

from . import config, frame_defaults
from . import io as ofio
from .assemble import assemble_headers, assemble_unmerged
from .exceptions import ContainerIOError, MalformedHeaderError
from .header import HeaderCard, HeaderSet
from .instruments import get_instrument, to_generic, from_generic
from .libutils import split_name
from . import propagate


__all__ = ['Frame']


log = logging.getLogger(__name__)


def _decimal(value):
    # Numeric header values as float, or None for anything else (sexagesimal
    # strings etc. are left to instrument-specific translations):
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _utdate(value):
    # A UT date as an int of the form YYYYMMDD (accepting "YYYY-MM-DD"):
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip().replace('-', '').split('T')[0])
    except ValueError:
        return None


class Frame(object):
    """
    A class representing one observation passing through the pipeline: the
    files it currently consists of, the header information read from them and
    the pipeline bookkeeping values (group, recipe etc.) derived from it.

    Where a frame spans several files, or files containing several
    components, the headers are merged into one `header` holding whatever is
    common to all of them, while the differing remainder is kept in
    `subheaders` (see `oracframe.assemble.assemble_headers`).

    Parameters
    ----------

    filename : str or list of str, optional
        Raw file(s) for the observation. If given, `configure` is called to
        read the header & determine the group, recipe etc.

    instrument : str or InstrumentConfig, optional
        The instrument whose header translations apply (defaults to
        config['instrument']).

    Attributes
    ----------

    instrument : InstrumentConfig
        Keyword translations for the instrument.

    raw : str or list of str or None
        The raw filename(s) the frame was configured with.

    header : HeaderSet
        The merged header. This is replaced (never modified in place) when
        the header is re-read or set_header() is called.

    subheaders : list of HeaderSet
        Per-file/per-component residual headers; empty when the headers of
        all the input files & components were identical.

    named_subheaders : OrderedDict of str : HeaderSet
        Component headers by component name, when read with nomerge=True.

    uhdr : dict
        User header of derived values, including the ORAC_* translations.

    group, recipe, nsubs : str or int or None
        Pipeline bookkeeping, set by findgroup(), findrecipe() & findnsubs().

    intermediates : list of str
        Every filename assigned via file(), in order.

    tags : dict of str : list of str
        File lists saved by tagset().

    isgood : bool
        False if processing of the frame has failed, including when none of
        its headers could be read.

    product : str or None
        Name of the pipeline product currently represented, written to the
        PRODUCT header by collate_headers().

    conflicts : list of HeaderConflict
        Header conflicts found when the header was last read.

    """

    # Whether sync_headers() may write collated headers back to the files:
    allow_header_sync = False

    @frame_defaults
    def __init__(self, filename=None, instrument=None):

        self.instrument = get_instrument(instrument)

        self._files = []
        self.raw = None
        self.header = HeaderSet()
        self.subheaders = []
        self.named_subheaders = OrderedDict()
        self.uhdr = {}
        self.group = None
        self.recipe = None
        self.nsubs = None
        self.intermediates = []
        self.tags = {}
        self.isgood = True
        self.product = None
        self.conflicts = []

        if filename is not None:
            self.configure(filename)

    def __repr__(self):
        return 'Frame {0} ({1})'.format(self._files, self.instrument.name)

    # File bookkeeping:

    @property
    def files(self):
        return list(self._files)

    @files.setter
    def files(self, value):
        if isinstance(value, str):
            value = [value]
        self._files = [str(fn) for fn in value]

    @property
    def nfiles(self):
        return len(self._files)

    def file(self, n=1, value=None):
        """
        Return (or, if `value` is given, set) the n'th current filename,
        counting from 1. Setting a filename also records it in
        `intermediates`. A number beyond the end of the list returns the
        first file.
        """
        index = int(n) - 1
        if index < 0:
            raise IndexError('file numbers start at 1')

        if value is not None:
            value = str(value)
            if index < len(self._files):
                self._files[index] = value
            elif index == len(self._files):
                self._files.append(value)
            else:
                raise IndexError('file number {0} is beyond the next '
                                 'available ({1})'.format(n, self.nfiles+1))
            self.intermediates.append(value)
            return value

        if not self._files:
            return None
        if index >= len(self._files):
            index = 0
        return self._files[index]

    def file_exists(self, n=1):
        """
        Does the n'th file (or the container holding it) exist on disk?
        """
        fn = self.file(n)
        return fn is not None and os.path.exists(split_name(fn)[0])

    def erase(self, n=1):
        """
        Remove the n'th file from disk, returning True on success. The
        filename itself is not removed from the frame.
        """
        fn = split_name(self.file(n) or '')[0]
        try:
            os.remove(fn)
        except OSError as err:
            log.warning('failed to erase %s: %s', fn, err)
            return False
        return True

    def tagset(self, tag):
        """
        Save the current filenames under a (case-insensitive) tag.
        """
        self.tags[str(tag).upper()] = self.files

    def tagretrieve(self, tag):
        """
        Restore the filenames saved under a tag (saving the current ones as
        'PREVIOUS'), doing nothing if the tag doesn't exist.
        """
        tag = str(tag).upper()
        if tag in self.tags:
            if tag != 'PREVIOUS':
                self.tagset('PREVIOUS')
            self.files = self.tags[tag]

    # Configuration & header reading:

    def configure(self, filename):
        """
        Set the raw file(s) for the frame, then read the header and determine
        the group, recipe & number of sub-frames.
        """
        if isinstance(filename, str):
            self.file(1, filename)
            self.raw = filename
        else:
            self.files = filename
            self.intermediates.extend(self._files)
            self.raw = self.files

        self.readhdr()
        self.findgroup()
        self.findrecipe()
        self.findnsubs()

    def readhdr(self, filenames=None, nomerge=False):
        """
        Read & merge the headers of the current files (or of `filenames`,
        if given), replacing all existing header information, then call
        calc_orac_headers().

        With nomerge=True and a single multi-component file, the components'
        headers are kept separate, by name, in `named_subheaders` instead of
        being merged (see `assemble_unmerged`).

        Returns
        -------

        Assembly
            The assembled header information.

        """
        if filenames is None:
            filenames = self.files
        elif isinstance(filenames, str):
            filenames = [filenames]

        if not filenames:
            raise ValueError('asked to read header from zero files')

        if nomerge and len(filenames) == 1:
            assembly = assemble_unmerged(filenames[0])
        else:
            assembly = assemble_headers(filenames)

        # Only update the frame once everything has been read & merged:
        self.header = assembly.header
        self.subheaders = list(assembly.subheaders)
        self.named_subheaders = OrderedDict(assembly.named)
        self.conflicts = list(assembly.conflicts)
        self.uhdr = {}

        # A frame with no readable header at all can't be processed further:
        self.isgood = len(assembly.failures) < len(filenames)
        if not self.isgood:
            log.warning('no header could be read for %s',
                        ', '.join(filenames))

        self.calc_orac_headers()

        return assembly

    # Header access:

    def hdr(self, keyword):
        """
        Return the value of a keyword from the merged header, or None if it
        isn't present. In addition, "SUBHEADERS" returns the list of
        sub-headers and, after reading with nomerge=True, a component name
        (eg. "I1") returns that component's HeaderSet.
        """
        keyword = str(keyword).upper()
        if keyword in self.header:
            return self.header.get(keyword)
        if keyword == 'SUBHEADERS':
            return self.subheaders
        return self.named_subheaders.get(keyword)

    get_header = hdr

    def get_subheader(self, index, keyword):
        """
        Return the value of a keyword from the sub-header at (0-based) index,
        or None if either doesn't exist.
        """
        try:
            if index < 0:
                return None
            subhdr = self.subheaders[index]
        except (IndexError, TypeError):
            return None
        return subhdr.get(keyword)

    def get_named_subheader(self, name, keyword):
        """
        Return the value of a keyword from a named component sub-header, or
        None if either doesn't exist.
        """
        subhdr = self.named_subheaders.get(str(name).upper())
        return None if subhdr is None else subhdr.get(keyword)

    def set_header(self, keyword, value, comment=None):
        """
        Set a keyword value in the merged header (replacing the value of any
        existing card of that name, or appending a new card).
        """
        self.header = self.header.replace(keyword, value, comment)

    # Derived values:

    def calc_orac_headers(self):
        """
        Calculate the generic ORAC_* values for every header the instrument
        can translate, storing them in `uhdr`, along with the ORACUT (UT date
        as YYYYMMDD) and ORACTIME (decimal UT date) header values.

        Returns
        -------

        dict
            The newly-calculated values.

        """
        new = {}

        for key in self.instrument.generic_keys():
            new['ORAC_' + key] = to_generic(self, key)

        self.uhdr.update(new)

        utdate = _utdate(self.uhdr.get('ORAC_UTDATE'))
        uthour = _decimal(self.uhdr.get('ORAC_UTSTART'))

        oracut = 0 if utdate is None else utdate
        if utdate is None or uthour is None:
            oractime = 0
        else:
            oractime = utdate + uthour / 24.

        self.set_header('ORACUT', oracut)
        self.set_header('ORACTIME', oractime)
        new['ORACUT'] = oracut
        new['ORACTIME'] = oractime

        return new

    def translate_hdr(self, key):
        """
        Translate a generic (ORAC_*) header back to the equivalent FITS
        keyword/value pairs for this instrument, returning a dict (empty if
        there is no translation).
        """
        return from_generic(self, key)

    def findgroup(self):
        """
        Determine & set the group the observation belongs to.
        """
        self.group = to_generic(self, 'GROUP')
        return self.group

    def findrecipe(self):
        """
        Determine & set the recipe name, preferring any data-reduction
        recipe over the generic RECIPE header.
        """
        recipe = to_generic(self, 'DR_RECIPE')
        if recipe is None:
            recipe = to_generic(self, 'RECIPE')
        self.recipe = recipe
        return recipe

    def findnsubs(self):
        """
        Determine & set the number of sub-frames.
        """
        self.nsubs = to_generic(self, 'NSUBS')
        return self.nsubs

    # Writing header information back to disk:

    def collate_headers(self, filename):
        """
        Collect the header cards the pipeline updates in its output files
        (pipeline & engine versions, any data-reduction recipe and the
        product name), for synchronizing with the given output file.

        Returns
        -------

        HeaderSet or None
            None if `filename` is None or doesn't exist.

        """
        if filename is None:
            return None
        fn = split_name(str(filename))[0]
        if not os.path.exists(fn):
            return None

        cards = []

        # Recipe translations are only written for keywords already in the
        # header, so that their comments are preserved:
        if self.uhdr.get('ORAC_DR_RECIPE') is not None:
            for keyword, value in self.translate_hdr('DR_RECIPE').items():
                orig = self.header.getcard(keyword)
                if orig is not None:
                    cards.append(orig.copy(value=value))

        cards.append(HeaderCard('PIPEVERS', config['pipeline_version'],
                                'Pipeline version'))
        cards.append(HeaderCard('ENGVERS', astropy.__version__,
                                'Algorithm engine version'))

        if self.product is not None:
            cards.append(HeaderCard('PRODUCT', self.product,
                                    'Pipeline product'))

        return HeaderSet(cards, name=fn)

    def sync_headers(self, index=None):
        """
        Merge the collated headers into the primary header of each current
        file (or of just the file with the given 1-based number or name),
        if header synchronization is allowed. Files whose names end in a
        numbered sub-frame suffix (eg. "_3") are skipped.
        """
        if not self.allow_header_sync:
            return

        if index is None:
            filenames = self.files
        elif isinstance(index, int):
            filenames = [self.file(index)]
        else:
            filenames = [str(index)]

        for fn in filenames:
            fn = split_name(fn)[0]
            if re.search(r'_\d+$', os.path.splitext(fn)[0]):
                continue
            newhdr = self.collate_headers(fn)
            if newhdr is None:
                continue
            try:
                hdr = ofio.load_common_meta(fn)
                ofio.save_common_meta(fn, hdr.update(newhdr))
            except (MalformedHeaderError, ContainerIOError) as err:
                log.error('failed to synchronize headers of %s: %s', fn, err)

    def _previous_file(self):
        # The most recent intermediate file other than the current one,
        # falling back to the raw file:
        current = self.file()
        for fn in reversed(self.intermediates):
            if fn != current:
                return fn
        raw = self.raw
        return raw[0] if isinstance(raw, list) else raw

    def mergehdr(self, source=None):
        """
        Merge the header cards of the header component of the container the
        current file was derived from (or of `source`) into the current file.

        Returns False (after logging the error) if the merge failed, in which
        case the current file is left unchanged.
        """
        source = source or self._previous_file()
        try:
            propagate.merge_fits_extension(source, self.file())
        except ContainerIOError as err:
            log.error('failed to propagate header to %s: %s', self.file(),
                      err)
            return False
        return True

    def propagate_header(self, dest=None, source=None):
        """
        Copy the header component of the container the current file was
        derived from (or of `source`) into `dest` (default: the current
        file), writing the frame's in-memory header instead if the source has
        no header component.

        Returns False (after logging the error) if this failed; the frame's
        own header is never changed.
        """
        source = source or self._previous_file()
        dest = dest or self.file()
        try:
            propagate.propagate_header(source, dest, header=self.header)
        except ContainerIOError as err:
            log.error('failed to propagate header to %s: %s', dest, err)
            return False
        return True
