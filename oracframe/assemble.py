# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Assembly of the single representative header of a frame that spans several
raw files, each of which may itself contain several components with their
own headers.
"""

import logging
import warnings
from collections import namedtuple, OrderedDict

from . import frame_defaults
from . import io as ofio
from .exceptions import MalformedHeaderError, HeaderConflictWarning
from .header import HeaderSet
from .libutils import split_name
from .merge import merge_headers, find_conflicts


__all__ = ['Assembly', 'HeaderConflict', 'assemble_headers',
           'assemble_unmerged', 'find_components']


log = logging.getLogger(__name__)


Assembly = namedtuple('Assembly', ['header', 'subheaders', 'named',
                                   'conflicts', 'failures'])
Assembly.__doc__ = """
Result of header assembly: the merged `header`, a list of residual
`subheaders` (empty when every file's headers agreed), a dict of `named`
component sub-headers (only populated by `assemble_unmerged`), a list of
`HeaderConflict` records and the list of files whose headers could not be
read.
"""

HeaderConflict = namedtuple('HeaderConflict', ['filename', 'keyword', 'kept',
                                               'discarded'])


@frame_defaults
def find_components(filenames, header_component=None):
    """
    Look inside each container for its named image components, returning a
    list of (filename, [ComponentMapIO, ...]) tuples in input order.

    The header-carrying component (config['header_component'], normally
    "HEADER") is not a processed image and is left out. A path that already
    names a component, eg. "obs.fits[I1]", is returned without opening it
    and with an empty component list.
    """
    if isinstance(filenames, str):
        filenames = [filenames]

    found = []
    for path in filenames:
        path = str(path)
        filename, comp = split_name(path)
        if comp is not None:
            found.append((path, []))
            continue
        cmaps = [cmap for cmap in ofio.map_file(filename)
                 if cmap.name != header_component.upper()]
        found.append((path, cmaps))

    return found


def _read_file(path, header_component):
    # Return a file's primary header & the headers of its nested components.
    filename, comp = split_name(path)

    if comp is not None:
        return ofio.load_component_meta(filename, comp), []

    primary = ofio.load_common_meta(filename)

    # The header component's cards count as part of the file's primary
    # header, rather than belonging to any processed image:
    if ofio.has_component(filename, header_component):
        primary = primary.update(ofio.load_component_meta(filename,
                                                          header_component))

    (_, cmaps), = find_components([path], header_component)

    return primary.rename(filename), [cmap.meta for cmap in cmaps]


@frame_defaults
def assemble_headers(filenames, header_component=None):
    """
    Read & merge the headers of one or more raw files into one header common
    to them all, plus residual sub-headers holding whatever differs.

    Each file's nested component headers (if any) are first merged with
    each other and the cards they all share are folded into that file's
    primary header. The primary headers of all the files are then merged,
    giving the overall header. Finally, each file's residual is appended to
    each of its component residuals (or stands alone, for a file without
    components), producing the sub-headers in file & component order.

    Parameters
    ----------

    filenames : str or list of str
        The raw files (or "file.fits[COMP]" component paths) to assemble.

    header_component : str, optional
        Name of the component carrying the container header (defaults to
        config['header_component']).

    Returns
    -------

    Assembly
        Sub-headers are only provided if at least one of them is non-empty.
        A file that can't be read contributes an empty header (with a
        warning) rather than aborting the assembly.

    """
    if isinstance(filenames, str):
        filenames = [filenames]
    filenames = [str(fn) for fn in filenames]

    primaries, component_diffs = [], []
    conflicts, failures = [], []

    for path in filenames:

        try:
            primary, nested = _read_file(path, header_component)
        except MalformedHeaderError as err:
            log.warning('%s; using an empty header for %s', err, path)
            failures.append(path)
            primary, nested = HeaderSet(name=path), []

        differents = []

        if nested:
            # Find what the components of this file have in common:
            same, differents = merge_headers(nested, force_return_diffs=True)

            # Shared component cards that contradict the primary header
            # lose out to it, but stay with the components to avoid loss:
            clashes = find_conflicts(primary, same)
            if clashes:
                discarded = HeaderSet([cand for ref, cand in clashes])
                same = HeaderSet([card for card in same
                                  if card not in discarded])
                differents = [diff + discarded for diff in differents]
                for ref, cand in clashes:
                    conflicts.append(HeaderConflict(path, ref.keyword,
                                                    ref, cand))
                    msg = 'conflicting values for {0} in {1}: keeping ' \
                          '{2!r} from the primary header, not {3!r}'\
                          .format(ref.keyword, path, ref.value, cand.value)
                    log.warning(msg)
                    warnings.warn(msg, HeaderConflictWarning)

            # Fold the shared component cards into the primary header. Any
            # leftovers are only repeats of identical cards within one input,
            # which go back where they came from:
            folded, (funique, cunique) = merge_headers([primary, same],
                                                       merge_unique=True)
            primary = (folded + funique).rename(primary.name)
            if cunique:
                differents = [diff + cunique for diff in differents]

        primaries.append(primary)
        component_diffs.append(differents)

    # Now merge the primary headers of all the files. Unreadable files keep
    # their empty header as a residual but are left out of the merge, since
    # they would otherwise empty the common header:
    readable = [n for n, path in enumerate(filenames) if path not in failures]
    common, good_resids = merge_headers([primaries[n] for n in readable],
                                        force_return_diffs=True)
    residuals = list(primaries)
    for n, resid in zip(readable, good_resids):
        residuals[n] = resid

    # Re-attach each file's residual to the residuals of its components:
    subheaders = []
    for path, resid, differents in zip(filenames, residuals,
                                       component_diffs):
        if differents:
            subheaders.extend(diff + resid for diff in differents)
        else:
            subheaders.append(resid.rename(path))

    # Don't expose phantom sub-headers when everything was identical:
    if not any(subheaders):
        subheaders = []

    return Assembly(common, subheaders, OrderedDict(), conflicts, failures)


@frame_defaults
def assemble_unmerged(filename, header_component=None):
    """
    Read the headers of a single container without merging its components.

    The header component (config['header_component']) or, failing that, the
    component with the largest header is folded into the primary header and
    the other components' headers are returned in `Assembly.named`, keyed by
    component name in sorted order.
    """
    filename = str(filename)

    try:
        primary = ofio.load_common_meta(filename)
        headers = OrderedDict((cmap.name, cmap.meta) for cmap in
                              ofio.map_file(filename))
    except MalformedHeaderError as err:
        log.warning('%s; using an empty header for %s', err, filename)
        return Assembly(HeaderSet(name=filename), [], OrderedDict(), [],
                        [filename])

    if header_component.upper() in headers:
        chosen = header_component.upper()
    elif headers:
        # max() returns the first of any equally large headers:
        chosen = max(headers, key=lambda name: len(headers[name]))
    else:
        chosen = None

    if chosen is not None:
        primary = primary.update(headers.pop(chosen))

    named = OrderedDict((name, headers[name]) for name in sorted(headers))

    return Assembly(primary.rename(filename), [], named, [], [])
