# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Pure functions for reconciling several FITS headers into the cards they have
in common plus the residual cards particular to each input.
"""

from collections import namedtuple

from .header import HeaderSet


__all__ = ['MergeResult', 'merge_headers', 'find_conflicts',
           'merge_card_images']


MergeResult = namedtuple('MergeResult', ['common', 'residuals'])
MergeResult.__doc__ = """
The outcome of `merge_headers`: a `common` HeaderSet and a list of
`residuals`, one HeaderSet per input (or an empty list for a single input,
unless force_return_diffs was requested).
"""


def merge_headers(header_sets, merge_unique=False, force_return_diffs=False):
    """
    Partition the cards of several headers into those shared by all of them
    and the residual cards belonging to each input.

    A card is "shared" when its keyword, value text and comment all match
    (`HeaderCard.ident`). Every input card ends up in exactly one of `common`
    or that input's residual; nothing is duplicated or dropped.

    Parameters
    ----------

    header_sets : sequence of HeaderSet
        The headers to merge.

    merge_unique : bool, optional
        Also promote to `common` any card that occurs in exactly one of the
        inputs (used to fold header information from one source into
        another). The caller is responsible for checking that promoted cards
        don't contradict others in `common` (see `find_conflicts`).

    force_return_diffs : bool, optional
        For a single input, return an (empty) residual for it anyway, so
        that callers can index residuals uniformly.

    Returns
    -------

    MergeResult
        Cards within `common` appear in the order first encountered when
        scanning the inputs left to right; residual cards keep their
        original relative order.

    """
    header_sets = list(header_sets)
    nsets = len(header_sets)

    if nsets == 0:
        return MergeResult(HeaderSet(), [])

    if nsets == 1:
        only = header_sets[0]
        residuals = [HeaderSet(name=only.name)] if force_return_diffs else []
        return MergeResult(HeaderSet(only.cards), residuals)

    # For each input, map card identity to the position of its first
    # occurrence (any repeats of an identical card stay in the residual):
    lookups = []
    for hset in header_sets:
        lookup = {}
        for pos, card in enumerate(hset):
            lookup.setdefault(card.ident, pos)
        lookups.append(lookup)

    # Distinct card identities across all inputs, in first-seen order:
    order = []
    seen = set()
    for hset in header_sets:
        for card in hset:
            if card.ident not in seen:
                seen.add(card.ident)
                order.append(card)

    # Working copies of each input's card list, where extracted cards get
    # replaced by None:
    remaining = [list(hset) for hset in header_sets]
    common = []

    for card in order:
        present = [n for n, lookup in enumerate(lookups)
                   if card.ident in lookup]
        if len(present) == nsets or (merge_unique and len(present) == 1):
            common.append(card)
            for n in present:
                remaining[n][lookups[n][card.ident]] = None

    residuals = [HeaderSet([card for card in cards if card is not None],
                           name=hset.name)
                 for cards, hset in zip(remaining, header_sets)]

    return MergeResult(HeaderSet(common), residuals)


def find_conflicts(reference, candidates):
    """
    Find cards in `candidates` whose keyword is already present in
    `reference` with a different value or comment. Commentary cards (COMMENT,
    HISTORY & blank) never conflict.

    Returns
    -------

    list of (HeaderCard, HeaderCard)
        (reference card, conflicting candidate card) pairs, in the order of
        `candidates`.

    """
    byname = {}
    for card in reference:
        if not card.is_commentary:
            byname.setdefault(card.keyword, []).append(card)

    conflicts = []
    for card in candidates:
        if card.is_commentary or card.keyword not in byname:
            continue
        matches = byname[card.keyword]
        if card not in matches:
            conflicts.append((matches[0], card))

    return conflicts


def merge_card_images(first, second):
    """
    Combine two lists of FITS card images, appending to `first` those cards
    of `second` that are not textually identical to one already in `first`.
    Duplicates are judged by the exact card text, not just the keyword.
    """
    first = list(first)
    existing = set(first)
    return first + [image for image in second if image not in existing]
