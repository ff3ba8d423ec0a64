from ..header import HeaderCard, HeaderSet
from ..merge import merge_headers, find_conflicts, merge_card_images


def hset(*pairs, **kwargs):
    return HeaderSet([HeaderCard(key, val) for key, val in pairs], **kwargs)


def test_merge_headers_identical_1():

    hset1 = hset(('OBJECT', 'M1'), ('FILTER', 'K'))
    hset2 = hset(('OBJECT', 'M1'), ('FILTER', 'K'))

    common, residuals = merge_headers([hset1, hset2])

    assert common == hset1 and len(residuals) == 2 and \
           not residuals[0] and not residuals[1]


def test_merge_headers_differing_1():

    hset1 = hset(('OBJECT', 'M1'), ('EXPNUM', 1), name='a.fits')
    hset2 = hset(('OBJECT', 'M1'), ('EXPNUM', 2), name='b.fits')

    common, residuals = merge_headers([hset1, hset2])

    assert common == hset(('OBJECT', 'M1')) and \
           residuals[0] == hset(('EXPNUM', 1)) and \
           residuals[1] == hset(('EXPNUM', 2)) and \
           [resid.name for resid in residuals] == ['a.fits', 'b.fits']


def test_merge_headers_comment_differs_1():

    # A card only counts as shared if its comment matches too:
    hset1 = HeaderSet([HeaderCard('OBJECT', 'M1', 'Target')])
    hset2 = HeaderSet([HeaderCard('OBJECT', 'M1', 'Object name')])

    common, residuals = merge_headers([hset1, hset2])

    assert not common and residuals == [hset1, hset2]


def test_merge_headers_idempotent_1():

    hdr = hset(('OBJECT', 'M1'), ('FILTER', 'K'), ('EXPTIME', 10.0))

    common, residuals = merge_headers([hdr, hdr, hdr])

    assert common == hdr and len(residuals) == 3 and not any(residuals)


def test_merge_headers_order_1():

    hset1 = hset(('A', 1), ('X', 1), ('B', 1), ('C', 1))
    hset2 = hset(('C', 1), ('Y', 2), ('B', 1), ('A', 1), ('Z', 2))

    common, residuals = merge_headers([hset1, hset2])

    # Common cards in first-seen order, residuals in their input order:
    assert common.keywords() == ['A', 'B', 'C'] and \
           residuals[0].keywords() == ['X'] and \
           residuals[1].keywords() == ['Y', 'Z']


def test_merge_headers_partition_1():

    inputs = [hset(('A', 1), ('B', 1), ('B', 1), ('C', 3)),
              hset(('B', 1), ('A', 1), ('D', 4)),
              hset(('A', 1), ('B', 1), ('C', 5), ('HISTORY', 'x'))]

    for merge_unique in (False, True):

        common, residuals = merge_headers(inputs, merge_unique=merge_unique)

        # Every input card ends up in exactly one place, where a common card
        # stands in for one card from each input that had it:
        for inp, resid in zip(inputs, residuals):
            assert len(resid) + \
                   sum(1 for card in common if card in inp) == len(inp)

        # Overall, weighting each common card by the inputs it came from:
        assert sum(sum(1 for inp in inputs if card in inp) for card in common) \
               + sum(len(resid) for resid in residuals) == \
               sum(len(inp) for inp in inputs)

        for inp, resid in zip(inputs, residuals):
            for card in inp:
                assert card in common or card in resid


def test_merge_headers_repeated_card_1():

    # Only the first of identical repeated cards is shared:
    hset1 = hset(('HISTORY', 'bias'), ('HISTORY', 'bias'))
    hset2 = hset(('HISTORY', 'bias'))

    common, residuals = merge_headers([hset1, hset2])

    assert common == hset(('HISTORY', 'bias')) and \
           residuals[0] == hset(('HISTORY', 'bias')) and not residuals[1]


def test_merge_headers_merge_unique_1():

    primary = hset(('INSTRUME', 'X'))
    same = hset(('DETECTOR', 'D1'))

    common, residuals = merge_headers([primary, same], merge_unique=True)

    assert common == hset(('INSTRUME', 'X'), ('DETECTOR', 'D1')) and \
           not any(residuals) and find_conflicts(primary, same) == []


def test_merge_headers_merge_unique_partial_1():

    # Cards in some but not all of the inputs are never promoted:
    inputs = [hset(('A', 1)), hset(('A', 1), ('B', 2)), hset(('B', 2))]

    common, residuals = merge_headers(inputs, merge_unique=True)

    assert not common and residuals == inputs


def test_merge_headers_single_1():

    hdr = hset(('OBJECT', 'M1'), name='a.fits')

    common, residuals = merge_headers([hdr])
    fcommon, fresiduals = merge_headers([hdr], force_return_diffs=True)

    assert common == hdr and residuals == [] and \
           fcommon == hdr and len(fresiduals) == 1 and not fresiduals[0] and \
           fresiduals[0].name == 'a.fits'


def test_merge_headers_empty_1():

    common, residuals = merge_headers([], force_return_diffs=True)

    assert not common and residuals == []


def test_find_conflicts_1():

    common = hset(('A', 2), ('HISTORY', 'one'), ('B', 1))
    candidates = hset(('A', 1), ('HISTORY', 'two'), ('B', 1), ('C', 3))

    conflicts = find_conflicts(common, candidates)

    assert conflicts == [(HeaderCard('A', 2), HeaderCard('A', 1))]


def test_merge_card_images_1():

    first = hset(('OBJECT', 'M1'), ('FILTER', 'K')).to_images()
    second = hset(('OBJECT', 'M2'), ('FILTER', 'K'),
                  ('EXPNUM', 3)).to_images()

    merged = merge_card_images(first, second)

    # Same keyword with different text is not a duplicate:
    assert HeaderSet.from_images(merged) == \
           hset(('OBJECT', 'M1'), ('FILTER', 'K'), ('OBJECT', 'M2'),
                ('EXPNUM', 3))
