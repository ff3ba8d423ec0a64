# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

"""
Immutable representations of FITS header cards and ordered header card
collections, as merged, compared & written back by the rest of the package.
"""

import astropy.io.fits as pyfits
from astropy.io.fits.card import Undefined


__all__ = ['STRING', 'FLOAT', 'INT', 'LOGICAL', 'UNDEF', 'COMMENT',
           'CARD_TYPES', 'COMMENTARY_KEYWORDS', 'STRUCTURAL_KEYWORDS',
           'HeaderCard', 'HeaderSet', 'card_text', 'is_structural']


# Card value types (named after those used by the pipeline's FITS headers):
STRING = 'STRING'
FLOAT = 'FLOAT'
INT = 'INT'
LOGICAL = 'LOGICAL'
UNDEF = 'UNDEF'
COMMENT = 'COMMENT'

CARD_TYPES = (STRING, FLOAT, INT, LOGICAL, UNDEF, COMMENT)

# Keywords whose cards are free text that may legitimately be repeated:
COMMENTARY_KEYWORDS = ('COMMENT', 'HISTORY', '')

# Keywords that describe the HDU containing a header rather than the
# observation, which io.fits regenerates from the data when writing:
STRUCTURAL_KEYWORDS = ('SIMPLE', 'BITPIX', 'NAXIS', 'EXTEND', 'XTENSION',
                       'PCOUNT', 'GCOUNT', 'EXTNAME', 'EXTVER', 'END')


def is_structural(keyword):
    """
    Is `keyword` one that describes the enclosing HDU (eg. BITPIX, NAXIS2)?
    """
    if keyword in STRUCTURAL_KEYWORDS:
        return True
    # NAXISn:
    return keyword.startswith('NAXIS') and keyword[5:].isdigit()


def card_text(value):
    """
    Render a card value as the text used to decide whether two cards are
    the same (booleans as FITS T/F, undefined values as an empty string).
    """
    if value is None or isinstance(value, Undefined):
        return ''
    if isinstance(value, bool):
        return 'T' if value else 'F'
    return str(value)


def _infer_type(keyword, value):
    if keyword in COMMENTARY_KEYWORDS:
        return COMMENT
    if value is None or isinstance(value, Undefined):
        return UNDEF
    # bool must be tested before int, since it's a sub-class:
    if isinstance(value, bool):
        return LOGICAL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT
    return STRING


class HeaderCard(object):
    """
    A single FITS header entry.

    Two cards are considered the same only when keyword, value text & comment
    all match (see `ident`); the type is carried along for writing the card
    back out but takes no part in comparisons.

    Parameters
    ----------

    keyword : str
        FITS keyword (converted to upper case).

    value : str, int, float, bool or None
        Card value. None represents a keyword without a value.

    comment : str, optional
        Card comment.

    type : str, optional
        One of `CARD_TYPES`, inferred from the value when not given.

    """

    __slots__ = ('_keyword', '_value', '_comment', '_type')

    def __init__(self, keyword, value=None, comment='', type=None):

        keyword = '' if keyword is None else str(keyword).strip().upper()
        if isinstance(value, Undefined):
            value = None
        if type is None:
            type = _infer_type(keyword, value)
        elif type not in CARD_TYPES:
            raise ValueError('unrecognized card type \'{0}\''.format(type))

        object.__setattr__(self, '_keyword', keyword)
        object.__setattr__(self, '_value', value)
        object.__setattr__(self, '_comment', comment or '')
        object.__setattr__(self, '_type', type)

    def __setattr__(self, name, value):
        raise AttributeError('HeaderCard instances are immutable')

    @property
    def keyword(self):
        return self._keyword

    @property
    def value(self):
        return self._value

    @property
    def comment(self):
        return self._comment

    @property
    def type(self):
        return self._type

    @property
    def ident(self):
        """
        The (keyword, value text, comment) tuple identifying this card.
        """
        return (self._keyword, card_text(self._value), self._comment)

    @property
    def is_commentary(self):
        return self._keyword in COMMENTARY_KEYWORDS

    def to_fits_card(self):
        """
        Return an equivalent `astropy.io.fits.Card`.
        """
        return pyfits.Card(self._keyword,
                           '' if self._value is None and self.is_commentary
                           else self._value,
                           None if self.is_commentary else self._comment)

    @classmethod
    def from_fits_card(cls, card):
        """
        Create a HeaderCard from an `astropy.io.fits.Card`.
        """
        comment = '' if card.keyword in COMMENTARY_KEYWORDS else card.comment
        return cls(card.keyword, card.value, comment)

    @property
    def image(self):
        """
        The FITS card image: 80 characters, or a multiple of 80 for long
        string values spread over CONTINUE cards.
        """
        return str(self.to_fits_card())

    @classmethod
    def from_image(cls, image):
        return cls.from_fits_card(pyfits.Card.fromstring(image))

    def copy(self, value=None, comment=None):
        """
        Return a new card with the same keyword and, optionally, a replaced
        value and/or comment (the type is re-inferred if the value changes).
        """
        if value is None:
            return HeaderCard(self._keyword, self._value,
                              self._comment if comment is None else comment,
                              self._type)
        return HeaderCard(self._keyword, value,
                          self._comment if comment is None else comment)

    def __eq__(self, other):
        if not isinstance(other, HeaderCard):
            return NotImplemented
        return self.ident == other.ident

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.ident)

    def __repr__(self):
        return 'HeaderCard({0!r}, {1!r}, {2!r}, {3!r})'.format(
            self._keyword, self._value, self._comment, self._type)


class HeaderSet(object):
    """
    An ordered, immutable collection of `HeaderCard` instances representing
    one FITS header (a file's primary header or that of one component within
    a multi-component container).

    Keywords need not be unique and order is preserved. Methods that "modify"
    the header return a new instance.

    Parameters
    ----------

    cards : iterable of HeaderCard, optional
        The header cards, in order.

    name : str, optional
        Label for where the header came from (eg. "obs.fits[I1]"). This is
        informational only and does not participate in comparisons.

    """

    __slots__ = ('_cards', '_name')

    def __init__(self, cards=(), name=None):
        cards = tuple(cards)
        if not all(isinstance(card, HeaderCard) for card in cards):
            raise TypeError('HeaderSet members must be HeaderCard instances')
        object.__setattr__(self, '_cards', cards)
        object.__setattr__(self, '_name', name)

    def __setattr__(self, name, value):
        raise AttributeError('HeaderSet instances are immutable')

    @property
    def cards(self):
        return self._cards

    @property
    def name(self):
        return self._name

    def __len__(self):
        return len(self._cards)

    def __iter__(self):
        return iter(self._cards)

    def __getitem__(self, key):
        if isinstance(key, slice):
            return HeaderSet(self._cards[key], name=self._name)
        return self._cards[key]

    def __contains__(self, item):
        if isinstance(item, HeaderCard):
            return item in self._cards
        item = str(item).upper()
        return any(card.keyword == item for card in self._cards)

    def __add__(self, other):
        if not isinstance(other, HeaderSet):
            return NotImplemented
        return HeaderSet(self._cards + other._cards, name=self._name)

    def __eq__(self, other):
        if not isinstance(other, HeaderSet):
            return NotImplemented
        return self._cards == other._cards

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._cards)

    def __bool__(self):
        return bool(self._cards)

    def __repr__(self):
        return 'HeaderSet({0} cards{1})'.format(
            len(self._cards),
            '' if self._name is None else ', name={0!r}'.format(self._name))

    def keywords(self):
        """
        Return the keywords in order (including any repeats).
        """
        return [card.keyword for card in self._cards]

    def get(self, keyword, default=None):
        """
        Return the value of the first card with the given keyword, or
        `default` if there is none.
        """
        keyword = str(keyword).upper()
        for card in self._cards:
            if card.keyword == keyword:
                return card.value
        return default

    def getcard(self, keyword):
        keyword = str(keyword).upper()
        for card in self._cards:
            if card.keyword == keyword:
                return card
        return None

    def getall(self, keyword):
        """
        Return a list of the values of every card with the given keyword.
        """
        keyword = str(keyword).upper()
        return [card.value for card in self._cards if card.keyword == keyword]

    def replace(self, keyword, value, comment=None):
        """
        Return a copy with the value of the first card matching `keyword`
        replaced (keeping its position & comment unless a new comment is
        given), or with a new card appended if the keyword is absent.
        """
        keyword = str(keyword).upper()
        cards = list(self._cards)
        for n, card in enumerate(cards):
            if card.keyword == keyword:
                cards[n] = HeaderCard(keyword, value,
                                      card.comment if comment is None
                                      else comment)
                break
        else:
            cards.append(HeaderCard(keyword, value, comment or ''))
        return HeaderSet(cards, name=self._name)

    def remove(self, keyword):
        """
        Return a copy without any cards matching `keyword`.
        """
        keyword = str(keyword).upper()
        return HeaderSet([card for card in self._cards
                          if card.keyword != keyword], name=self._name)

    def update(self, other):
        """
        Return a copy with the cards of `other` appended, where any card
        whose (non-commentary) keyword is already present replaces the first
        existing card of that name in place instead. Commentary cards are
        appended unless an identical card is already there.
        """
        cards = list(self._cards)
        for newcard in other:
            if newcard.is_commentary:
                if newcard not in cards:
                    cards.append(newcard)
                continue
            for n, card in enumerate(cards):
                if card.keyword == newcard.keyword:
                    cards[n] = newcard
                    break
            else:
                cards.append(newcard)
        return HeaderSet(cards, name=self._name)

    def rename(self, name):
        return HeaderSet(self._cards, name=name)

    def to_fits_header(self):
        """
        Convert to an `astropy.io.fits.Header` (in card order).
        """
        hdr = pyfits.Header()
        for card in self._cards:
            hdr.append(card.to_fits_card(), useblanks=False, end=True)
        return hdr

    @classmethod
    def from_fits_header(cls, hdr, name=None):
        """
        Convert an `astropy.io.fits.Header` to a HeaderSet, leaving out the
        structural keywords that describe the enclosing HDU (BITPIX, NAXISn
        etc.).
        """
        return cls([HeaderCard.from_fits_card(card) for card in hdr.cards
                    if not is_structural(card.keyword)], name=name)

    def to_images(self):
        """
        Return the list of FITS card images (the character-array form in
        which a header is stored within a container component).
        """
        return [card.image for card in self._cards]

    @classmethod
    def from_images(cls, images, name=None):
        return cls([HeaderCard.from_image(image) for image in images],
                   name=name)
