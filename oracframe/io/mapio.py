# Copyright(c) 2015-2024 Association of Universities for Research in Astronomy, Inc.
# by James E.H. Turner.

from ._util import get_backend_fn


__all__ = ['ComponentMapIO']


class ComponentMapIO(object):
    """
    Record where one named component (eg. "I1") lives within a container file
    and load its header on demand, so that callers can survey the structure
    of a container cheaply before deciding which headers they need.

    For loading to succeed, the corresponding file must already exist. This
    class is intended to encapsulate bookkeeping for header assembly with
    reasonable overheads, rather than to provide a robust API: for the
    user-level interface, see `Frame` instead.

    Attributes
    ----------

    filename : `str`
        The path to the container file.

    name : `str`
        Name of the component within the container (EXTNAME for FITS).

    idx : `int` or `None`
        The original index of the component within the host file (extension
        number for FITS).

    """

    _meta = None

    def __init__(self, filename, name, idx=None):

        # This keeps a separate copy of the filename, so that loading still
        # refers to the original container if a Frame later moves on to
        # processing a different file.

        if not isinstance(filename, str):
            raise ValueError('filename must be supplied as a string')

        self.filename = filename
        self.name = name
        self.idx = idx

        self._mloader = get_backend_fn('load_component_meta', self.filename)

    @property
    def path(self):
        """
        The component path in "file.fits[NAME]" form.
        """
        return '{0}[{1}]'.format(self.filename, self.name)

    def load_meta(self):
        self._meta = self._mloader(self.filename, self.name)
        return self._meta

    @property
    def meta(self):
        if self._meta is None:
            self.load_meta()
        return self._meta

    def __repr__(self):
        return 'ComponentMapIO \'{0}\''.format(self.path)
