import os
import pytest
import numpy as np
import astropy.io.fits as pyfits
from .. import io as ofio
from ..exceptions import MalformedHeaderError, ContainerIOError
from ..header import HeaderCard, HeaderSet
from ..libutils import split_name, join_name, splitext, new_filename
from .helpers import make_container


def test_split_name_1():

    assert split_name('obs.fits[i1]') == ('obs.fits', 'I1') and \
           split_name('/data/obs.fits') == ('/data/obs.fits', None) and \
           join_name('obs.fits', 'I1') == 'obs.fits[I1]' and \
           join_name('obs.fits') == 'obs.fits'


def test_splitext_1():

    assert splitext('some.dir/obs.fits.gz') == ('some.dir/obs', 'fits.gz') \
           and splitext('obs') == ('obs', None)


def test_new_filename_1(tmp_path):

    fn = new_filename('tmp', base='obs', ext='fits', dirname=str(tmp_path))

    assert os.path.dirname(fn) == str(tmp_path) and \
           os.path.basename(fn).startswith('tmp_obs_') and \
           fn.endswith('.fits') and not os.path.exists(fn)


def test_get_backend_fn_unsupported_1():

    with pytest.raises(IOError):
        ofio.get_backend_fn('load_common_meta', 'obs.sdf')


def test_get_backend_fn_component_1():

    # The component suffix doesn't affect the format look-up:
    fn = ofio.get_backend_fn('load_common_meta', 'obs.fits[I1]')

    assert fn.__name__ == 'load_common_meta'


def test_map_file_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [('OBJECT', 'M1')],
                        [('HEADER', [('UTDATE', 20240101)]),
                         ('I1', [('UTSTART', 1.5)]),
                         ('I2', [('UTSTART', 2.5)])])

    cmaps = ofio.map_file(fn)

    assert [cmap.name for cmap in cmaps] == ['HEADER', 'I1', 'I2'] and \
           [cmap.idx for cmap in cmaps] == [1, 2, 3] and \
           cmaps[1].path == fn + '[I1]' and \
           cmaps[2].meta == HeaderSet([HeaderCard('UTSTART', 2.5)]) and \
           cmaps[2].meta.name == fn + '[I2]' and \
           ofio.list_components(fn) == ['HEADER', 'I1', 'I2']


def test_load_common_meta_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits',
                        [('OBJECT', ('M1', 'Target')), ('EXPTIME', 10.0)])

    hdr = ofio.load_common_meta(fn)

    assert hdr.keywords() == ['OBJECT', 'EXPTIME'] and \
           hdr.getcard('OBJECT').comment == 'Target' and hdr.name == fn


def test_load_common_meta_missing_1(tmp_path):

    with pytest.raises(MalformedHeaderError):
        ofio.load_common_meta(str(tmp_path / 'missing.fits'))


def test_load_common_meta_corrupt_1(tmp_path):

    fn = str(tmp_path / 'corrupt.fits')
    with open(fn, 'w') as fobj:
        fobj.write('this is not a FITS file\n' * 200)

    with pytest.raises(MalformedHeaderError) as excinfo:
        ofio.load_common_meta(fn)

    assert excinfo.value.filename == fn and fn in str(excinfo.value)


def test_load_component_meta_missing_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [('OBJECT', 'M1')],
                        [('I1', [])])

    with pytest.raises(MalformedHeaderError):
        ofio.load_component_meta(fn, 'I2')


def test_has_component_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [], [('I1', [])])

    assert ofio.has_component(fn, 'i1') and \
           not ofio.has_component(fn, 'HEADER') and \
           not ofio.has_component(str(tmp_path / 'missing.fits'), 'I1')


def test_create_container_1(tmp_path):

    fn = str(tmp_path / 'new.fits')
    ofio.create_container(fn, HeaderSet([HeaderCard('OBJECT', 'M1')]))

    assert ofio.load_common_meta(fn).get('OBJECT') == 'M1' and \
           ofio.list_components(fn) == []

    # Existing files are never overwritten:
    with pytest.raises(ContainerIOError):
        ofio.create_container(fn)


def test_save_component_placeholder_1(tmp_path):

    fn = str(tmp_path / 'new.fits')
    meta = HeaderSet([HeaderCard('OBJECT', 'M1', 'Target')])

    ofio.save_component(fn, 'HEADER', meta)
    data = ofio.load_component_data(fn, 'HEADER')

    assert ofio.load_component_meta(fn, 'HEADER') == meta and \
           data.shape == (1,) and data[0] == 0.


def test_save_component_replace_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [],
                        [('HEADER', [('OBJECT', 'M1')]), ('I1', [])])
    meta = HeaderSet([HeaderCard('OBJECT', 'M2')])

    ofio.save_component(fn, 'HEADER', meta, np.arange(3.))

    assert ofio.list_components(fn) == ['I1', 'HEADER'] and \
           ofio.load_component_meta(fn, 'HEADER') == meta and \
           list(ofio.load_component_data(fn, 'HEADER')) == [0., 1., 2.]


def test_save_common_meta_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits',
                        [('OBJECT', 'M1'), ('FILTER', 'K')], [('I1', [])])
    meta = HeaderSet([HeaderCard('OBJECT', 'M2'),
                      HeaderCard('PRODUCT', 'reduced')])

    ofio.save_common_meta(fn, meta)

    with pyfits.open(fn) as hdulist:
        assert hdulist[0].header['SIMPLE'] and len(hdulist) == 2

    assert ofio.load_common_meta(fn) == meta


def test_save_card_images_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [('OBJECT', 'M1')],
                        [('I1', [('UTSTART', 1.5)])])
    images = HeaderSet([HeaderCard('UTSTART', 3.5),
                        HeaderCard('HISTORY', 'merged')]).to_images()

    ofio.save_card_images(fn, images, 'I1')

    assert ofio.load_card_images(fn, 'I1') == images and \
           ofio.load_common_meta(fn).get('OBJECT') == 'M1'


def test_delete_component_1(tmp_path):

    fn = make_container(tmp_path / 'obs.fits', [],
                        [('HEADER', []), ('I1', [])])

    ofio.delete_component(fn, 'HEADER')
    ofio.delete_component(fn, 'HEADER')

    assert ofio.list_components(fn) == ['I1']


def test_load_component_data_header_only_1(tmp_path):

    fn = str(tmp_path / 'obs.fits')
    pyfits.HDUList([pyfits.PrimaryHDU(),
                    pyfits.ImageHDU(name='HEADER')]).writeto(fn)

    assert ofio.load_component_data(fn, 'HEADER') is None and \
           ofio.list_components(fn) == ['HEADER']

    with pytest.raises(ContainerIOError):
        ofio.load_component_data(fn, 'I1')
