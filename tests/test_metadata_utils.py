# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

from datetime import datetime

import piexif
import pytest

from exiftransfer.display import describe_tree
from exiftransfer.exceptions import InvalidTagError
from exiftransfer.exif_writer import to_raw_tags
from exiftransfer.gps_codec import gps_position
from exiftransfer.metadata_utils import (
    add_field,
    apply_edit,
    clone_tree,
    extract_key_parameters,
    remove_field,
    replace_value,
    strip_gps,
    update_gps_position,
)


def test_clone_is_deep(sample_tree):
    sample_tree['Photo']['Buffer'] = bytearray(b'abc')
    copy = clone_tree(sample_tree)
    assert copy == sample_tree
    copy['GPSInfo']['GPSLatitude'][0] = 1.0
    copy['Photo']['Buffer'][0] = 0
    assert sample_tree['GPSInfo']['GPSLatitude'][0] == 37.0
    assert sample_tree['Photo']['Buffer'] == bytearray(b'abc')


def test_replace_value_is_copy_on_write(sample_tree):
    updated = replace_value(sample_tree, 'Image', 'Model', 'X-H2')
    assert updated['Image']['Model'] == 'X-H2'
    assert sample_tree['Image']['Model'] == 'X-T5'


def test_replace_value_missing_section(sample_tree):
    with pytest.raises(InvalidTagError):
        replace_value(sample_tree, 'Iop', 'InteroperabilityIndex', 'R98')


def test_apply_edit(sample_tree):
    updated = apply_edit(sample_tree, 'Photo', 'ExposureTime', '1/125s')
    assert updated['Photo']['ExposureTime'] == pytest.approx(0.008)
    assert sample_tree['Photo']['ExposureTime'] == 0.004

    updated = apply_edit(updated, 'Photo', 'WhiteBalance', 'Daylight')
    assert updated['Photo']['WhiteBalance'] == 2


def test_apply_edit_keeps_value_on_bad_input(sample_tree):
    updated = apply_edit(sample_tree, 'Photo', 'FNumber', 'bright')
    assert updated['Photo']['FNumber'] == 2.8


def test_add_field(sample_tree):
    updated = add_field(sample_tree, 'Image', 'Artist', 'Jane Doe')
    assert updated['Image']['Artist'] == 'Jane Doe'

    updated = add_field(updated, 'Photo', 'FocalLengthIn35mmFilm', '53')
    assert updated['Photo']['FocalLengthIn35mmFilm'] == 53

    updated = add_field(updated, 'Photo', 'DateTimeDigitized', '2024-05-01T12:31')
    assert updated['Photo']['DateTimeDigitized'] == datetime(2024, 5, 1, 12, 31)
    assert 'Artist' not in sample_tree['Image']


def test_add_field_creates_section():
    updated = add_field({}, 'GPSInfo', 'GPSAltitude', '12.5')
    assert updated == {'GPSInfo': {'GPSAltitude': 12.5}}


@pytest.mark.parametrize('section, tag, text', [
    ('Image', 'MakerNote', 'x'),
    ('Image', 'Make', 'Canon'),
    ('Photo', 'FNumber', 'wide'),
    ('Photo', 'DateTimeDigitized', 'soon'),
])
def test_add_field_rejects(sample_tree, section, tag, text):
    with pytest.raises(InvalidTagError):
        add_field(sample_tree, section, tag, text)


def test_remove_field(sample_tree):
    updated = remove_field(sample_tree, 'Photo', 'LensModel')
    assert 'LensModel' not in updated['Photo']
    assert 'LensModel' in sample_tree['Photo']

    single = remove_field({'Iop': {'InteroperabilityIndex': 'R98'}}, 'Iop', 'InteroperabilityIndex')
    assert single == {}

    with pytest.raises(InvalidTagError):
        remove_field(sample_tree, 'Photo', 'Nope')


def test_update_gps_position_merges(sample_tree):
    updated = update_gps_position(sample_tree, -33.8688, 151.2093)
    latitude, longitude = gps_position(updated['GPSInfo'])
    assert latitude == pytest.approx(-33.8688)
    assert longitude == pytest.approx(151.2093)
    assert updated['GPSInfo']['GPSAltitude'] == 12.5
    assert gps_position(sample_tree['GPSInfo'])[0] > 0


def test_update_gps_position_out_of_range(sample_tree):
    with pytest.raises(ValueError):
        update_gps_position(sample_tree, 95.0, 0.0)


def test_strip_gps(sample_tree):
    stripped = strip_gps(sample_tree)
    assert 'GPSInfo' not in stripped
    assert 'GPSInfo' in sample_tree
    assert strip_gps({'Image': {}}) == {'Image': {}}


def test_extract_key_parameters(sample_tree):
    params = extract_key_parameters(sample_tree)
    assert list(params) == [
        'FNumber', 'ISO', 'ExposureTime', 'ExposureBiasValue',
        'FocalLength', 'Camera', 'Lens', 'Date Taken',
    ]
    assert params['ISO'] == 400
    assert params['Camera'] == 'X-T5'
    assert params['Date Taken'] == datetime(2024, 5, 1, 12, 30, 45)


def test_extract_key_parameters_skips_missing_and_zero():
    params = extract_key_parameters({'Photo': {'ExposureBiasValue': 0, 'ApertureValue': 4.0}})
    assert params == {'FNumber': 4.0}


def test_apply_edit_on_list_fields(sample_tree):
    gps = describe_tree(sample_tree)[2]
    updated = apply_edit(sample_tree, 'GPSInfo', 'GPSLatitude', gps.get('GPSLatitude').text)
    assert updated['GPSInfo']['GPSLatitude'] == [37.0, 48.0, 12.5]

    sample_tree['Photo']['LensSpecification'] = [18.0, 55.0, 2.8, 4.0]
    updated = apply_edit(sample_tree, 'Photo', 'LensSpecification', '18, 55, 2.8, 4.5')
    assert updated['Photo']['LensSpecification'] == [18.0, 55.0, 2.8, 4.5]
    raw = to_raw_tags(updated)
    assert raw['Exif'][piexif.ExifIFD.LensSpecification] == (
        (1800000, 100000), (5500000, 100000), (280000, 100000), (450000, 100000))
    assert raw['GPS'][piexif.GPSIFD.GPSLatitude][0] == (3700000, 100000)
