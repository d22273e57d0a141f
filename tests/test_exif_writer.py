# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

import logging
from datetime import datetime

import piexif
import pytest
from piexif.helper import UserComment

from exiftransfer.config import ConverterConfig
from exiftransfer.exif_reader import from_raw_tags
from exiftransfer.exif_writer import to_raw_tags

ExifIFD = piexif.ExifIFD
GPSIFD = piexif.GPSIFD
ImageIFD = piexif.ImageIFD


def test_output_has_every_ifd():
    raw = to_raw_tags({})
    assert set(raw) == {'0th', 'Exif', 'GPS', 'Interop', '1st', 'thumbnail'}
    assert raw['thumbnail'] is None


def test_fnumber_scenario():
    raw = to_raw_tags({'Photo': {'FNumber': 2.8}})
    assert raw['Exif'][ExifIFD.FNumber] == (280000, 100000)


def test_rational_rounding():
    raw = to_raw_tags({'Photo': {'ExposureTime': 1 / 3, 'ExposureBiasValue': -0.7}})
    assert raw['Exif'][ExifIFD.ExposureTime] == (33333, 100000)
    assert raw['Exif'][ExifIFD.ExposureBiasValue] == (-70000, 100000)


def test_rational_denominator_is_configurable():
    config = ConverterConfig()
    config.rational_denominator = 1000
    raw = to_raw_tags({'Photo': {'FNumber': 2.8}}, config=config)
    assert raw['Exif'][ExifIFD.FNumber] == (2800, 1000)


def test_rational_arrays():
    raw = to_raw_tags({'GPSInfo': {
        'GPSLatitude': [37, 48, 12.5],
        'GPSLongitude': [[122, 1], [25, 1], [990, 100]],
    }})
    assert raw['GPS'][GPSIFD.GPSLatitude] == ((3700000, 100000), (4800000, 100000), (1250000, 100000))
    assert raw['GPS'][GPSIFD.GPSLongitude] == ((122, 1), (25, 1), (990, 100))



def test_large_rationals_use_a_smaller_denominator():
    raw = to_raw_tags({'Photo': {
        'ExposureIndex': 51200.0,
        'SubjectDistance': 4294967295.0,
        'FNumber': 2.8,
    }})
    assert raw['Exif'][ExifIFD.ExposureIndex] == (512000000, 10000)
    assert raw['Exif'][ExifIFD.SubjectDistance] == (4294967295, 1)
    assert raw['Exif'][ExifIFD.FNumber] == (280000, 100000)

    tree = from_raw_tags(to_raw_tags({'Photo': {'ExposureIndex': 51200.0, 'SubjectDistance': 4294967295.0}}))
    assert tree['Photo']['ExposureIndex'] == 51200.0
    assert tree['Photo']['SubjectDistance'] == 4294967295.0


def test_large_signed_rational():
    raw = to_raw_tags({'Photo': {'ExposureBiasValue': -30000.0}})
    assert raw['Exif'][ExifIFD.ExposureBiasValue] == (-300000000, 10000)

def test_datetime_tags():
    taken = datetime(2024, 5, 1, 12, 30, 45)
    raw = to_raw_tags({'Image': {'DateTime': taken}, 'Photo': {'DateTimeOriginal': taken}})
    assert raw['0th'][ImageIFD.DateTime] == '2024:05:01 12:30:45'
    assert raw['Exif'][ExifIFD.DateTimeOriginal] == '2024:05:01 12:30:45'


def test_undefined_tags():
    raw = to_raw_tags({'Photo': {
        'ExifVersion': b'0232',
        'FlashpixVersion': '0100',
        'ComponentsConfiguration': [1, 2, 3, 0],
        'SceneType': {'0': 1},
        'FileSource': {'value': [3]},
    }})
    exif = raw['Exif']
    assert exif[ExifIFD.ExifVersion] == b'0232'
    assert exif[ExifIFD.FlashpixVersion] == b'0100'
    assert exif[ExifIFD.ComponentsConfiguration] == b'\x01\x02\x03\x00'
    assert exif[ExifIFD.SceneType] == b'\x01'
    assert exif[ExifIFD.FileSource] == b'\x03'


def test_position_indexed_bytes_are_ordered():
    raw = to_raw_tags({'Photo': {'MakerNote': {'2': 67, '0': 65, '1': 66}}})
    assert raw['Exif'][ExifIFD.MakerNote] == b'ABC'


def test_user_comment_record():
    raw = to_raw_tags({'Photo': {'UserComment': {'comment': 'hello', 'encoding': 'unicode'}}})
    encoded = raw['Exif'][ExifIFD.UserComment]
    assert encoded == UserComment.dump('hello', encoding=UserComment.UNICODE)
    assert UserComment.load(encoded) == 'hello'


def test_ascii_and_integers():
    raw = to_raw_tags({'Image': {'Make': 'FUJIFILM', 'Artist': 'Zoë Ødegård', 'Orientation': 6.0}})
    assert raw['0th'][ImageIFD.Make] == 'FUJIFILM'
    assert raw['0th'][ImageIFD.Artist] == 'Zoë Ødegård'
    assert raw['0th'][ImageIFD.Orientation] == 6
    assert isinstance(raw['0th'][ImageIFD.Orientation], int)


def test_non_latin1_text_becomes_utf8():
    raw = to_raw_tags({'Image': {'ImageDescription': '東京'}})
    assert raw['0th'][ImageIFD.ImageDescription] == '東京'.encode('utf-8')


def test_fallback_ifd_resolution():
    raw = to_raw_tags({'Image': {'LensModel': 'XF23mm'}})
    assert raw['Exif'][ExifIFD.LensModel] == 'XF23mm'
    assert ExifIFD.LensModel not in raw['0th']


def test_unresolved_tag_is_dropped():
    raw = to_raw_tags({'Photo': {'MyCustomTag': 42, 'FNumber': 2.8}})
    assert list(raw['Exif']) == [ExifIFD.FNumber]


def test_unknown_section_is_ignored():
    raw = to_raw_tags({'MakerNote': {'FNumber': 2.8}, 'thumbnail': b'\xff\xd8'})
    assert all(not raw[ifd] for ifd in ('0th', 'Exif', 'GPS', 'Interop', '1st'))


@pytest.mark.parametrize('tag, value', [
    ('ISOSpeedRatings', 'fast'),
    ('ISOSpeedRatings', 70000),
    ('ISOSpeedRatings', 100.5),
    ('FNumber', 'f/2'),
    ('FNumber', -2.8),
    ('ExifVersion', 3.5),
])
def test_unencodable_values_are_dropped(tag, value, caplog):
    with caplog.at_level(logging.WARNING, logger='exiftransfer.exif_writer'):
        raw = to_raw_tags({'Photo': {tag: value, 'FocalLength': 35.0}})
    assert list(raw['Exif']) == [ExifIFD.FocalLength]
    assert tag in caplog.text


def test_thumbnail_is_carried():
    raw = to_raw_tags({'ThumbnailTags': {'Compression': 6}}, thumbnail=b'\xff\xd8thumb')
    assert raw['thumbnail'] == b'\xff\xd8thumb'
    assert raw['1st'][ImageIFD.Compression] == 6


def test_input_tree_is_not_modified(sample_tree):
    before = repr(sample_tree)
    to_raw_tags(sample_tree)
    assert repr(sample_tree) == before


def test_encoded_structure_is_accepted_by_piexif(sample_tree):
    exif_bytes = piexif.dump(to_raw_tags(sample_tree))
    assert exif_bytes.startswith(b'Exif\x00\x00')


def test_iop_section_maps_to_interop_ifd():
    raw = to_raw_tags({'Iop': {'InteroperabilityIndex': 'R98'}})
    assert raw['Interop'][piexif.InteropIFD.InteroperabilityIndex] == 'R98'


def test_interop_survives_piexif_round_trip():
    raw = to_raw_tags({'Photo': {'FNumber': 2.8}, 'Iop': {'InteroperabilityIndex': 'R98'}})
    tree = from_raw_tags(piexif.load(piexif.dump(raw)))
    assert tree['Iop'] == {'InteroperabilityIndex': 'R98'}
    assert tree['Photo']['FNumber'] == pytest.approx(2.8)
