# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

from exiftransfer.display import describe_position, describe_recipe, describe_tree
from exiftransfer.value_formatter import BinaryData


def test_sections_in_display_order(sample_tree):
    sample_tree['Iop'] = {'InteroperabilityIndex': 'R98'}
    sections = describe_tree(sample_tree)
    assert [s.name for s in sections] == ['Image', 'Photo', 'GPSInfo', 'Iop']
    assert [s.label for s in sections] == ['Image', 'Exif', 'GPS', 'Interoperability']


def test_fields_are_formatted(sample_tree):
    photo = describe_tree(sample_tree)[1]
    exposure = photo.get('ExposureTime')
    assert exposure.label == 'Exposure Time'
    assert exposure.text == '1/250s'
    assert exposure.value == 0.004
    assert exposure.editable
    assert photo.get('Flash').text == 'Off, Did not fire'


def test_gps_fields(sample_tree):
    gps = describe_tree(sample_tree)[2]
    assert gps.get('GPSLatitude').text == '37°48\'12.50"N'
    assert gps.get('GPSLongitude').text == '122°25\'9.90"W'
    assert gps.get('GPSAltitude').text == '12.5m'


def test_binary_and_maker_note_fields_are_read_only():
    tree = {'Photo': {'MakerNote': b'FUJIFILM', 'ImageUniqueID': b'\x00\x01\x02'}}
    photo = describe_tree(tree)[0]
    assert photo.get('MakerNote').editable is False
    unique_id = photo.get('ImageUniqueID')
    assert isinstance(unique_id.text, BinaryData)
    assert unique_id.is_binary
    assert unique_id.editable is False


def test_empty_sections_are_skipped():
    assert describe_tree({'Image': {}, 'Photo': {'FNumber': 4.0}})[0].name == 'Photo'
    assert describe_tree(None) == []


def test_describe_recipe():
    view = describe_recipe({'FilmMode': 'CLASSIC_CHROME', 'DynamicRange': '200', 'ShadowTone': -1})
    assert view.label == 'Fuji Recipe'
    assert [(f.label, f.text) for f in view.fields] == [
        ('Film Mode', 'Classic Chrome'),
        ('Dynamic Range', 'DR200'),
        ('Shadow Tone', '-1'),
    ]
    assert not any(f.editable for f in view.fields)
    assert describe_recipe(None) is None


def test_describe_position(sample_tree):
    assert describe_position(sample_tree) == '37.803472, -122.419417'
    assert describe_position({}) is None


def test_gps_coordinates_and_time_are_read_only(sample_tree):
    sample_tree['GPSInfo']['GPSTimeStamp'] = [12.0, 30.0, 45.0]
    gps = describe_tree(sample_tree)[2]
    assert not gps.get('GPSLatitude').editable
    assert not gps.get('GPSLongitude').editable
    assert not gps.get('GPSTimeStamp').editable
    assert gps.get('GPSAltitude').editable
