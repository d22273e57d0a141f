# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

import io
from datetime import datetime

import pytest
from PIL import Image


def make_jpeg(color=(200, 40, 40), size=(16, 16)) -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, 'JPEG')
    return buffer.getvalue()


@pytest.fixture
def jpeg_factory():
    return make_jpeg


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def other_jpeg_bytes():
    return make_jpeg(color=(20, 120, 220), size=(24, 12))


@pytest.fixture
def sample_tree():
    taken = datetime(2024, 5, 1, 12, 30, 45)
    return {
        'Image': {
            'Make': 'FUJIFILM',
            'Model': 'X-T5',
            'Orientation': 1,
            'XResolution': 72.0,
            'YResolution': 72.0,
            'ResolutionUnit': 2,
            'DateTime': taken,
        },
        'Photo': {
            'ExposureTime': 0.004,
            'FNumber': 2.8,
            'ISOSpeedRatings': 400,
            'DateTimeOriginal': taken,
            'ExposureBiasValue': -0.7,
            'FocalLength': 35.0,
            'Flash': 16,
            'WhiteBalance': 0,
            'ExifVersion': b'0232',
            'LensModel': 'XF35mmF1.4 R',
        },
        'GPSInfo': {
            'GPSLatitudeRef': 'N',
            'GPSLatitude': [37.0, 48.0, 12.5],
            'GPSLongitudeRef': 'W',
            'GPSLongitude': [122.0, 25.0, 9.9],
            'GPSAltitudeRef': 0,
            'GPSAltitude': 12.5,
        },
    }
