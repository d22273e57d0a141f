# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

import logging
from datetime import datetime

import pytest

from exiftransfer.config import ConverterConfig
from exiftransfer.exif_tags import ENUM_CATEGORIES, TAG_ENUM_CATEGORIES
from exiftransfer.value_formatter import format_recipe_value, format_value
from exiftransfer.value_parser import parse_edit, unformat_recipe_value, unformat_value


def test_exposure_time_scenario():
    text = format_value('ExposureTime', 0.004)
    assert text == '1/250s'
    assert unformat_value('ExposureTime', text, 0.004) == pytest.approx(0.004)


@pytest.mark.parametrize('tag, text, original, expected', [
    ('ExposureTime', '1/125s', 0.004, 0.008),
    ('ExposureTime', '2s', 0.5, 2.0),
    ('FNumber', 'f/4', 2.8, 4.0),
    ('FNumber', 'F/5.6', 2.8, 5.6),
    ('FocalLength', '50mm', 35.0, 50.0),
    ('ISOSpeedRatings', 'ISO 800', 400, 800),
    ('ExposureBiasValue', '+1.0 EV', 0.0, 1.0),
    ('ExposureBiasValue', '-0.3 EV', 0.0, -0.3),
    ('XResolution', '300 dpi', 72.0, 300.0),
])
def test_unit_rules_are_reversed(tag, text, original, expected):
    assert unformat_value(tag, text, original) == pytest.approx(expected)


def test_integer_original_stays_integer():
    value = unformat_value('ISOSpeedRatings', 'ISO 800', 400)
    assert value == 800
    assert isinstance(value, int)


def test_float_original_stays_float():
    value = unformat_value('FocalLength', '50mm', 35.0)
    assert isinstance(value, float)


@pytest.mark.parametrize('tag', sorted(TAG_ENUM_CATEGORIES))
def test_format_then_unformat_is_identity_for_enums(tag):
    for code in ENUM_CATEGORIES[TAG_ENUM_CATEGORIES[tag]]:
        assert unformat_value(tag, format_value(tag, code), code) == code


def test_unknown_enum_code_keeps_original():
    assert unformat_value('Flash', format_value('Flash', 3), 3) == 3


def test_timestamp_parsing():
    original = datetime(2024, 5, 1, 12, 30, 45)
    assert unformat_value('DateTimeOriginal', '2023:01:02 03:04:05', original) == datetime(2023, 1, 2, 3, 4, 5)
    assert unformat_value('DateTimeOriginal', '2023-01-02T03:04', original) == datetime(2023, 1, 2, 3, 4)


def test_timestamp_display_format_round_trip():
    config = ConverterConfig()
    config.date_display_format = '%d/%m/%Y %H:%M:%S'
    original = datetime(2024, 5, 1, 12, 30, 45)
    text = format_value('DateTime', original, config)
    assert unformat_value('DateTime', text, original, config) == original


def test_unparseable_number_keeps_original(caplog):
    with caplog.at_level(logging.WARNING, logger='exiftransfer.value_parser'):
        result = parse_edit('FNumber', 'wide open', 2.8)
    assert result.value == 2.8
    assert result.used_fallback is True
    assert 'wide open' in caplog.text


@pytest.mark.parametrize('text', ['nan', 'inf', '', '1/0s'])
def test_non_finite_numbers_are_rejected(text):
    assert unformat_value('ExposureTime', text, 0.004) == 0.004


def test_unparseable_date_keeps_original():
    original = datetime(2024, 5, 1)
    result = parse_edit('DateTime', 'yesterday', original)
    assert result == (original, True)


def test_text_passes_through():
    assert unformat_value('Model', 'X-H2S', 'X-T5') == 'X-H2S'
    assert parse_edit('Model', 'X-H2S', 'X-T5').used_fallback is False


def test_non_string_input_returns_original():
    assert unformat_value('FNumber', None, 2.8) == 2.8
    assert unformat_value('FNumber', 4.0, 2.8) == 2.8



def test_number_lists_parse_comma_separated_text():
    original = [18.0, 55.0, 2.8, 4.0]
    assert parse_edit('LensSpecification', '18, 55, 2.8, 4.5', original) == ([18.0, 55.0, 2.8, 4.5], False)
    assert unformat_value('BitsPerSample', '8, 8, 8', [8, 8, 8]) == [8, 8, 8]


@pytest.mark.parametrize('tag, text, original', [
    ('GPSLatitude', '37°48\'12.50"N', [37.0, 48.0, 12.5]),
    ('LensSpecification', '18-55mm', [18.0, 55.0, 2.8, 4.0]),
    ('SubjectArea', 'centre', [10, 20, 30]),
    ('Keywords', 'a, b', ['a', 'c']),
])
def test_unparseable_list_keeps_original(tag, text, original, caplog):
    with caplog.at_level(logging.WARNING, logger='exiftransfer.value_parser'):
        result = parse_edit(tag, text, original)
    assert result == (original, True)
    assert tag in caplog.text


def test_generic_number():
    assert unformat_value('ImageWidth', '6240', 4000) == 6240
    assert unformat_value('BrightnessValue', '7.25', 6.5) == 7.25


@pytest.mark.parametrize('key, value', [
    ('FilmMode', 'CLASSIC_CHROME'),
    ('DynamicRange', '400'),
    ('WhiteBalanceColorTemperature', 5500),
    ('WhiteBalanceFineTuneRed', 2),
    ('Tint', -1),
    ('Sharpness', -2),
])
def test_recipe_values_round_trip(key, value):
    assert unformat_recipe_value(key, format_recipe_value(key, value), value) == value


def test_recipe_unparseable_keeps_original():
    assert unformat_recipe_value('WhiteBalanceColorTemperature', 'warm', 5500) == 5500
