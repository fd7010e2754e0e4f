"""Tests for TLE checksum validation, classification and bulk parsing."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import (
    BAD_CHECKSUM_LINE1,
    BAD_CHECKSUM_LINE2,
    CSS_LINE1,
    CSS_LINE2,
    CSS_NAME,
    DEB_LINE1,
    DEB_LINE2,
    DEB_NAME,
    ISS_LINE1,
    ISS_LINE2,
    ISS_NAME,
    block,
)
from spacetraffic.core.tle_parser import (
    Category,
    Satellite,
    TLEChecksumError,
    TLEParseError,
    classify,
    compute_checksum,
    extract_intl_designator,
    extract_norad_id,
    parse_bulk_tle,
    parse_satellite,
    tle_epoch,
    validate_checksum,
)


def reference_checksum(line: str) -> int:
    total = 0
    for ch in line[:68]:
        if ch.isdigit():
            total += int(ch)
        elif ch == "-":
            total += 1
    return total % 10


class TestChecksum:
    @pytest.mark.parametrize(
        "line", [ISS_LINE1, ISS_LINE2, CSS_LINE1, CSS_LINE2, DEB_LINE1, DEB_LINE2]
    )
    def test_valid_lines(self, line):
        assert validate_checksum(line)
        assert compute_checksum(line) == reference_checksum(line) == int(line[68])

    def test_minus_signs_count_as_one(self):
        # CSS line 1 carries two '-' signs in the exponent fields
        assert CSS_LINE1.count("-") == 2
        assert validate_checksum(CSS_LINE1)

    def test_wrong_check_digit(self):
        assert not validate_checksum(BAD_CHECKSUM_LINE1)
        assert not validate_checksum(BAD_CHECKSUM_LINE2)

    def test_single_altered_digit_rejected(self):
        altered = ISS_LINE1[:20] + "2" + ISS_LINE1[21:]
        assert altered[20] != ISS_LINE1[20]
        assert not validate_checksum(altered)

    def test_short_line_rejected(self):
        assert not validate_checksum(ISS_LINE1[:68])

    def test_empty_and_none_rejected(self):
        assert not validate_checksum("")
        assert not validate_checksum(None)

    def test_non_digit_check_character(self):
        assert not validate_checksum(ISS_LINE1[:68] + "X")


class TestClassify:
    @pytest.mark.parametrize(
        "name, label, expected",
        [
            ("ISS (ZARYA)", None, Category.STATION),
            ("CSS (TIANHE)", None, Category.STATION),
            ("TIANGONG", None, Category.STATION),
            ("NOAA 20", None, Category.PAYLOAD),
            ("NOAA 20", "PAYLOAD", Category.PAYLOAD),
            ("NOAA 20", "STATION", Category.STATION),
            ("NOAA 20", "DEBRIS", Category.DEBRIS),
            ("COSMOS 2251 DEB", None, Category.DEBRIS),
            ("SL-16 R/B", None, Category.DEBRIS),
            ("COSMOS 2251 DEB", "PAYLOAD", Category.DEBRIS),
            ("ISS DEB", None, Category.STATION),
            ("ISS DEB", "DEBRIS", Category.STATION),
        ],
    )
    def test_table(self, name, label, expected):
        assert classify(name, label) is expected


class TestFieldExtraction:
    def test_norad_id(self):
        assert extract_norad_id(ISS_LINE2) == "25544"

    def test_intl_designator(self):
        assert extract_intl_designator(ISS_LINE1) == "98067A"
        assert extract_intl_designator(DEB_LINE1) == "93036SX"

    def test_epoch(self):
        epoch = tle_epoch(ISS_LINE1)
        assert epoch.tzinfo == timezone.utc
        assert (epoch.year, epoch.month, epoch.day) == (2024, 5, 6)

    def test_bad_epoch_raises(self):
        with pytest.raises(TLEParseError):
            tle_epoch("1 25544U 98067A   XXYYY.ZZZZ")


class TestSatellite:
    def test_from_lines(self):
        sat = Satellite.from_lines(f"  {ISS_NAME}  ", ISS_LINE1 + "  ", ISS_LINE2)
        assert sat.name == ISS_NAME
        assert sat.id == "25544"
        assert sat.category is Category.STATION
        assert sat.is_visible
        assert sat.satrec is not None

    def test_checksum_failure_raises(self):
        with pytest.raises(TLEChecksumError) as exc_info:
            Satellite.from_lines("ISS", BAD_CHECKSUM_LINE1, ISS_LINE2)
        assert exc_info.value.line_number == 1

        with pytest.raises(TLEChecksumError) as exc_info:
            Satellite.from_lines("ISS", ISS_LINE1, BAD_CHECKSUM_LINE2)
        assert exc_info.value.line_number == 2

    def test_lenient_parse_returns_none(self):
        assert parse_satellite("ISS", BAD_CHECKSUM_LINE1, BAD_CHECKSUM_LINE2) is None

    def test_to_dict_omits_runtime_fields(self, iss):
        row = iss.to_dict()
        assert row == {
            "name": ISS_NAME,
            "tle1": ISS_LINE1,
            "tle2": ISS_LINE2,
            "category": "STATION",
            "id": "25544",
        }

    def test_from_dict_restores_element_record(self, iss):
        restored = Satellite.from_dict(iss.to_dict())
        assert restored == iss
        assert restored.satrec is not None

    def test_from_legacy_array_row(self):
        restored = Satellite.from_dict(
            [DEB_NAME, DEB_LINE1, DEB_LINE2, "DEBRIS", "34427"]
        )
        assert restored.category is Category.DEBRIS
        assert restored.id == "34427"

    def test_from_dict_without_category_classifies(self):
        restored = Satellite.from_dict(
            {"name": CSS_NAME, "tle1": CSS_LINE1, "tle2": CSS_LINE2}
        )
        assert restored.category is Category.STATION
        assert restored.id == "48274"

    @pytest.mark.parametrize("row", [["too", "short"], {"name": "x"}, "not a row"])
    def test_from_dict_malformed(self, row):
        with pytest.raises(TLEParseError):
            Satellite.from_dict(row)


class TestBulkParse:
    def test_three_line_blocks(self):
        text = (
            block(ISS_NAME, ISS_LINE1, ISS_LINE2)
            + block(CSS_NAME, CSS_LINE1, CSS_LINE2)
            + block(DEB_NAME, DEB_LINE1, DEB_LINE2)
        )
        sats = parse_bulk_tle(text)
        assert [s.id for s in sats] == ["25544", "48274", "34427"]
        assert [s.category for s in sats] == [
            Category.STATION,
            Category.STATION,
            Category.DEBRIS,
        ]

    def test_crlf_line_endings(self):
        text = block(ISS_NAME, ISS_LINE1, ISS_LINE2).replace("\n", "\r\n")
        assert len(parse_bulk_tle(text)) == 1

    def test_trailing_partial_block_discarded(self):
        text = block(ISS_NAME, ISS_LINE1, ISS_LINE2) + f"{CSS_NAME}\n{CSS_LINE1}\n"
        sats = parse_bulk_tle(text)
        assert [s.id for s in sats] == ["25544"]

    def test_invalid_block_dropped_silently(self):
        text = (
            block(ISS_NAME, ISS_LINE1, ISS_LINE2)
            + block("BROKEN", BAD_CHECKSUM_LINE1, BAD_CHECKSUM_LINE2)
            + block(CSS_NAME, CSS_LINE1, CSS_LINE2)
        )
        assert [s.id for s in parse_bulk_tle(text)] == ["25544", "48274"]

    def test_label_applies_to_group(self):
        text = block("NOAA 20", ISS_LINE1, ISS_LINE2)
        assert parse_bulk_tle(text, "DEBRIS")[0].category is Category.DEBRIS

    def test_empty_text(self):
        assert parse_bulk_tle("") == []
