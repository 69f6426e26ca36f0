"""Tests for the data models."""

import pytest

from aaxconvert import __version__
from aaxconvert.errors import ValidationError
from aaxconvert.models import (
    SENTINEL,
    BatchResult,
    ContainerMetadata,
    ConversionResult,
    DeviceActivationTable,
    LicenseDescriptor,
    ProgressState,
    activation_bytes_to_raw,
    extract_activation_bytes,
    format_duration,
    normalize_activation_bytes,
)


def test_version():
    """Test that version is defined and follows semver format."""
    assert __version__
    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


class TestActivationBytes:
    """Test activation bytes helpers."""

    @pytest.mark.parametrize(
        "raw",
        [
            b"\xda\x00\xeb\x1c",
            b"\x01\x02\x03\x04\xff\xff",
            bytes(range(4, 20)),
        ],
    )
    def test_first_four_bytes_round_trip(self, raw):
        """Encoding then decoding gives back the first four bytes."""
        encoded = extract_activation_bytes(raw)
        assert encoded == encoded.upper()
        assert len(encoded) == 8
        assert activation_bytes_to_raw(encoded) == raw[:4]

    def test_extract_reverses_byte_order(self):
        assert extract_activation_bytes(b"\xda\x00\xeb\x1c\x00\x00") == "1CEB00DA"

    def test_extract_too_short(self):
        with pytest.raises(ValidationError):
            extract_activation_bytes(b"\x01\x02")

    def test_normalize_uppercases(self):
        assert normalize_activation_bytes(" 1ceb00da ") == "1CEB00DA"

    @pytest.mark.parametrize("value", ["", "1CEB00D", "1CEB00DAA", "XYZ00000", SENTINEL, "ffffffff"])
    def test_normalize_rejects(self, value):
        with pytest.raises(ValidationError):
            normalize_activation_bytes(value)


class TestDeviceActivationTable:
    """Test DeviceActivationTable."""

    def test_sentinel_entries_are_dropped(self):
        table = DeviceActivationTable.from_raw(
            [
                (0, b"\xff\xff\xff\xff\x00"),
                (1, b"\xda\x00\xeb\x1c\x00"),
                (2, b"\x04\x03\x02\x01"),
            ]
        )
        assert len(table) == 2
        assert table.get(0) is None
        assert SENTINEL not in dict(table.items()).values()
        assert table.first() == "1CEB00DA"
        assert list(table.items()) == [(1, "1CEB00DA"), (2, "01020304")]

    def test_direct_construction_drops_sentinel(self):
        table = DeviceActivationTable(entries={2: "01020304", 0: "FFFFFFFF", 1: "1CEB00DA"})
        assert list(table.items()) == [(1, "1CEB00DA"), (2, "01020304")]
        assert table.first() == "1CEB00DA"
        assert table.get(0) is None

    def test_first_value_for_index_wins(self):
        table = DeviceActivationTable.from_raw([(1, b"\xda\x00\xeb\x1c"), (1, b"\x04\x03\x02\x01")])
        assert list(table.items()) == [(1, "1CEB00DA")]

    def test_empty(self):
        table = DeviceActivationTable.from_raw([(0, b"\xff\xff\xff\xff")])
        assert table.is_empty
        assert table.first() is None


class TestContainerMetadata:
    """Test ContainerMetadata."""

    def test_properties(self):
        metadata = ContainerMetadata(
            filetype="aax",
            artist="Jane Doe",
            title="My Book",
            release_date="2017",
            duration_seconds=7384,
        )
        assert metadata.is_valid_container is True
        assert metadata.display_name == "Jane Doe - My Book [2017]"
        assert metadata.duration_formatted == "2h3m4s"

    def test_wrong_brand(self):
        assert ContainerMetadata(filetype="m4a").is_valid_container is False

    def test_frozen(self):
        metadata = ContainerMetadata(filetype="aax")
        with pytest.raises(Exception):
            metadata.filetype = "m4a"

    def test_format_duration(self):
        assert format_duration(0) == "0h0m0s"
        assert format_duration(3723) == "1h2m3s"


class TestProgressState:
    """Test ProgressState."""

    def test_percent_floors(self):
        assert ProgressState(current=3723, total=3800).percent == 97
        assert ProgressState(current=1, total=3).percent == 33

    def test_percent_clamped(self):
        assert ProgressState(current=4000, total=3800).percent == 100
        assert ProgressState(current=-5, total=100).percent == 0

    def test_percent_unknown_total(self):
        assert ProgressState(current=1024).percent is None
        assert ProgressState(current=1024, total=0).percent is None


class TestLicenseDescriptor:
    """Test LicenseDescriptor."""

    def test_download_url(self):
        descriptor = LicenseDescriptor(customer_id="AAA", product_id="BBB", codec="C1", title="My Book")
        assert (
            descriptor.download_url("cds.audible.de")
            == "https://cds.audible.de/download?product_id=BBB&cust_id=AAA&codec=C1"
        )

    def test_output_filename_is_sanitized(self):
        descriptor = LicenseDescriptor(customer_id="A", product_id="B", codec="C", title="Part 1/2: Start?")
        assert descriptor.output_filename == "Part 12 Start.aax"


class TestBatchResult:
    """Test BatchResult."""

    def test_counts(self):
        batch = BatchResult(
            results=[
                ConversionResult(source="a.aax"),
                ConversionResult(source="b.aax", error="boom", error_type="TranscodeError"),
                ConversionResult(source="c.aax"),
            ]
        )
        assert batch.converted == 2
        assert [r.source for r in batch.failed] == ["b.aax"]
        assert batch.summary() == "Finished converting 2 audiobooks!"

    def test_summary_single_and_none(self):
        assert BatchResult(results=[ConversionResult(source="a.aax")]).summary() == (
            "Finished converting one audiobook!"
        )
        assert BatchResult().summary() == "No audiobooks were converted."
