"""Tests for binary punch file reading and writing.

Tests write synthetic bpch files to a temporary directory and check decoding,
record selection and failure on malformed content.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from hgland.bpch import (
    BpchDecodeError,
    BpchRecord,
    DimensionMismatchError,
    get_tau0,
    iter_records,
    read_field,
    read_records,
    write_bpch,
)

# Byte offsets in a file written by write_bpch
_PREAMBLE_BYTES = (4 + 40 + 4) + (4 + 80 + 4)
_HEADER1_BYTES = 4 + 36 + 4
_HEADER2_BYTES = 4 + 168 + 4


@pytest.fixture
def field() -> np.ndarray:
    """A 3 x 4 field with distinct values."""
    return np.arange(12, dtype=np.float32).reshape(3, 4)


@pytest.fixture
def single_record_file(tmp_path: Path, field: np.ndarray) -> Path:
    path = tmp_path / "single.bpch"
    record = BpchRecord.create("IJ-AVG-$", 2, field, unit="ppbv", tau0=744.0, tau1=1416.0)
    write_bpch(path, [record], title="test file")
    return path


class TestGetTau0:
    """Tests for bpch time stamps."""

    def test_epoch(self) -> None:
        assert get_tau0(1, 1, 1985) == 0.0

    def test_one_month(self) -> None:
        assert get_tau0(2, 1, 1985) == 744.0

    def test_one_year(self) -> None:
        assert get_tau0(1, 1, 1986) == 8760.0

    def test_before_epoch_is_negative(self) -> None:
        assert get_tau0(1, 1, 1984) < 0.0


class TestReadRecords:
    """Tests for decoding bpch files."""

    def test_decodes_header(self, single_record_file: Path) -> None:
        (record,) = read_records(single_record_file)
        header = record.header

        assert header.category == "IJ-AVG-$"
        assert header.tracer == 2
        assert header.unit == "ppbv"
        assert header.tau0 == 744.0
        assert header.tau1 == 1416.0
        assert (header.ni, header.nj, header.nl) == (4, 3, 1)
        assert header.modelname == "GEOS5"
        assert header.halfpolar == 1

    def test_decodes_payload_in_grid_order(self, single_record_file: Path, field: np.ndarray) -> None:
        """Longitude varies fastest, so rows are latitude bands."""
        (record,) = read_records(single_record_file)
        assert record.data.shape == (3, 4)
        np.testing.assert_array_equal(record.data, field)

    def test_multi_level_record(self, tmp_path: Path) -> None:
        data = np.ones((2, 3, 4), dtype=np.float32)
        data[1] = 2.0
        path = tmp_path / "levels.bpch"
        write_bpch(path, [BpchRecord.create("IJ-AVG-$", 1, data)])

        (record,) = read_records(path)
        assert record.header.nl == 2
        assert record.data.shape == (2, 3, 4)
        assert record.data[1, 0, 0] == 2.0

    def test_records_in_file_order(self, tmp_path: Path, field: np.ndarray) -> None:
        path = tmp_path / "many.bpch"
        write_bpch(path, [BpchRecord.create("CAT", n, field * n) for n in range(1, 4)])

        tracers = [record.header.tracer for record in iter_records(path)]
        assert tracers == [1, 2, 3]

    def test_empty_file_has_no_records(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.bpch"
        write_bpch(path, [])
        assert read_records(path) == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_records(tmp_path / "absent.bpch")

    def test_rejects_other_file_types(self, tmp_path: Path) -> None:
        path = tmp_path / "other.bin"
        marker = (40).to_bytes(4, "big")
        path.write_bytes(marker + b"CTM bin 4D".ljust(40) + marker)
        with pytest.raises(BpchDecodeError, match="not a bpch file"):
            read_records(path)


class TestTruncatedFiles:
    """A short read anywhere in a block is fatal and tagged with the failing read."""

    @pytest.mark.parametrize(
        ("keep_bytes", "tag"),
        [
            (_PREAMBLE_BYTES + 10, "rd:1"),
            (_PREAMBLE_BYTES + _HEADER1_BYTES + 20, "rd:2"),
            (_PREAMBLE_BYTES + _HEADER1_BYTES + _HEADER2_BYTES + 8, "rd:3"),
        ],
    )
    def test_short_read(self, single_record_file: Path, keep_bytes: int, tag: str) -> None:
        single_record_file.write_bytes(single_record_file.read_bytes()[:keep_bytes])

        with pytest.raises(BpchDecodeError) as exc_info:
            read_records(single_record_file, location="rd")
        assert exc_info.value.location == tag

    def test_corrupt_trailer(self, single_record_file: Path) -> None:
        raw = bytearray(single_record_file.read_bytes())
        trailer = _PREAMBLE_BYTES + _HEADER1_BYTES - 4
        raw[trailer : trailer + 4] = (999).to_bytes(4, "big")
        single_record_file.write_bytes(bytes(raw))

        with pytest.raises(BpchDecodeError, match="trailer"):
            read_records(single_record_file)


class TestReadField:
    """Tests for selecting one field by category, tracer and time."""

    def test_selects_matching_record(self, tmp_path: Path, field: np.ndarray) -> None:
        path = tmp_path / "fields.bpch"
        write_bpch(
            path,
            [
                BpchRecord.create("TRANSP-$", 1, field, tau0=0.0),
                BpchRecord.create("TRANSP-$", 1, field + 100.0, tau0=744.0),
                BpchRecord.create("TRANSP-$", 2, field + 200.0, tau0=744.0),
            ],
        )

        result = read_field(path, "TRANSP-$", 1, 744.0, (3, 4))
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, field + 100.0)

    def test_missing_record(self, single_record_file: Path) -> None:
        with pytest.raises(BpchDecodeError, match="no record"):
            read_field(single_record_file, "IJ-AVG-$", 2, 0.0, (3, 4))

    def test_dimension_mismatch(self, single_record_file: Path) -> None:
        with pytest.raises(DimensionMismatchError):
            read_field(single_record_file, "IJ-AVG-$", 2, 744.0, (4, 3))


class TestWriteBpch:
    """Tests for writing bpch files."""

    def test_rejects_payload_not_matching_header(self, tmp_path: Path, field: np.ndarray) -> None:
        record = BpchRecord.create("CAT", 1, field)
        bad = BpchRecord(header=record.header, data=field[:2])
        with pytest.raises(ValueError, match="header declares"):
            write_bpch(tmp_path / "bad.bpch", [bad])

    def test_create_rejects_1d_data(self) -> None:
        with pytest.raises(ValueError, match="2D or 3D"):
            BpchRecord.create("CAT", 1, np.zeros(5))
