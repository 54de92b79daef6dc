"""Binary punch (bpch) file reading and writing.

A bpch file is a Fortran sequential unformatted file, big-endian, where every
record is framed by 4-byte length markers. The file starts with two records:

- the file type identifier, ``CTM bin 02`` padded to 40 characters
- an 80-character title

followed by one three-record block per data field:

1. model name (20s), lon/lat resolution (2 x float32), half-polar and
   center-180 flags (2 x int32)
2. category (40s), tracer id (int32), unit (40s), tau0 and tau1 (2 x float64,
   hours since 1985-01-01), reserved (40s), ni, nj, nl, ifirst, jfirst,
   lfirst, nskip (7 x int32)
3. ni * nj * nl float32 values, longitude varying fastest
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import numpy as np

logger = logging.getLogger(__name__)

FILE_TYPE_ID: str = "CTM bin 02"

_MARKER = struct.Struct(">i")
_HEADER1 = struct.Struct(">20sffii")
_HEADER2 = struct.Struct(">40si40sdd40s7i")
_FTI_LEN: int = 40
_TITLE_LEN: int = 80

_TAU_EPOCH = np.datetime64("1985-01-01T00:00")


class BpchDecodeError(ValueError):
    """Malformed or truncated bpch content.

    Attributes:
        location: Tag naming the read that failed (e.g. ``rd_gtmm_dr:2``).
    """

    def __init__(self, message: str, location: str) -> None:
        super().__init__(f"{location}: {message}")
        self.location = location


class DimensionMismatchError(BpchDecodeError):
    """Record dimensions do not match the model grid."""


@dataclass(frozen=True)
class BpchHeader:
    """Header of one bpch data block.

    Attributes:
        modelname: Name of the model/met product that wrote the field.
        lonres: Longitude resolution [deg].
        latres: Latitude resolution [deg].
        halfpolar: 1 if polar boxes are half-size.
        center180: 1 if the first box is centred on -180 deg.
        category: Diagnostic category name (e.g. ``GMAO-2D``).
        tracer: Tracer number within the category.
        unit: Unit string.
        tau0: Start of the averaging period [hours since 1985-01-01].
        tau1: End of the averaging period [hours since 1985-01-01].
        reserved: Unused text field.
        ni, nj, nl: Longitude, latitude and level extent of the payload.
        ifirst, jfirst, lfirst: 1-based offsets of the payload in the global grid.
    """

    category: str
    tracer: int
    ni: int
    nj: int
    nl: int = 1
    unit: str = ""
    tau0: float = 0.0
    tau1: float = 0.0
    modelname: str = "GEOS5"
    lonres: float = 5.0
    latres: float = 4.0
    halfpolar: int = 1
    center180: int = 1
    reserved: str = ""
    ifirst: int = 1
    jfirst: int = 1
    lfirst: int = 1

    @property
    def size(self) -> int:
        """Number of values in the payload."""
        return self.ni * self.nj * self.nl


@dataclass(frozen=True)
class BpchRecord:
    """One decoded bpch data block.

    Attributes:
        header: Block header.
        data: float32 payload, shape (nj, ni) when nl == 1 else (nl, nj, ni).
    """

    header: BpchHeader
    data: np.ndarray

    @classmethod
    def create(cls, category: str, tracer: int, data: np.ndarray, **header_fields: object) -> BpchRecord:
        """Build a record from an array, deriving ni, nj and nl from its shape.

        Args:
            category: Diagnostic category name.
            tracer: Tracer number.
            data: Array of shape (nj, ni) or (nl, nj, ni).
            **header_fields: Any other BpchHeader field.
        """
        arr = np.asarray(data, dtype=np.float32)
        if arr.ndim == 2:
            nl = 1
            nj, ni = arr.shape
        elif arr.ndim == 3:
            nl, nj, ni = arr.shape
        else:
            msg = f"bpch data must be 2D or 3D, got {arr.ndim}D"
            raise ValueError(msg)
        header = BpchHeader(category=category, tracer=tracer, ni=ni, nj=nj, nl=nl, **header_fields)  # type: ignore[arg-type]
        return cls(header=header, data=arr)


def get_tau0(month: int, day: int = 1, year: int = 1985) -> float:
    """Return the bpch time stamp of a date.

    Args:
        month: Month of year (1-12).
        day: Day of month.
        year: Year.

    Returns:
        Hours since 1985-01-01 00:00 UTC.
    """
    date = np.datetime64(f"{year:04d}-{month:02d}-{day:02d}T00:00")
    return float((date - _TAU_EPOCH) / np.timedelta64(1, "h"))


def check_dimensions(header: BpchHeader, shape: tuple[int, int], location: str) -> None:
    """Ensure a record covers the full horizontal grid with one level.

    Args:
        header: Record header.
        shape: Expected horizontal shape (n_lat, n_lon).
        location: Tag reported on failure.

    Raises:
        DimensionMismatchError: If ni, nj or nl do not match.
    """
    n_lat, n_lon = shape
    if header.ni != n_lon or header.nj != n_lat or header.nl != 1:
        msg = (
            f"record {header.category.strip()}/{header.tracer} has dimensions "
            f"(ni={header.ni}, nj={header.nj}, nl={header.nl}), expected "
            f"(ni={n_lon}, nj={n_lat}, nl=1)"
        )
        raise DimensionMismatchError(msg, location)


def _read_record(f: BinaryIO, location: str, allow_eof: bool = False) -> bytes | None:
    """Read one Fortran sequential record, returning None at a clean end of file."""
    raw = f.read(_MARKER.size)
    if not raw and allow_eof:
        return None
    if len(raw) < _MARKER.size:
        raise BpchDecodeError("unexpected end of file in record marker", location)

    (length,) = _MARKER.unpack(raw)
    if length < 0:
        raise BpchDecodeError(f"negative record length {length}", location)

    payload = f.read(length)
    if len(payload) < length:
        raise BpchDecodeError(f"short read: expected {length} bytes, got {len(payload)}", location)

    raw = f.read(_MARKER.size)
    if len(raw) < _MARKER.size or _MARKER.unpack(raw)[0] != length:
        raise BpchDecodeError("record trailer does not match record length", location)
    return payload


def _write_record(f: BinaryIO, payload: bytes) -> None:
    marker = _MARKER.pack(len(payload))
    f.write(marker)
    f.write(payload)
    f.write(marker)


def _decode_text(raw: bytes) -> str:
    return raw.decode("ascii", errors="replace").strip()


def _encode_text(text: str, width: int) -> bytes:
    return text.encode("ascii")[:width].ljust(width)


def _read_preamble(f: BinaryIO, path: Path, location: str) -> str:
    fti = _read_record(f, location)
    if fti is None or _decode_text(fti) != FILE_TYPE_ID:
        raise BpchDecodeError(f"{path} is not a bpch file (expected '{FILE_TYPE_ID}')", location)
    title = _read_record(f, location)
    return _decode_text(title or b"")


def _decode_header(header1: bytes, header2: bytes, location: str) -> BpchHeader:
    if len(header1) != _HEADER1.size:
        raise BpchDecodeError(f"model header has {len(header1)} bytes, expected {_HEADER1.size}", f"{location}:1")
    if len(header2) != _HEADER2.size:
        raise BpchDecodeError(f"data header has {len(header2)} bytes, expected {_HEADER2.size}", f"{location}:2")

    modelname, lonres, latres, halfpolar, center180 = _HEADER1.unpack(header1)
    category, tracer, unit, tau0, tau1, reserved, ni, nj, nl, ifirst, jfirst, lfirst, _ = _HEADER2.unpack(header2)

    if min(ni, nj, nl) < 1:
        raise BpchDecodeError(f"invalid dimensions (ni={ni}, nj={nj}, nl={nl})", f"{location}:2")

    return BpchHeader(
        category=_decode_text(category),
        tracer=tracer,
        ni=ni,
        nj=nj,
        nl=nl,
        unit=_decode_text(unit),
        tau0=tau0,
        tau1=tau1,
        modelname=_decode_text(modelname),
        lonres=lonres,
        latres=latres,
        halfpolar=halfpolar,
        center180=center180,
        reserved=_decode_text(reserved),
        ifirst=ifirst,
        jfirst=jfirst,
        lfirst=lfirst,
    )


def iter_records(path: str | Path, location: str = "bpch") -> Iterator[BpchRecord]:
    """Iterate over the data blocks of a bpch file.

    Args:
        path: Path to the bpch file.
        location: Prefix of the tag reported on failure; the failing read of a
            block is appended as ``:1`` (model header), ``:2`` (data header)
            or ``:3`` (payload).

    Yields:
        Decoded records in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        BpchDecodeError: On a malformed header or short read. Iteration stops
            at the first error.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"bpch file not found: {path}")

    with path.open("rb") as f:
        title = _read_preamble(f, path, location)
        logger.debug("Opened bpch file %s (%s)", path.name, title)

        while True:
            header1 = _read_record(f, f"{location}:1", allow_eof=True)
            if header1 is None:
                return
            header2 = _read_record(f, f"{location}:2")
            header = _decode_header(header1, header2 or b"", location)

            payload = _read_record(f, f"{location}:3")
            expected = header.size * 4
            if payload is None or len(payload) != expected:
                got = 0 if payload is None else len(payload)
                raise BpchDecodeError(f"payload has {got} bytes, expected {expected}", f"{location}:3")

            data = np.frombuffer(payload, dtype=">f4").astype(np.float32)
            if header.nl == 1:
                data = data.reshape(header.nj, header.ni)
            else:
                data = data.reshape(header.nl, header.nj, header.ni)
            yield BpchRecord(header=header, data=data)


def read_records(path: str | Path, location: str = "bpch") -> list[BpchRecord]:
    """Read all data blocks of a bpch file. See ``iter_records``."""
    return list(iter_records(path, location))


def read_field(
    path: str | Path,
    category: str,
    tracer: int,
    tau0: float,
    shape: tuple[int, int],
    location: str = "read_field",
) -> np.ndarray:
    """Read the first 2D field matching category, tracer and tau0.

    Args:
        path: Path to the bpch file.
        category: Diagnostic category name.
        tracer: Tracer number.
        tau0: Record start time [hours since 1985-01-01].
        shape: Expected horizontal shape (n_lat, n_lon).
        location: Tag reported on failure.

    Returns:
        float64 array of shape (n_lat, n_lon).

    Raises:
        BpchDecodeError: If no record matches or the file is malformed.
        DimensionMismatchError: If the matching record has the wrong extent.
    """
    for record in iter_records(path, location):
        header = record.header
        if header.category == category and header.tracer == tracer and header.tau0 == tau0:
            check_dimensions(header, shape, location)
            return record.data.astype(np.float64)

    msg = f"no record {category}/{tracer} at tau0={tau0} in {Path(path).name}"
    raise BpchDecodeError(msg, location)


def write_bpch(path: str | Path, records: Iterable[BpchRecord], title: str = "") -> None:
    """Write records to a new bpch file.

    Args:
        path: Output path; an existing file is overwritten.
        records: Records to write in order.
        title: File title (truncated to 80 characters).
    """
    path = Path(path)
    n_written = 0
    with path.open("wb") as f:
        _write_record(f, _encode_text(FILE_TYPE_ID, _FTI_LEN))
        _write_record(f, _encode_text(title, _TITLE_LEN))

        for record in records:
            h = record.header
            data = np.asarray(record.data, dtype=">f4")
            if data.size != h.size:
                msg = f"record {h.category}/{h.tracer} has {data.size} values, header declares {h.size}"
                raise ValueError(msg)

            _write_record(
                f,
                _HEADER1.pack(_encode_text(h.modelname, 20), h.lonres, h.latres, h.halfpolar, h.center180),
            )
            nskip = h.size * 4 + 2 * _MARKER.size
            _write_record(
                f,
                _HEADER2.pack(
                    _encode_text(h.category, 40),
                    h.tracer,
                    _encode_text(h.unit, 40),
                    h.tau0,
                    h.tau1,
                    _encode_text(h.reserved, 40),
                    h.ni,
                    h.nj,
                    h.nl,
                    h.ifirst,
                    h.jfirst,
                    h.lfirst,
                    nskip,
                ),
            )
            _write_record(f, data.tobytes())
            n_written += 1

    logger.debug("Wrote %d records to %s", n_written, path.name)
