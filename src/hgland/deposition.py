"""Mercury deposition accumulators.

This module defines the deposition state consumed by the land emissions:
- Deposition: Wet and dry Hg(II) and Hg(P) deposition over one emission
  timestep, per tagged category, used by prompt recycling
- GTMMDeposition: Monthly Hg(0) and Hg(II) deposition handed to GTMM, with
  bpch restart read/write
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import numpy as np

from hgland.bpch import BpchDecodeError, BpchRecord, check_dimensions, iter_records, write_bpch

logger = logging.getLogger(__name__)


def _add(field: np.ndarray, amount: np.ndarray | float, category: int | None) -> None:
    if category is None:
        field += amount
    else:
        field[:, :, category] += amount


@dataclass
class Deposition:
    """Hg deposition accumulated over one emission timestep.

    All arrays have shape (n_lat, n_lon, n_hg_cats) and are in kg per
    emission timestep.

    Attributes:
        wd_hgp: Wet deposition of particulate Hg [kg].
        wd_hg2: Wet deposition of Hg(II) [kg].
        dd_hgp: Dry deposition of particulate Hg [kg].
        dd_hg2: Dry deposition of Hg(II) [kg].
    """

    wd_hgp: np.ndarray
    wd_hg2: np.ndarray
    dd_hgp: np.ndarray
    dd_hg2: np.ndarray

    def __post_init__(self) -> None:
        shape = np.shape(self.wd_hgp)
        for f in fields(self):
            arr = np.ascontiguousarray(getattr(self, f.name), dtype=np.float64)
            if arr.ndim != 3:
                msg = f"{f.name} array must be 3D (n_lat, n_lon, n_hg_cats), got {arr.ndim}D"
                raise ValueError(msg)
            if arr.shape != shape:
                msg = f"{f.name} shape {arr.shape} does not match wd_hgp shape {shape}"
                raise ValueError(msg)
            setattr(self, f.name, arr)

    @classmethod
    def zeros(cls, shape: tuple[int, int], n_hg_cats: int = 1) -> Deposition:
        """Create empty accumulators for a (n_lat, n_lon) grid."""
        full = (*shape, n_hg_cats)
        return cls(
            wd_hgp=np.zeros(full),
            wd_hg2=np.zeros(full),
            dd_hgp=np.zeros(full),
            dd_hg2=np.zeros(full),
        )

    @property
    def shape(self) -> tuple[int, int, int]:
        return self.wd_hgp.shape  # type: ignore[return-value]

    def add_wet_hgp(self, amount: np.ndarray | float, category: int | None = None) -> None:
        """Add wet particulate Hg deposition [kg], to one category if given."""
        _add(self.wd_hgp, amount, category)

    def add_wet_hg2(self, amount: np.ndarray | float, category: int | None = None) -> None:
        """Add wet Hg(II) deposition [kg], to one category if given."""
        _add(self.wd_hg2, amount, category)

    def add_dry_hgp(self, amount: np.ndarray | float, category: int | None = None) -> None:
        """Add dry particulate Hg deposition [kg], to one category if given."""
        _add(self.dd_hgp, amount, category)

    def add_dry_hg2(self, amount: np.ndarray | float, category: int | None = None) -> None:
        """Add dry Hg(II) deposition [kg], to one category if given."""
        _add(self.dd_hg2, amount, category)

    def total(self) -> np.ndarray:
        """Sum of wet and dry Hg(II) and Hg(P) deposition [kg]."""
        return self.wd_hgp + self.wd_hg2 + self.dd_hgp + self.dd_hg2

    def reset(self) -> None:
        """Zero all accumulators in place."""
        for f in fields(self):
            getattr(self, f.name)[...] = 0.0


# Restart layout: (attribute, category, tracer)
_RESTART_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("hg0_dry", "DRY-DEP", 1),
    ("hg2_dry", "DRY-DEP", 2),
    ("hg2_wet", "WET-DEP", 2),
)


@dataclass
class GTMMDeposition:
    """Monthly deposition accumulated for the GTMM land model.

    All arrays have shape (n_lat, n_lon) and are in kg.

    Attributes:
        hg0_dry: Dry deposition of Hg(0) [kg].
        hg2_dry: Dry deposition of Hg(II) [kg].
        hg2_wet: Wet deposition of Hg(II) [kg].
    """

    hg0_dry: np.ndarray
    hg2_dry: np.ndarray
    hg2_wet: np.ndarray

    def __post_init__(self) -> None:
        shape = np.shape(self.hg0_dry)
        for f in fields(self):
            arr = np.ascontiguousarray(getattr(self, f.name), dtype=np.float64)
            if arr.ndim != 2 or arr.shape != shape:
                msg = f"{f.name} must be 2D with shape {shape}, got {arr.shape}"
                raise ValueError(msg)
            setattr(self, f.name, arr)

    @classmethod
    def zeros(cls, shape: tuple[int, int]) -> GTMMDeposition:
        return cls(hg0_dry=np.zeros(shape), hg2_dry=np.zeros(shape), hg2_wet=np.zeros(shape))

    @property
    def shape(self) -> tuple[int, int]:
        return self.hg0_dry.shape  # type: ignore[return-value]

    def accumulate(
        self,
        hg0_dry: np.ndarray | float = 0.0,
        hg2_dry: np.ndarray | float = 0.0,
        hg2_wet: np.ndarray | float = 0.0,
    ) -> None:
        """Add deposition [kg] to the monthly totals."""
        self.hg0_dry += hg0_dry
        self.hg2_dry += hg2_dry
        self.hg2_wet += hg2_wet

    def reset(self) -> None:
        for f in fields(self):
            getattr(self, f.name)[...] = 0.0

    def write_restart(self, path: str | Path, tau0: float, tau1: float | None = None) -> None:
        """Write the monthly totals to a bpch restart file.

        Args:
            path: Output path.
            tau0: Time stamp of the restart [hours since 1985-01-01].
            tau1: End time stamp; defaults to tau0.
        """
        tau1 = tau0 if tau1 is None else tau1
        records = [
            BpchRecord.create(category, tracer, getattr(self, name), unit="kg", tau0=tau0, tau1=tau1)
            for name, category, tracer in _RESTART_FIELDS
        ]
        write_bpch(path, records, title="GTMM restart file")
        logger.info("Wrote GTMM restart %s", path)

    @classmethod
    def read_restart(cls, path: str | Path, tau0: float, shape: tuple[int, int]) -> GTMMDeposition:
        """Read monthly totals from a bpch restart file.

        Args:
            path: Restart file path.
            tau0: Time stamp to read [hours since 1985-01-01].
            shape: Expected grid shape (n_lat, n_lon).

        Raises:
            FileNotFoundError: If the file does not exist.
            BpchDecodeError: If a field is missing at tau0 or the file is malformed.
            DimensionMismatchError: If a field does not match the grid.
        """
        location = "read_gtmm_restart"
        wanted = {(category, tracer): name for name, category, tracer in _RESTART_FIELDS}
        found: dict[str, np.ndarray] = {}

        logger.info("READ_GTMM_RESTART: Reading %s", path)
        for record in iter_records(path, location):
            header = record.header
            key = (header.category, header.tracer)
            if key not in wanted:
                logger.warning(
                    "Ignoring unknown restart record %s/%d in %s",
                    header.category,
                    header.tracer,
                    Path(path).name,
                )
                continue
            if header.tau0 != tau0:
                continue
            check_dimensions(header, shape, location)
            found[wanted[key]] = record.data.astype(np.float64)

        missing = [name for name, _, _ in _RESTART_FIELDS if name not in found]
        if missing:
            msg = f"restart {Path(path).name} has no {', '.join(missing)} at tau0={tau0}"
            raise BpchDecodeError(msg, location)

        return cls(**found)
