"""Driver for the Global Terrestrial Mercury Model (GTMM).

GTMM runs once per month on monthly mean meteorology and the deposition
accumulated over the previous month, and returns the land Hg(0) emission.
GTMM stores latitude from north to south, so fields are flipped on the way in
and on the way out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import numpy as np

from hgland.bpch import BpchRecord, check_dimensions, get_tau0, iter_records
from hgland.deposition import GTMMDeposition
from hgland.types import Grid

logger = logging.getLogger(__name__)

GTMM_MET_CATEGORY: str = "GMAO-2D"

# Tracer numbers of the monthly mean met fields, GEOS-4 and GEOS-5 variants
TSURF_TRACERS: tuple[int, ...] = (54, 59)
PRECIP_TRACERS: tuple[int, ...] = (26, 29)
SOLAR_TRACERS: tuple[int, ...] = (37, 51)

_LOCATION: str = "rd_gtmm_dr"


class GTMMModel(Protocol):
    """The external GTMM model, coupled as a callable.

    All arrays are (n_lat, n_lon) with latitude from north to south.
    Deposition is in kg, temperature in K, precipitation in mm and solar
    radiation in W/m2. Returns the Hg(0) emission [kg/s].
    """

    def __call__(
        self,
        year: int,
        month: int,
        hg0_dry: np.ndarray,
        hg2_dry: np.ndarray,
        hg2_wet: np.ndarray,
        tsurf: np.ndarray,
        precip: np.ndarray,
        solar_w: np.ndarray,
    ) -> np.ndarray: ...


@dataclass(frozen=True)
class GTMMMetFields:
    """Monthly meteorology for GTMM, latitude from north to south.

    Attributes:
        tsurf: Surface temperature [K].
        precip: Total precipitation for the month [mm].
        solar_w: Solar radiation [W/m2].
    """

    tsurf: np.ndarray
    precip: np.ndarray
    solar_w: np.ndarray


def _is_met_category(category: str) -> bool:
    # Only the first 8 characters of the category name identify the met set
    return category[:8].rstrip() == GTMM_MET_CATEGORY


def _classify(record: BpchRecord) -> str | None:
    tracer = record.header.tracer
    if tracer in TSURF_TRACERS:
        return "tsurf"
    if tracer in PRECIP_TRACERS:
        return "precip"
    if tracer in SOLAR_TRACERS:
        return "solar_w"
    return None


def read_gtmm_met_fields(path: str | Path, shape: tuple[int, int]) -> GTMMMetFields:
    """Read the monthly mean meteorology for GTMM from a bpch file.

    Records of category GMAO-2D are dispatched by tracer number to surface
    temperature, precipitation or solar radiation; when a field appears more
    than once the last record is kept. Other tracer numbers and categories
    are skipped. Fields that are absent stay zero.

    Args:
        path: Meteorology bpch file.
        shape: Model grid shape (n_lat, n_lon).

    Returns:
        Met fields flipped to GTMM orientation.

    Raises:
        FileNotFoundError: If the file does not exist.
        BpchDecodeError: On a malformed header or short read, tagged
            ``rd_gtmm_dr:1``, ``:2`` or ``:3``.
        DimensionMismatchError: If a GMAO-2D record is not a full global
            single-level field.
    """
    fields: dict[str, np.ndarray] = {
        "tsurf": np.zeros(shape, dtype=np.float64),
        "precip": np.zeros(shape, dtype=np.float64),
        "solar_w": np.zeros(shape, dtype=np.float64),
    }

    for record in iter_records(path, _LOCATION):
        if not _is_met_category(record.header.category):
            continue

        check_dimensions(record.header, shape, _LOCATION)

        name = _classify(record)
        if name is None:
            logger.debug("Skipping %s tracer %d", record.header.category, record.header.tracer)
            continue
        fields[name] = np.flipud(record.data).astype(np.float64)

    return GTMMMetFields(**fields)


def gtmm_flux(
    met_path: str | Path,
    restart_path: str | Path,
    year: int,
    month: int,
    grid: Grid,
    is_land: np.ndarray,
    model: GTMMModel | None = None,
    day: int = 1,
) -> np.ndarray:
    """Run GTMM for one month and return its land Hg(0) emission.

    Args:
        met_path: Monthly mean meteorology file, formatted with ``year``,
            ``month`` and ``day`` (e.g. ``"mean_{year:04d}{month:02d}.bpch"``).
        restart_path: GTMM restart file holding last month's deposition.
        year: Current year.
        month: Current month (1-12).
        grid: Model grid.
        is_land: Land mask, shape (n_lat, n_lon).
        model: The coupled GTMM callable. Without it the emission is zero.
        day: Current day of month, used for the restart time stamp.

    Returns:
        Hg(0) emission for the month [kg/s], shape (n_lat, n_lon), zero
        outside land.
    """
    land = np.asarray(is_land, dtype=np.bool_)
    if land.shape != grid.shape:
        msg = f"is_land shape {land.shape} does not match grid shape {grid.shape}"
        raise ValueError(msg)

    filename = str(met_path).format(year=year, month=month, day=day)
    logger.info("GTMM_DR: Reading %s", filename)
    met = read_gtmm_met_fields(filename, grid.shape)

    deposition = GTMMDeposition.read_restart(restart_path, get_tau0(month, day, year), grid.shape)

    if model is None:
        logger.debug("No GTMM model coupled; land Hg(0) emission is zero")
        hg0 = np.zeros(grid.shape, dtype=np.float64)
    else:
        result = model(
            year,
            month,
            np.flipud(deposition.hg0_dry),
            np.flipud(deposition.hg2_dry),
            np.flipud(deposition.hg2_wet),
            met.tsurf,
            met.precip,
            met.solar_w,
        )
        hg0 = np.flipud(np.asarray(result, dtype=np.float64)).copy()
        if hg0.shape != grid.shape:
            msg = f"GTMM returned shape {hg0.shape}, expected {grid.shape}"
            raise ValueError(msg)

    # Land/ocean mask
    hg0[~land] = 0.0
    return hg0
