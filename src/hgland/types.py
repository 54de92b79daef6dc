"""Input data structures for the land mercury calculators.

This module defines validated input containers:
- Grid: Horizontal grid with cell areas per latitude row
- MetFields: Meteorological and surface fields for one emission timestep
- LandMercuryConfig: Run switches and timestep settings
- SnowpackState: Hg mass stored in snow, carried between timesteps
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from hgland.constants import EARTH_RADIUS
from hgland.registry import get_snow_source, list_snow_sources


@dataclass(frozen=True)
class Grid:
    """Global latitude/longitude grid.

    Cell area depends only on the latitude row, so areas are stored once per
    row and broadcast along longitude.

    Attributes:
        area_m2: Surface area of a cell in each latitude row [m2], shape (n_lat,).
        n_lon: Number of longitude columns.
    """

    area_m2: np.ndarray  # [m2]
    n_lon: int

    def __post_init__(self) -> None:
        area = np.ascontiguousarray(self.area_m2, dtype=np.float64)
        if area.ndim != 1:
            msg = f"area_m2 must be 1D, got {area.ndim}D"
            raise ValueError(msg)
        if np.any(area <= 0.0) or np.any(~np.isfinite(area)):
            msg = "area_m2 must contain finite positive values"
            raise ValueError(msg)
        if self.n_lon < 1:
            msg = f"n_lon must be >= 1, got {self.n_lon}"
            raise ValueError(msg)
        object.__setattr__(self, "area_m2", area)

    @property
    def n_lat(self) -> int:
        return len(self.area_m2)

    @property
    def shape(self) -> tuple[int, int]:
        """Horizontal shape (n_lat, n_lon)."""
        return self.n_lat, self.n_lon

    @property
    def area_cm2(self) -> np.ndarray:
        """Cell area per latitude row [cm2]."""
        return self.area_m2 * 1e4

    @classmethod
    def from_resolution(cls, lon_res: float, lat_res: float, half_polar: bool = True) -> Grid:
        """Build a global grid from its resolution in degrees.

        With half_polar, the first and last latitude rows are half boxes
        centred on the poles (the 4x5 and 2x2.5 model grids).

        Args:
            lon_res: Longitude spacing [deg].
            lat_res: Latitude spacing [deg].
            half_polar: Whether polar rows are half-size boxes.

        Returns:
            Grid with spherical cell areas on a sphere of radius EARTH_RADIUS.
        """
        n_lon = round(360.0 / lon_res)
        if half_polar:
            n_lat = round(180.0 / lat_res) + 1
            inner = -90.0 + lat_res / 2.0 + lat_res * np.arange(n_lat - 1)
            edges = np.concatenate(([-90.0], inner, [90.0]))
        else:
            n_lat = round(180.0 / lat_res)
            edges = np.linspace(-90.0, 90.0, n_lat + 1)

        sin_edges = np.sin(np.deg2rad(edges))
        dlon = math.radians(360.0 / n_lon)
        area_m2 = EARTH_RADIUS**2 * dlon * np.diff(sin_edges)
        return cls(area_m2=area_m2, n_lon=n_lon)


class LandMercuryConfig(BaseModel):
    """Run configuration for the land mercury emissions.

    Attributes:
        biomass_burning: Emit Hg(0) from biomass burning.
        preindustrial: Preindustrial simulation (no biomass burning Hg).
        gcap_emissions: Alternate GCAP emission inventory is in use; it
            replaces the transpiration emissions.
        snowpack: Snowpack mercury model is active.
        ts_emis: Emission timestep [min].
        n_hg_cats: Number of tagged mercury categories.
        met_source: Name of the registered snow depth source.
        transp_path: Transpiration climatology path, formatted with ``month``.
    """

    model_config = ConfigDict(frozen=True)

    biomass_burning: bool = True
    preindustrial: bool = False
    gcap_emissions: bool = False
    snowpack: bool = True
    ts_emis: float = Field(default=60.0, gt=0.0)  # [min]
    n_hg_cats: int = Field(default=1, ge=1)
    met_source: str = "geos5"
    transp_path: str = "nasatransp_4x5.{month:02d}.bpch"

    @field_validator("met_source")
    @classmethod
    def validate_met_source(cls, v: str) -> str:
        """Require a registered snow depth source."""
        if v not in list_snow_sources():
            available = ", ".join(list_snow_sources())
            msg = f"Unknown met_source '{v}'. Available: {available}"
            raise ValueError(msg)
        return v

    @field_validator("transp_path")
    @classmethod
    def validate_transp_path(cls, v: str) -> str:
        """Require the month placeholder in the transpiration path."""
        if "{month" not in v:
            msg = f"transp_path must contain a {{month}} placeholder, got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def dt(self) -> float:
        """Emission timestep [s]."""
        return self.ts_emis * 60.0

    def snow_depth(self, met: MetFields) -> np.ndarray:
        """Snow water equivalent [mm] from the configured met source."""
        return get_snow_source(self.met_source)(met)


_FLOAT_FIELDS: tuple[str, ...] = ("temperature", "radswg", "suncos", "lai", "snow", "snomas")
_MASK_FIELDS: tuple[str, ...] = ("is_land", "is_ice")


class MetFields(BaseModel):
    """Validated meteorological and surface fields for one emission timestep.

    All arrays are 2D with shape (n_lat, n_lon). Float fields are coerced to
    float64 and NaN values are rejected; masks are coerced to bool.

    Attributes:
        temperature: Surface-layer air temperature [K].
        radswg: Solar radiation at the ground [W/m2].
        suncos: Cosine of the solar zenith angle [-].
        lai: Leaf area index [m2/m2].
        is_land: Land mask.
        is_ice: Ice mask (land ice and sea ice).
        snow: Snow water equivalent from GEOS-4 style products [mm].
        snomas: Snow water equivalent from GEOS-5 [mm].
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    temperature: np.ndarray  # [K]
    radswg: np.ndarray  # [W/m2]
    suncos: np.ndarray  # [-]
    lai: np.ndarray  # [m2/m2]
    is_land: np.ndarray
    is_ice: np.ndarray
    snow: np.ndarray | None = None  # [mm]
    snomas: np.ndarray | None = None  # [mm]

    @field_validator(*_FLOAT_FIELDS, mode="before")
    @classmethod
    def validate_float_field(cls, v: np.ndarray | None, info: ValidationInfo) -> np.ndarray | None:
        """Validate a float field: must be 2D float64 with no NaN values."""
        if v is None:
            return None
        arr = np.ascontiguousarray(v, dtype=np.float64)
        if arr.ndim != 2:
            msg = f"{info.field_name} array must be 2D, got {arr.ndim}D"
            raise ValueError(msg)
        if np.any(np.isnan(arr)):
            msg = f"{info.field_name} array contains NaN values"
            raise ValueError(msg)
        return arr

    @field_validator(*_MASK_FIELDS, mode="before")
    @classmethod
    def validate_mask(cls, v: np.ndarray, info: ValidationInfo) -> np.ndarray:
        """Validate a mask: must be 2D, coerced to bool."""
        arr = np.ascontiguousarray(v, dtype=np.bool_)
        if arr.ndim != 2:
            msg = f"{info.field_name} array must be 2D, got {arr.ndim}D"
            raise ValueError(msg)
        return arr

    @model_validator(mode="after")
    def validate_shapes(self) -> MetFields:
        """Ensure all arrays have the same shape."""
        shape = self.temperature.shape
        for name in (*_FLOAT_FIELDS, *_MASK_FIELDS):
            arr = getattr(self, name)
            if arr is not None and arr.shape != shape:
                msg = f"{name} shape {arr.shape} does not match temperature shape {shape}"
                raise ValueError(msg)
        return self

    @property
    def shape(self) -> tuple[int, int]:
        return self.temperature.shape  # type: ignore[return-value]


@dataclass
class SnowpackState:
    """Hg stored in the snowpack.

    Mutable state owned by the caller. ``snowpack_mercury_flux`` returns a new
    state rather than modifying this one; only one step at a time may use a
    given state.

    Attributes:
        snow_hg: Hg mass in snow and ice [kg], shape (n_lat, n_lon, n_hg_cats).
    """

    snow_hg: np.ndarray  # [kg]

    def __post_init__(self) -> None:
        arr = np.ascontiguousarray(self.snow_hg, dtype=np.float64)
        if arr.ndim != 3:
            msg = f"snow_hg array must be 3D (n_lat, n_lon, n_hg_cats), got {arr.ndim}D"
            raise ValueError(msg)
        self.snow_hg = arr

    @classmethod
    def initialize(cls, shape: tuple[int, int], n_hg_cats: int = 1) -> SnowpackState:
        """Create a state with no Hg in snow."""
        return cls(snow_hg=np.zeros((*shape, n_hg_cats), dtype=np.float64))

    def __array__(self, dtype: np.dtype | None = None) -> np.ndarray:
        """Return the snow Hg array."""
        if dtype is not None:
            return self.snow_hg.astype(dtype)
        return self.snow_hg

    @classmethod
    def from_array(cls, arr: np.ndarray) -> SnowpackState:
        """Reconstruct state from a copy of arr."""
        return cls(snow_hg=np.array(arr, dtype=np.float64))
