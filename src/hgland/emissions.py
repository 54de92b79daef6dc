"""Gridded land emissions of Hg(0).

Entry points computing one flux grid per process for the current emission
timestep:
- biomass_burning_flux(): Biomass burning, scaled from CO emissions
- vegetation_flux(): Transpiration of soil water Hg by plants
- soil_flux(): Light-driven volatilization from snow-free soil
- land_mercury_flux(): Prompt recycling of deposited Hg(II) and Hg(P)
- snowpack_mercury_flux(): Emission from Hg stored in snow and ice

All fluxes are in kg/s per grid box.
"""

# ruff: noqa: SIM108
# SIM108: Ternary operators disabled in Numba functions for clarity

from __future__ import annotations

import logging

import numpy as np
from numba import njit

from hgland.constants import NG_TO_KG, SECONDS_PER_HOUR, SNOW_THRESHOLD
from hgland.deposition import Deposition
from hgland.processes import (
    biomass_burning_hg,
    reemission_fraction,
    snow_decay,
    snow_emission_rate,
    soil_emission,
    vegetation_emission,
)
from hgland.transpiration import TranspirationClimatology
from hgland.types import Grid, LandMercuryConfig, MetFields, SnowpackState

logger = logging.getLogger(__name__)


def _as_field(arr: np.ndarray, shape: tuple[int, ...], name: str) -> np.ndarray:
    """Coerce an input grid to contiguous float64 and check its shape."""
    out = np.ascontiguousarray(arr, dtype=np.float64)
    if out.shape != shape:
        msg = f"{name} shape {out.shape} does not match expected {shape}"
        raise ValueError(msg)
    return out


def _check_met(met: MetFields, grid: Grid) -> None:
    if met.shape != grid.shape:
        msg = f"met shape {met.shape} does not match grid shape {grid.shape}"
        raise ValueError(msg)


@njit(cache=True)
def _biomass_burning_grid(co_emission: np.ndarray, area_cm2: np.ndarray, out: np.ndarray) -> None:
    n_lat, n_lon = co_emission.shape
    for j in range(n_lat):
        for i in range(n_lon):
            out[j, i] = biomass_burning_hg(co_emission[j, i], area_cm2[j])


@njit(cache=True)
def _vegetation_grid(
    redistribution: np.ndarray,
    transp: np.ndarray,
    is_land: np.ndarray,
    area_m2: np.ndarray,
    out: np.ndarray,
) -> None:
    n_lat, n_lon = redistribution.shape
    for j in range(n_lat):
        for i in range(n_lon):
            if is_land[j, i]:
                # ng/m2/s -> kg/gridbox/s
                out[j, i] = vegetation_emission(redistribution[j, i], transp[j, i]) * area_m2[j] * NG_TO_KG
            else:
                out[j, i] = 0.0


@njit(cache=True)
def _soil_grid(
    redistribution: np.ndarray,
    radswg: np.ndarray,
    lai: np.ndarray,
    suncos: np.ndarray,
    snow_depth: np.ndarray,
    is_land: np.ndarray,
    area_m2: np.ndarray,
    out: np.ndarray,
) -> None:
    n_lat, n_lon = redistribution.shape
    for j in range(n_lat):
        for i in range(n_lon):
            if is_land[j, i] and snow_depth[j, i] < SNOW_THRESHOLD:
                emis = soil_emission(redistribution[j, i], radswg[j, i], lai[j, i], suncos[j, i])
                # ng/m2/h -> kg/gridbox/s
                out[j, i] = emis * area_m2[j] * NG_TO_KG / SECONDS_PER_HOUR
            else:
                out[j, i] = 0.0


@njit(cache=True)
def _prompt_recycling_grid(
    deposition: np.ndarray,
    snow_depth: np.ndarray,
    is_land: np.ndarray,
    is_ice: np.ndarray,
    snowpack: bool,
    dt: float,
    out: np.ndarray,
) -> None:
    n_lat, n_lon, n_cats = deposition.shape
    for j in range(n_lat):
        for i in range(n_lon):
            if is_land[j, i] or is_ice[j, i]:
                frac = reemission_fraction(snow_depth[j, i], is_ice[j, i], snowpack)
                for nn in range(n_cats):
                    # kg/timestep -> kg/s
                    out[j, i, nn] = deposition[j, i, nn] * frac / dt
            else:
                for nn in range(n_cats):
                    out[j, i, nn] = 0.0


@njit(cache=True)
def _snowpack_grid(
    snow_hg: np.ndarray,  # Modified in place
    temperature: np.ndarray,
    suncos: np.ndarray,
    dt: float,
    out: np.ndarray,
) -> None:
    n_lat, n_lon, n_cats = snow_hg.shape
    for j in range(n_lat):
        for i in range(n_lon):
            # No emission after sunset
            if suncos[j, i] < 0.0:
                continue
            k_emit = snow_emission_rate(temperature[j, i])
            for nn in range(n_cats):
                if snow_hg[j, i, nn] > 0.0:
                    flux, new_mass = snow_decay(snow_hg[j, i, nn], k_emit, dt)
                    out[j, i, nn] = flux
                    snow_hg[j, i, nn] = new_mass


def biomass_burning_flux(co_emission: np.ndarray, grid: Grid, config: LandMercuryConfig) -> np.ndarray:
    """Compute Hg(0) emissions from biomass burning.

    Emissions scale the CO biomass burning inventory (Duncan et al., 2003) by
    the Hg/CO ratio of biomass burning plumes (Slemr, EGU 2006). They are
    only emitted in present-day simulations with biomass burning on.

    Args:
        co_emission: CO emission [molec/cm3/s], shape (n_lat, n_lon).
        grid: Model grid.
        config: Run configuration.

    Returns:
        Hg(0) emission [kg/s], shape (n_lat, n_lon).
    """
    out = np.zeros(grid.shape, dtype=np.float64)
    if not config.biomass_burning or config.preindustrial:
        logger.debug(
            "Biomass burning Hg off (biomass_burning=%s, preindustrial=%s)",
            config.biomass_burning,
            config.preindustrial,
        )
        return out

    co = _as_field(co_emission, grid.shape, "co_emission")
    _biomass_burning_grid(co, grid.area_cm2, out)
    return out


def vegetation_flux(
    redistribution: np.ndarray,
    met: MetFields,
    grid: Grid,
    transpiration: TranspirationClimatology,
    month: int,
    config: LandMercuryConfig,
) -> np.ndarray:
    """Compute Hg(0) emissions from vegetation by evapotranspiration.

    The soil Hg concentration is the preindustrial global mean (45 ng/g)
    scaled by the redistribution factor, which follows the deposition pattern
    and carries the present-day anthropogenic enhancement. The transpiration
    climatology is reloaded when ``month`` differs from the loaded month.

    Args:
        redistribution: Soil Hg redistribution factor [-], global mean 1.
        met: Meteorological fields (land mask used).
        grid: Model grid.
        transpiration: Transpiration climatology owner.
        month: Current calendar month (1-12).
        config: Run configuration.

    Returns:
        Hg(0) emission [kg/s], shape (n_lat, n_lon). Zero over water and ice,
        and everywhere when GCAP emissions are used.
    """
    out = np.zeros(grid.shape, dtype=np.float64)
    if config.gcap_emissions:
        logger.debug("Vegetation Hg off: GCAP emissions in use")
        return out

    _check_met(met, grid)
    dist = _as_field(redistribution, grid.shape, "redistribution")
    transpiration.update(month)
    if transpiration.values.shape != grid.shape:
        msg = f"transpiration shape {transpiration.values.shape} does not match grid shape {grid.shape}"
        raise ValueError(msg)

    _vegetation_grid(dist, transpiration.values, met.is_land, grid.area_m2, out)
    return out


def soil_flux(
    redistribution: np.ndarray,
    met: MetFields,
    grid: Grid,
    config: LandMercuryConfig,
) -> np.ndarray:
    """Compute Hg(0) emissions from soils.

    Emission depends on the solar radiation reaching the ground under the
    leaf canopy and on the soil Hg concentration, scaled so that preindustrial
    soil emission balances deposition to soil. Snow of 1 mm water equivalent
    or more shuts off soil emission.

    Args:
        redistribution: Soil Hg redistribution factor [-], global mean 1.
        met: Meteorological fields (radswg, lai, suncos, masks, snow).
        grid: Model grid.
        config: Run configuration (selects the snow depth source).

    Returns:
        Hg(0) emission [kg/s], shape (n_lat, n_lon).
    """
    out = np.zeros(grid.shape, dtype=np.float64)
    _check_met(met, grid)
    dist = _as_field(redistribution, grid.shape, "redistribution")
    snow_depth = _as_field(config.snow_depth(met), grid.shape, "snow_depth")

    _soil_grid(dist, met.radswg, met.lai, met.suncos, snow_depth, met.is_land, grid.area_m2, out)

    logger.debug("Soil Hg(0) emission total: %.3g kg/s", out.sum())
    return out


def land_mercury_flux(deposition: Deposition, met: MetFields, config: LandMercuryConfig) -> np.ndarray:
    """Compute Hg(0) emissions from prompt recycling of deposited Hg.

    A fraction of the Hg(II) and Hg(P) deposited over the last emission
    timestep is re-emitted: 0.2 from snow-free land, 0.6 from snow (> 1 mm)
    and ice, and none from snow and ice when the snowpack model stores it.
    Ice surfaces, including sea ice, re-emit; open water does not.

    Args:
        deposition: Deposition accumulated over the timestep [kg].
        met: Meteorological fields (masks and snow).
        config: Run configuration.

    Returns:
        Hg(0) emission [kg/s], shape (n_lat, n_lon, n_hg_cats).
    """
    total = deposition.total()
    shape = met.shape
    if total.shape[:2] != shape:
        msg = f"deposition shape {total.shape} does not match met shape {shape}"
        raise ValueError(msg)
    snow_depth = _as_field(config.snow_depth(met), shape, "snow_depth")

    out = np.zeros(total.shape, dtype=np.float64)
    _prompt_recycling_grid(total, snow_depth, met.is_land, met.is_ice, config.snowpack, config.dt, out)
    return out


def snowpack_mercury_flux(
    state: SnowpackState,
    met: MetFields,
    config: LandMercuryConfig,
) -> tuple[SnowpackState, np.ndarray]:
    """Compute Hg(0) emission from Hg stored in snow and ice.

    Emission is first order in the snow Hg mass, with a 180 d lifetime below
    270 K and 7 d above, matching the emission time scales seen in the Arctic
    and in field studies (Holmes et al., 2010). There is no emission while the
    sun is below the horizon.

    Args:
        state: Current snowpack state. Not modified.
        met: Meteorological fields (temperature, suncos).
        config: Run configuration.

    Returns:
        Tuple of (new_state, flux):
        - new_state: Snowpack state after emission
        - flux: Hg(0) emission [kg/s], shape (n_lat, n_lon, n_hg_cats)
    """
    flux = np.zeros(state.snow_hg.shape, dtype=np.float64)
    if not config.snowpack:
        logger.debug("Snowpack Hg model off")
        return state, flux

    if state.snow_hg.shape[:2] != met.shape:
        msg = f"snow_hg shape {state.snow_hg.shape} does not match met shape {met.shape}"
        raise ValueError(msg)

    snow_hg = state.snow_hg.copy()
    _snowpack_grid(snow_hg, met.temperature, met.suncos, config.dt, flux)
    return SnowpackState(snow_hg=snow_hg), flux
