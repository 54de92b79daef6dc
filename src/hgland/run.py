"""Land mercury emission orchestration.

This module provides the main entry point for computing all land Hg(0)
emissions for one emission timestep:
- step(): Run every emission process and advance the snowpack state
"""

from __future__ import annotations

import logging

import numpy as np

from hgland.deposition import Deposition
from hgland.emissions import (
    biomass_burning_flux,
    land_mercury_flux,
    snowpack_mercury_flux,
    soil_flux,
    vegetation_flux,
)
from hgland.outputs import LandEmissions
from hgland.transpiration import TranspirationClimatology
from hgland.types import Grid, LandMercuryConfig, MetFields, SnowpackState

logger = logging.getLogger(__name__)


def step(
    state: SnowpackState,
    config: LandMercuryConfig,
    grid: Grid,
    met: MetFields,
    deposition: Deposition,
    co_emission: np.ndarray,
    redistribution: np.ndarray,
    transpiration: TranspirationClimatology,
    month: int,
) -> tuple[SnowpackState, LandEmissions]:
    """Execute one emission timestep of the land mercury emissions.

    Algorithm steps:
    1. Biomass burning from the CO inventory
    2. Vegetation transpiration (reloads the climatology on a new month)
    3. Soil volatilization
    4. Prompt recycling of the deposition accumulated this timestep
    5. Snowpack emission, returning the decayed snowpack state

    Args:
        state: Current snowpack state.
        config: Run configuration.
        grid: Model grid.
        met: Meteorological fields for the timestep.
        deposition: Deposition accumulated over the timestep [kg].
        co_emission: Biomass burning CO emission [molec/cm3/s].
        redistribution: Soil Hg redistribution factor [-].
        transpiration: Transpiration climatology owner.
        month: Current calendar month (1-12).

    Returns:
        Tuple of (new_state, emissions).
    """
    if met.shape != grid.shape:
        msg = f"met shape {met.shape} does not match grid shape {grid.shape}"
        raise ValueError(msg)
    if deposition.shape[2] != config.n_hg_cats or state.snow_hg.shape[2] != config.n_hg_cats:
        msg = (
            f"deposition has {deposition.shape[2]} and snowpack {state.snow_hg.shape[2]} "
            f"categories, config expects {config.n_hg_cats}"
        )
        raise ValueError(msg)

    biomass = biomass_burning_flux(co_emission, grid, config)
    vegetation = vegetation_flux(redistribution, met, grid, transpiration, month, config)
    soil = soil_flux(redistribution, met, grid, config)
    prompt = land_mercury_flux(deposition, met, config)
    new_state, snowpack = snowpack_mercury_flux(state, met, config)

    emissions = LandEmissions(
        biomass=biomass,
        vegetation=vegetation,
        soil=soil,
        prompt_recycling=prompt,
        snowpack=snowpack,
    )
    logger.debug("Land Hg(0) emission total: %.3g kg/s", float(emissions.total.sum()))
    return new_state, emissions
