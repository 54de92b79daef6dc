"""Structured output of the land emissions for one timestep."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

__all__ = ["LandEmissions"]


@dataclass(frozen=True)
class LandEmissions:
    """Land Hg(0) emissions for one emission timestep.

    Attributes:
        biomass: Biomass burning [kg/s], shape (n_lat, n_lon).
        vegetation: Transpiration [kg/s], shape (n_lat, n_lon).
        soil: Soil volatilization [kg/s], shape (n_lat, n_lon).
        prompt_recycling: Re-emission of deposited Hg [kg/s],
            shape (n_lat, n_lon, n_hg_cats).
        snowpack: Emission from snow and ice [kg/s],
            shape (n_lat, n_lon, n_hg_cats).
    """

    biomass: np.ndarray
    vegetation: np.ndarray
    soil: np.ndarray
    prompt_recycling: np.ndarray
    snowpack: np.ndarray

    @property
    def total(self) -> np.ndarray:
        """Total Hg(0) emission [kg/s] summed over processes and categories."""
        return (
            self.biomass
            + self.vegetation
            + self.soil
            + self.prompt_recycling.sum(axis=-1)
            + self.snowpack.sum(axis=-1)
        )

    def to_dict(self) -> dict[str, np.ndarray]:
        """Convert to a dictionary of flux grids keyed by process."""
        return {
            "biomass": self.biomass,
            "vegetation": self.vegetation,
            "soil": self.soil,
            "prompt_recycling": self.prompt_recycling,
            "snowpack": self.snowpack,
        }

    def totals(self) -> pd.Series:
        """Global emission per process [kg/s].

        Returns:
            Series indexed by process name, plus a ``total`` entry.
        """
        sums = {name: float(np.sum(grid)) for name, grid in self.to_dict().items()}
        sums["total"] = sum(sums.values())
        series = pd.Series(sums, name="hg0_emission")
        series.index.name = "process"
        return series
