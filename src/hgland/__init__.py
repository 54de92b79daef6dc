"""hgland land mercury emission package.

Land surface emissions of elemental mercury for a global chemistry-transport
model: biomass burning, vegetation, soil, prompt recycling of deposition and
snowpack re-emission, plus a driver for the GTMM land model and a reader and
writer for binary punch (bpch) files.
"""

from hgland.bpch import (
    BpchDecodeError,
    BpchHeader,
    BpchRecord,
    DimensionMismatchError,
    get_tau0,
    iter_records,
    read_field,
    read_records,
    write_bpch,
)
from hgland.deposition import Deposition, GTMMDeposition
from hgland.emissions import (
    biomass_burning_flux,
    land_mercury_flux,
    snowpack_mercury_flux,
    soil_flux,
    vegetation_flux,
)
from hgland.gtmm import GTMMMetFields, GTMMModel, gtmm_flux, read_gtmm_met_fields
from hgland.outputs import LandEmissions
from hgland.registry import get_snow_source, list_snow_sources
from hgland.registry import register as register_snow_source
from hgland.run import step
from hgland.transpiration import TranspirationClimatology
from hgland.types import Grid, LandMercuryConfig, MetFields, SnowpackState

__all__ = [
    "BpchDecodeError",
    "BpchHeader",
    "BpchRecord",
    "Deposition",
    "DimensionMismatchError",
    "GTMMDeposition",
    "GTMMMetFields",
    "GTMMModel",
    "Grid",
    "LandEmissions",
    "LandMercuryConfig",
    "MetFields",
    "SnowpackState",
    "TranspirationClimatology",
    "biomass_burning_flux",
    "get_snow_source",
    "get_tau0",
    "gtmm_flux",
    "iter_records",
    "land_mercury_flux",
    "list_snow_sources",
    "read_field",
    "read_gtmm_met_fields",
    "read_records",
    "register_snow_source",
    "snowpack_mercury_flux",
    "soil_flux",
    "step",
    "vegetation_flux",
    "write_bpch",
]
