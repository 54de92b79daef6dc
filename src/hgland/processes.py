"""Land mercury process functions.

Numba-compiled per-cell functions implementing the biomass burning, soil and
vegetation emission formulas, the prompt recycling re-emission fraction and
the snowpack decay.
"""

import math

from numba import njit

from hgland.constants import (
    AVOGADRO,
    BB_RATIO_HG_CO,
    CANOPY_EXTINCTION,
    DRYSOIL_PREIND_HG,
    FMOL_HG,
    K_EMIT_FAST,
    K_EMIT_SLOW,
    KD,
    MIN_SUNCOS,
    REEMFRAC_LAND,
    REEMFRAC_SNOW,
    REEMFRAC_SNOWPACK,
    SNOW_THRESHOLD,
    SOIL_EMIS_FAC,
    SOIL_LIGHT_COEF,
    T_SNOW_FAST,
)


@njit(cache=True)
def biomass_burning_hg(co_emission: float, area_cm2: float) -> float:
    """Convert a CO biomass burning emission to an Hg(0) emission.

    Args:
        co_emission: CO emission [molec/cm3/s] (column-integrated per cm2).
        area_cm2: Grid box surface area [cm2].

    Returns:
        Hg(0) emission [kg/s].
    """
    # molec CO/cm3/s -> mol CO/gridbox/s
    e_co = co_emission / AVOGADRO * area_cm2
    return e_co * BB_RATIO_HG_CO * FMOL_HG


@njit(cache=True)
def soil_hg_concentration(redistribution: float) -> float:
    """Dry soil Hg concentration [ng/g] from the deposition redistribution factor."""
    return DRYSOIL_PREIND_HG * redistribution


@njit(cache=True)
def vegetation_emission(redistribution: float, transp: float) -> float:
    """Compute the Hg(0) flux through plant transpiration.

    Follows Xu et al. (1999): Fc = Ec * Cw, with the soil water concentration
    Cw = Cs / Kd in equilibrium with the soil solids (Allison and Allison, 2005).

    Args:
        redistribution: Soil Hg redistribution factor [-].
        transp: Canopy transpiration [m/s].

    Returns:
        Hg(0) flux [ng/m2/s].
    """
    soilwater_hg = soil_hg_concentration(redistribution) / KD
    return soilwater_hg * transp


@njit(cache=True)
def light_fraction(lai: float, suncos: float) -> float:
    """Fraction of solar radiation reaching the soil under a canopy.

    Jacob and Wofsy (1990) eq. 8-9. Below-horizon and grazing sun use the
    attenuation of a cosine of MIN_SUNCOS.
    """
    tauz = lai * CANOPY_EXTINCTION
    return math.exp(-tauz / max(suncos, MIN_SUNCOS))


@njit(cache=True)
def soil_emission(redistribution: float, radswg: float, lai: float, suncos: float) -> float:
    """Compute the Hg(0) flux volatilized from soil.

    Radiation dependence from Zhang et al. (2000) times the soil Hg
    concentration, scaled to the preindustrial soil budget. The temperature
    factor of Poissant and Casimir (1998) is not applied.

    Args:
        redistribution: Soil Hg redistribution factor [-].
        radswg: Solar radiation at the ground [W/m2].
        lai: Leaf area index [m2/m2].
        suncos: Cosine of the solar zenith angle [-].

    Returns:
        Hg(0) flux [ng/m2/h].
    """
    lightfrac = light_fraction(lai, suncos)
    return math.exp(SOIL_LIGHT_COEF * radswg * lightfrac) * soil_hg_concentration(redistribution) * SOIL_EMIS_FAC


@njit(cache=True)
def reemission_fraction(snow_depth: float, is_ice: bool, snowpack: bool) -> float:
    """Fraction of deposited Hg promptly re-emitted as Hg(0).

    Args:
        snow_depth: Snow water equivalent [mm].
        is_ice: Whether the surface is ice.
        snowpack: Whether the snowpack model stores deposition on snow.

    Returns:
        Re-emission fraction [-].
    """
    if snow_depth > SNOW_THRESHOLD or is_ice:
        if snowpack:
            return REEMFRAC_SNOWPACK
        return REEMFRAC_SNOW
    return REEMFRAC_LAND


@njit(cache=True)
def snow_emission_rate(temperature: float) -> float:
    """First-order Hg(0) emission rate constant from snow [1/s].

    Lifetime is 180 d below T_SNOW_FAST and 7 d above (Holmes et al., 2010).
    """
    if temperature > T_SNOW_FAST:
        return K_EMIT_FAST
    return K_EMIT_SLOW


@njit(cache=True)
def snow_decay(snow_hg: float, k_emit: float, dt: float) -> tuple[float, float]:
    """Decay the snowpack Hg mass over one timestep.

    Args:
        snow_hg: Hg mass stored in snow [kg].
        k_emit: Emission rate constant [1/s].
        dt: Timestep [s].

    Returns:
        Tuple of (flux, new_snow_hg):
        - flux: Hg(0) emission [kg/s], non-negative
        - new_snow_hg: Remaining Hg mass in snow [kg]
    """
    new_snow_hg = snow_hg * math.exp(-k_emit * dt)
    flux = max(snow_hg - new_snow_hg, 0.0) / dt
    return flux, new_snow_hg
