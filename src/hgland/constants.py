"""Land mercury numerical constants.

Physical constants, empirical emission factors and thresholds used by the
land emission calculators. Values follow Selin et al. (GBC 2008) and
Holmes et al. (2010) unless noted.
"""

# Physical constants
AVOGADRO: float = 6.022e23  # [molec/mol]
FMOL_HG: float = 200.59e-3  # Hg molar mass [kg/mol]
EARTH_RADIUS: float = 6.375e6  # [m]

# Biomass burning
# Hg/CO molar ratio in biomass burning plumes. Slemr (EGU 2006) gives a best
# estimate of 1.5e-7; the top of the range is used to sustain atmospheric Hg(0).
BB_RATIO_HG_CO: float = 2.1e-7  # [mol Hg/mol CO]

# Soil mercury
DRYSOIL_PREIND_HG: float = 45.0  # Preindustrial global mean soil Hg [ng/g]
KD: float = 6.31e-3  # Soil Hg sorbed/dissolved ratio, log Kd = 3.8 L/kg [m3/g]
SOIL_EMIS_FAC: float = 2.4e-2  # Tuned soil emission scale for the light function [g soil/m2/h]
SOIL_LIGHT_COEF: float = 0.0011  # Radiation dependence of soil emission [m2/W]
CANOPY_EXTINCTION: float = 0.5  # Jacob and Wofsy (1990) attenuation per unit LAI [-]
MIN_SUNCOS: float = 0.09  # Cosine floor, same attenuation as SZA = 85 deg [-]

# Snow
SNOW_THRESHOLD: float = 1.0  # Snow water equivalent that counts as snow cover [mm]
T_SNOW_FAST: float = 270.0  # Temperature above which snow Hg is emitted quickly [K]
K_EMIT_FAST: float = 1.6e-6  # ~7 day lifetime [1/s]
K_EMIT_SLOW: float = 6e-8  # ~180 day lifetime, Alert cycle (Steffen et al. 2008) [1/s]

# Prompt recycling re-emission fractions
REEMFRAC_SNOWPACK: float = 0.0  # Snow or ice with the snowpack model on [-]
REEMFRAC_SNOW: float = 0.6  # Snow or ice with the snowpack model off [-]
REEMFRAC_LAND: float = 0.2  # Snow-free land [-]

# Unit conversions
NG_TO_KG: float = 1e-12
SECONDS_PER_HOUR: float = 3600.0
# mm/month -> m/s, using a 365-day year of twelve equal months
MM_PER_MONTH_TO_M_PER_S: float = 1e-3 * 12.0 / (365.0 * 24.0 * 60.0 * 60.0)

# Transpiration climatology reference year for the record time stamp
TRANSP_CLIMATOLOGY_YEAR: int = 1995
