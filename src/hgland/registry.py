"""Snow depth source registry for hgland.

Meteorological products report snow water equivalent in different fields
(GEOS-4 and earlier use SNOW, GEOS-5 uses SNOMAS). Each supported product is
registered here under a name and selected once through
``LandMercuryConfig.met_source``.

A snow depth source is a callable taking ``MetFields`` and returning the snow
water equivalent grid [mm] with shape (n_lat, n_lon).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from hgland.types import MetFields

logger = logging.getLogger(__name__)

SnowDepthSource = Callable[["MetFields"], np.ndarray]

# Global registry: {name: source}
_sources: dict[str, SnowDepthSource] = {}


def register(name: str, source: SnowDepthSource) -> None:
    """Register a snow depth source under the given name.

    Args:
        name: Unique name used in configuration (e.g., "geos5").
        source: Callable returning snow water equivalent [mm].

    Raises:
        ValueError: If the name is already registered.
        TypeError: If source is not callable.
    """
    if name in _sources:
        msg = f"Snow depth source '{name}' is already registered"
        raise ValueError(msg)
    if not callable(source):
        msg = f"Snow depth source '{name}' must be callable"
        raise TypeError(msg)

    _sources[name] = source
    logger.debug("Registered snow depth source '%s'", name)


def get_snow_source(name: str) -> SnowDepthSource:
    """Return the snow depth source registered under name.

    Raises:
        KeyError: If no source is registered under that name.
    """
    if name not in _sources:
        available = ", ".join(sorted(_sources)) or "none"
        msg = f"Unknown snow depth source '{name}'. Available: {available}"
        raise KeyError(msg)
    return _sources[name]


def list_snow_sources() -> list[str]:
    """Return the sorted names of all registered snow depth sources."""
    return sorted(_sources)


def _required(field: np.ndarray | None, name: str, source: str) -> np.ndarray:
    if field is None:
        msg = f"Snow depth source '{source}' requires MetFields.{name}"
        raise ValueError(msg)
    return field


def _geos5_snow(met: MetFields) -> np.ndarray:
    # GEOS-5 SNOMAS is water equivalent in mm (product docs wrongly say m)
    return _required(met.snomas, "snomas", "geos5")


def _geos4_snow(met: MetFields) -> np.ndarray:
    return _required(met.snow, "snow", "geos4")


register("geos5", _geos5_snow)
register("geos4", _geos4_snow)
