"""Monthly plant transpiration climatology.

Transpiration is read from the NASA climatology of Mintz and Walker (1993),
"Global fields of soil moisture and land surface evapotranspiration derived
from observed precipitation and surface air temperature", J. Appl. Meteorol.
32 (8), 1305-1334. One bpch file per calendar month holds the field in
mm/month; it is kept in memory as m/s until the month changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

import numpy as np

from hgland.bpch import get_tau0, read_field
from hgland.constants import MM_PER_MONTH_TO_M_PER_S, TRANSP_CLIMATOLOGY_YEAR
from hgland.types import Grid, LandMercuryConfig

logger = logging.getLogger(__name__)

TRANSP_CATEGORY: str = "TRANSP-$"
TRANSP_TRACER: int = 1


class TranspirationClimatology:
    """Owner of the transpiration grid [m/s] for the current month.

    The grid is allocated and zero-filled on construction and released by
    ``close()`` (or on leaving a ``with`` block). Using the object after
    ``close()`` is not supported.

    Args:
        grid: Model grid; the buffer has shape grid.shape.
        path_template: Climatology file path, formatted with ``month``
            (e.g. ``"nasatransp_4x5.{month:02d}.bpch"``).
    """

    def __init__(self, grid: Grid, path_template: str | Path) -> None:
        self.grid = grid
        self.path_template = str(path_template)
        self.month: int | None = None
        try:
            self._transp: np.ndarray | None = np.zeros(grid.shape, dtype=np.float64)
        except MemoryError as e:
            raise MemoryError(f"Allocation error in array: TRANSP {grid.shape}") from e

    @classmethod
    def from_config(cls, grid: Grid, config: LandMercuryConfig) -> TranspirationClimatology:
        """Create the climatology reading from ``config.transp_path``."""
        return cls(grid, config.transp_path)

    @property
    def values(self) -> np.ndarray:
        """Transpiration rate [m/s], shape (n_lat, n_lon)."""
        if self._transp is None:
            msg = "TranspirationClimatology has been closed"
            raise RuntimeError(msg)
        return self._transp

    @property
    def closed(self) -> bool:
        return self._transp is None

    def path_for(self, month: int) -> Path:
        """Climatology file for a calendar month."""
        return Path(self.path_template.format(month=month))

    def load(self, month: int) -> None:
        """Read the climatology for a calendar month into the buffer.

        Args:
            month: Calendar month (1-12).

        Raises:
            ValueError: If month is outside 1-12.
            FileNotFoundError: If the month's file does not exist.
            BpchDecodeError: If the file is malformed or lacks the record.
        """
        if not 1 <= month <= 12:
            msg = f"month must be in 1-12, got {month}"
            raise ValueError(msg)

        filename = self.path_for(month)
        logger.info("TRANSP_NASA: Reading %s", filename)

        field = read_field(
            filename,
            TRANSP_CATEGORY,
            TRANSP_TRACER,
            get_tau0(month, 1, TRANSP_CLIMATOLOGY_YEAR),
            self.grid.shape,
            location="read_nasa_transp",
        )

        # mm/month -> m/s
        self.values[...] = field * MM_PER_MONTH_TO_M_PER_S
        self.month = month

    def update(self, month: int) -> bool:
        """Load the climatology if it is not already loaded for this month.

        Returns:
            True if the file was read.
        """
        if self.month == month:
            return False
        self.load(month)
        return True

    def close(self) -> None:
        """Release the transpiration buffer."""
        self._transp = None
        self.month = None

    def __enter__(self) -> TranspirationClimatology:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
