"""Integration tests for one land emission timestep and its outputs."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from hgland.bpch import BpchRecord, get_tau0, write_bpch
from hgland.deposition import Deposition
from hgland.outputs import LandEmissions
from hgland.run import step
from hgland.transpiration import TranspirationClimatology
from hgland.types import Grid, LandMercuryConfig, MetFields, SnowpackState

SHAPE = (2, 3)
MONTH = 4


@pytest.fixture
def grid() -> Grid:
    return Grid(area_m2=np.array([1e10, 2e10]), n_lon=SHAPE[1])


@pytest.fixture
def config(tmp_path: Path) -> LandMercuryConfig:
    return LandMercuryConfig(transp_path=str(tmp_path / "nasatransp_4x5.{month:02d}.bpch"))


@pytest.fixture
def transpiration(tmp_path: Path, grid: Grid, config: LandMercuryConfig) -> TranspirationClimatology:
    record = BpchRecord.create(
        "TRANSP-$", 1, np.full(SHAPE, 50.0), unit="mm", tau0=get_tau0(MONTH, 1, 1995)
    )
    write_bpch(config.transp_path.format(month=MONTH), [record])
    with TranspirationClimatology.from_config(grid, config) as transp:
        yield transp


@pytest.fixture
def met() -> MetFields:
    """Left column is snow-covered, middle column is water, right is bare land."""
    snow = np.array([[10.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
    land = np.array([[True, False, True], [True, False, True]])
    return MetFields(
        temperature=np.full(SHAPE, 275.0),
        radswg=np.full(SHAPE, 300.0),
        suncos=np.full(SHAPE, 0.5),
        lai=np.full(SHAPE, 1.0),
        is_land=land,
        is_ice=np.zeros(SHAPE, dtype=bool),
        snomas=snow,
    )


@pytest.fixture
def deposition() -> Deposition:
    deposition = Deposition.zeros(SHAPE)
    deposition.add_dry_hg2(3.6)
    return deposition


def _run(config, grid, met, deposition, transpiration, state=None):  # noqa: ANN001, ANN202
    state = state if state is not None else SnowpackState(snow_hg=np.full((*SHAPE, 1), 1.0))
    return step(
        state,
        config,
        grid,
        met,
        deposition,
        co_emission=np.full(SHAPE, 1e10),
        redistribution=np.ones(SHAPE),
        transpiration=transpiration,
        month=MONTH,
    )


class TestStep:
    """Tests for a full emission timestep."""

    def test_all_processes(self, config, grid, met, deposition, transpiration) -> None:  # noqa: ANN001
        new_state, emissions = _run(config, grid, met, deposition, transpiration)

        assert isinstance(emissions, LandEmissions)
        assert transpiration.month == MONTH

        # Biomass burning everywhere, water included
        assert np.all(emissions.biomass > 0.0)
        # Vegetation and prompt recycling on land only
        assert np.all(emissions.vegetation[:, 1] == 0.0)
        assert np.all(emissions.vegetation[:, [0, 2]] > 0.0)
        # Soil emission blocked by snow
        assert np.all(emissions.soil[:, 0] == 0.0)
        assert np.all(emissions.soil[:, 2] > 0.0)
        # Snowpack model on: no prompt recycling from snow, 0.2 from bare land
        assert np.all(emissions.prompt_recycling[:, 0, 0] == 0.0)
        np.testing.assert_allclose(emissions.prompt_recycling[:, 2, 0], 0.2 * 3.6 / 3600.0)
        # Snowpack decays in daylight
        assert np.all(emissions.snowpack > 0.0)
        assert np.all(new_state.snow_hg < 1.0)

    def test_total(self, config, grid, met, deposition, transpiration) -> None:  # noqa: ANN001
        _, emissions = _run(config, grid, met, deposition, transpiration)

        expected = (
            emissions.biomass
            + emissions.vegetation
            + emissions.soil
            + emissions.prompt_recycling[:, :, 0]
            + emissions.snowpack[:, :, 0]
        )
        np.testing.assert_allclose(emissions.total, expected)

    def test_totals_series(self, config, grid, met, deposition, transpiration) -> None:  # noqa: ANN001
        _, emissions = _run(config, grid, met, deposition, transpiration)
        totals = emissions.totals()

        assert isinstance(totals, pd.Series)
        assert list(totals.index) == ["biomass", "vegetation", "soil", "prompt_recycling", "snowpack", "total"]
        assert totals["total"] == pytest.approx(emissions.total.sum())
        assert totals["soil"] == pytest.approx(emissions.soil.sum())

    def test_state_carried_between_steps(self, config, grid, met, deposition, transpiration) -> None:  # noqa: ANN001
        first_state, _ = _run(config, grid, met, deposition, transpiration)
        second_state, _ = _run(config, grid, met, deposition, transpiration, state=first_state)
        assert np.all(second_state.snow_hg < first_state.snow_hg)

    def test_rejects_category_mismatch(self, grid, met, deposition, transpiration, tmp_path) -> None:  # noqa: ANN001
        config = LandMercuryConfig(n_hg_cats=2, transp_path=str(tmp_path / "t.{month:02d}.bpch"))
        with pytest.raises(ValueError, match="categories"):
            _run(config, grid, met, deposition, transpiration)

    def test_rejects_grid_mismatch(self, config, met, deposition, transpiration) -> None:  # noqa: ANN001
        other = Grid(area_m2=np.ones(3), n_lon=3)
        with pytest.raises(ValueError, match="met shape"):
            _run(config, other, met, deposition, transpiration)
