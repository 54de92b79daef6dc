"""Tests for the LandEmissions output dataclass."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from hgland.outputs import LandEmissions


@pytest.fixture
def emissions() -> LandEmissions:
    shape = (2, 2)
    return LandEmissions(
        biomass=np.full(shape, 1.0),
        vegetation=np.full(shape, 2.0),
        soil=np.zeros(shape),
        prompt_recycling=np.full((*shape, 2), 0.5),
        snowpack=np.full((*shape, 2), 0.25),
    )


class TestLandEmissions:
    """Tests for LandEmissions."""

    def test_is_frozen(self, emissions: LandEmissions) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            emissions.soil = np.ones((2, 2))  # type: ignore[misc]

    def test_total_sums_categories(self, emissions: LandEmissions) -> None:
        # 1 + 2 + 0 + 2 * 0.5 + 2 * 0.25
        np.testing.assert_allclose(emissions.total, np.full((2, 2), 4.5))

    def test_to_dict(self, emissions: LandEmissions) -> None:
        d = emissions.to_dict()
        assert list(d) == ["biomass", "vegetation", "soil", "prompt_recycling", "snowpack"]
        assert d["snowpack"] is emissions.snowpack

    def test_totals(self, emissions: LandEmissions) -> None:
        totals = emissions.totals()

        assert totals.name == "hg0_emission"
        assert totals.index.name == "process"
        assert totals["biomass"] == pytest.approx(4.0)
        assert totals["prompt_recycling"] == pytest.approx(4.0)
        assert totals["total"] == pytest.approx(18.0)
