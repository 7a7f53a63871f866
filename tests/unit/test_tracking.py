"""
Tests for pass progress tracking and Doppler correction.
"""

import copy

import pytest

from sat_predictor.models import SPEED_OF_LIGHT_MPS, SatPass, SatRadio
from sat_predictor.tracking import correct_radios, pass_progress, update_progress


def make_pass(satellite, aos=1_000, los=11_000, progress=0):
    return SatPass(
        aos_time=aos,
        aos_azimuth=10.0,
        los_time=los,
        los_azimuth=200.0,
        tca_time=(aos + los) // 2,
        tca_azimuth=100.0,
        altitude=500.0,
        max_elevation=45.0,
        satellite=satellite,
        progress=progress,
    )


@pytest.fixture
def radios():
    return [
        SatRadio(uuid="fm", info="FM transponder", downlink=145_800_000, uplink=437_800_000, mode="FM"),
        SatRadio(uuid="beacon", info="CW beacon", downlink=435_790_000, mode="CW"),
        SatRadio(uuid="uplink-only", uplink=145_900_000, is_inverted=True),
        SatRadio(uuid="dead", is_alive=False),
    ]


class TestPassProgress:
    """Tests for progress computation."""

    def test_halfway(self, leo_satellite) -> None:
        assert pass_progress(make_pass(leo_satellite), 6_000) == 50

    def test_floor(self, leo_satellite) -> None:
        assert pass_progress(make_pass(leo_satellite), 1_999) == 9

    def test_exactly_complete_at_los(self, leo_satellite) -> None:
        assert pass_progress(make_pass(leo_satellite), 11_000) == 100

    def test_clamped_after_los(self, leo_satellite) -> None:
        assert pass_progress(make_pass(leo_satellite), 50_000) == 100

    def test_unchanged_before_aos(self, leo_satellite) -> None:
        assert pass_progress(make_pass(leo_satellite, progress=0), 1_000) == 0

    def test_deepspace_unchanged(self, geo_satellite) -> None:
        assert pass_progress(make_pass(geo_satellite), 6_000) == 0

    def test_zero_duration_pass_is_complete_once_started(self, leo_satellite) -> None:
        sat_pass = make_pass(leo_satellite, aos=5_000, los=5_000)

        assert pass_progress(sat_pass, 5_000) == 0
        assert pass_progress(sat_pass, 5_001) == 100


class TestUpdateProgress:
    """Tests for the copy-and-update progress pass."""

    def test_returns_new_instances(self, leo_satellite) -> None:
        held = [make_pass(leo_satellite)]

        updated = update_progress(held, 6_000)

        assert updated[0] is not held[0]
        assert updated[0].progress == 50
        assert held[0].progress == 0

    def test_completed_passes_dropped(self, leo_satellite) -> None:
        finished = make_pass(leo_satellite, aos=0, los=10_000)
        running = make_pass(leo_satellite, aos=5_000, los=20_000)

        updated = update_progress([finished, running], 10_000)

        assert len(updated) == 1
        assert updated[0].aos_time == 5_000

    def test_progress_non_decreasing_until_dropped(self, leo_satellite) -> None:
        held = [make_pass(leo_satellite)]
        seen = []

        for now in range(0, 12_000, 500):
            held = update_progress(held, now)
            if not held:
                break
            seen.append(held[0].progress)

        assert seen == sorted(seen)
        assert held == []
        assert update_progress(held, 12_000) == []

    def test_zero_duration_pass_dropped(self, leo_satellite) -> None:
        assert update_progress([make_pass(leo_satellite, aos=5_000, los=5_000)], 6_000) == []

    def test_deepspace_pass_kept(self, geo_satellite) -> None:
        updated = update_progress([make_pass(geo_satellite)], 1_000_000)

        assert len(updated) == 1
        assert updated[0].progress == 0

    def test_empty(self) -> None:
        assert update_progress([], 0) == []


class TestCorrectRadios:
    """Tests for Doppler correction of transmitter lists."""

    def test_receding_satellite(self, make_satellite, observer, base_time, radios) -> None:
        sat = make_satellite(range_rate=5.0)

        corrected = correct_radios(sat, observer, radios, base_time)

        fm = corrected[0]
        assert fm.downlink == int(145_800_000 * (SPEED_OF_LIGHT_MPS - 5000.0) / SPEED_OF_LIGHT_MPS)
        assert fm.uplink == int(437_800_000 * (SPEED_OF_LIGHT_MPS + 5000.0) / SPEED_OF_LIGHT_MPS)
        assert fm.downlink < 145_800_000
        assert fm.uplink > 437_800_000

    def test_approaching_satellite(self, make_satellite, observer, base_time, radios) -> None:
        sat = make_satellite(range_rate=-5.0)

        corrected = correct_radios(sat, observer, radios, base_time)

        assert corrected[1].downlink > 435_790_000
        assert corrected[2].uplink < 145_900_000

    def test_missing_links_stay_missing(self, make_satellite, observer, base_time, radios) -> None:
        corrected = correct_radios(make_satellite(range_rate=3.0), observer, radios, base_time)

        assert corrected[1].uplink is None
        assert corrected[2].downlink is None
        assert corrected[3].downlink is None and corrected[3].uplink is None

    def test_other_fields_preserved(self, make_satellite, observer, base_time, radios) -> None:
        corrected = correct_radios(make_satellite(range_rate=3.0), observer, radios, base_time)

        assert [r.uuid for r in corrected] == [r.uuid for r in radios]
        assert corrected[2].is_inverted
        assert corrected[0].mode == "FM"
        assert not corrected[3].is_alive

    def test_single_sample_per_call(self, make_satellite, observer, base_time, radios) -> None:
        sat = make_satellite(range_rate=3.0)

        correct_radios(sat, observer, radios, base_time)

        assert len(sat.queries) == 1
        assert sat.queries[0].time == base_time

    def test_input_untouched_and_repeatable(self, make_satellite, observer, base_time, radios) -> None:
        sat = make_satellite(range_rate=6.5)
        snapshot = copy.deepcopy(radios)

        first = correct_radios(sat, observer, copy.deepcopy(radios), base_time)
        second = correct_radios(sat, observer, copy.deepcopy(radios), base_time)
        again = correct_radios(sat, observer, radios, base_time)

        assert first == second == again
        assert radios == snapshot
        assert all(a is not b for a, b in zip(again, radios))
