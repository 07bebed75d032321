"""
Tests for panel_mmm.panel: region assignment and weekly calendar.
"""
import numpy as np
import pandas as pd
import pytest

from panel_mmm import SimulationConfig, build_panel
from panel_mmm.panel import assign_regions


class TestAssignment:

    def test_every_state_in_exactly_one_region(self, default_result):
        panel = default_result.panel
        assignments = panel.assignments

        assert len(assignments) == 50
        assert assignments['state'].is_unique
        assert set(assignments['region']) <= set(panel.regions)
        assert len(panel.regions) == 5

    def test_members_partition_states(self, default_result):
        panel = default_result.panel
        members = [st for region in panel.regions for st in panel.members(region)]

        assert sorted(members) == sorted(panel.states)
        assert len(members) == len(set(members))

    def test_region_of_matches_assignment(self, default_result):
        panel = default_result.panel
        for state, region in zip(panel.assignments['state'], panel.assignments['region']):
            assert panel.region_of(state) == region
            assert state in panel.members(region)

    def test_unknown_labels_raise(self, default_result):
        with pytest.raises(KeyError):
            default_result.panel.region_of('S999')
        with pytest.raises(KeyError):
            default_result.panel.members('R99')

    def test_assignment_is_seeded(self, default_config):
        first = build_panel(default_config)
        second = build_panel(default_config)
        pd.testing.assert_frame_equal(first.assignments, second.assignments)

    def test_assign_regions_uses_given_generator(self):
        states = [f"S{i}" for i in range(1, 21)]
        a = assign_regions(states, ['R1', 'R2'], np.random.default_rng(0))
        b = assign_regions(states, ['R1', 'R2'], np.random.default_rng(0))

        assert a.equals(b)
        assert list(a['state']) == states

    def test_empty_region_warns(self):
        cfg = SimulationConfig(n_states=1, n_regions=3)
        with pytest.warns(UserWarning, match='without member states'):
            panel = build_panel(cfg)

        assert panel.regions == ('R1', 'R2', 'R3')
        assert sum(len(panel.members(r)) for r in panel.regions) == 1


class TestCalendar:

    def test_week_count(self, default_result):
        assert len(default_result.panel.weeks) == 104

    def test_seven_day_steps(self, default_result):
        weeks = default_result.panel.weeks
        steps = np.diff(weeks.values).astype('timedelta64[D]').astype(int)

        assert weeks.is_monotonic_increasing
        assert (steps == 7).all()

    def test_week_ending_sundays(self, default_result):
        weeks = default_result.panel.weeks
        assert (weeks.dayofweek == 6).all()

    def test_start_is_normalized_to_sunday(self):
        cfg = SimulationConfig(start_date='2023-01-03', end_date='2023-02-28')
        weeks = build_panel(cfg).weeks

        assert weeks[0] == pd.Timestamp('2023-01-08')
        assert weeks[-1] == pd.Timestamp('2023-02-26')
