"""
Tests for panel_mmm.pipeline and panel_mmm.plotting: reproducibility,
seed sensitivity, export and charts.
"""
import json

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from panel_mmm import (
    CHANNEL_NAMES,
    ConfigurationError,
    SimulationConfig,
    recover_coefficients,
    run_simulation,
    save_outputs,
)
from panel_mmm.plotting import plot_coefficient_recovery, plot_regional_sales


class TestReproducibility:

    def test_same_seed_same_output(self, default_config, default_result):
        again = run_simulation(default_config)

        pd.testing.assert_frame_equal(again.panel.assignments, default_result.panel.assignments)
        pd.testing.assert_frame_equal(again.sales, default_result.sales)
        pd.testing.assert_frame_equal(again.media, default_result.media)
        pd.testing.assert_frame_equal(again.frame, default_result.frame)
        pd.testing.assert_series_equal(again.shocks.national, default_result.shocks.national)

    def test_default_config_when_omitted(self, default_result):
        result = run_simulation()
        pd.testing.assert_frame_equal(result.sales, default_result.sales)

    def test_different_seed_changes_values(self, default_config, default_result):
        other = run_simulation(default_config.replace(seed=321))

        assert not np.allclose(other.sales['sales'], default_result.sales['sales'])
        assert not np.allclose(other.media['spend'], default_result.media['spend'])

    def test_different_seed_keeps_structure(self, default_config):
        result = run_simulation(default_config.replace(seed=2024))
        cfg = result.config

        assert len(result.panel.assignments) == 50
        assert result.panel.assignments['state'].is_unique
        assert len(result.panel.weeks) == 104
        assert len(result.sales) == 5200
        assert len(result.media_wide) == 5200
        assert list(result.media_wide.columns[2:]) == list(CHANNEL_NAMES)

        sales = result.sales
        recomputed = cfg.baseline + cfg.scale * (
            sales['national_shock'] * 5 + sales['regional_shock'] * 3 + sales['state_shock']
        )
        np.testing.assert_allclose(sales['sales'], recomputed, rtol=1e-12)


class TestRunSimulation:

    def test_result_tables(self, default_result):
        assert len(default_result.sales) == 5200
        assert len(default_result.media) == 31200
        assert len(default_result.frame) == 5200
        assert {'media_contribution', 'total_sales'} <= set(default_result.frame.columns)
        assert set(CHANNEL_NAMES) <= set(default_result.frame.columns)

    def test_invalid_config_fails_before_generation(self):
        with pytest.raises(ConfigurationError):
            run_simulation(SimulationConfig(n_states=0))

    def test_verbose(self, small_config, capsys):
        run_simulation(small_config, verbose=True)
        out = capsys.readouterr().out

        assert 'Building panel: 8 states, 3 regions' in out
        assert 'Generating media spend' in out


class TestSaveOutputs:

    def test_writes_all_files(self, default_result, tmp_path):
        out_dir = save_outputs(default_result, tmp_path / 'run')

        for name in ['sales.csv', 'media.csv', 'modeling_frame.csv', 'regional_rollup.csv',
                     'ground_truth.json']:
            assert (out_dir / name).exists()

        sales = pd.read_csv(out_dir / 'sales.csv')
        assert len(sales) == 5200

        with open(out_dir / 'ground_truth.json') as f:
            truth = json.load(f)
        assert truth['true_coefficients'] == default_result.ground_truth.to_dict()
        assert truth['config']['seed'] == 123
        assert len(truth['state_regions']) == 50


class TestPlotting:

    def test_regional_sales_chart(self, default_result):
        fig = plot_regional_sales(default_result.rollup)
        ax = fig.axes[0]

        assert len(ax.get_lines()) == default_result.rollup['region'].nunique()
        assert ax.get_title() == 'Weekly Sales by Region'
        plt.close(fig)

    def test_recovery_chart_on_given_axes(self, low_noise_result):
        comparison = recover_coefficients(low_noise_result)['comparison']
        fig, ax = plt.subplots()

        returned = plot_coefficient_recovery(comparison, ax=ax)

        assert returned is fig
        assert [t.get_text() for t in ax.get_xticklabels()] == list(CHANNEL_NAMES)
        plt.close(fig)
