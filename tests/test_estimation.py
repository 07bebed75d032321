"""
Tests for panel_mmm.estimation: OLS recovery and estimation errors.
"""
import numpy as np
import pytest

from panel_mmm import CHANNEL_NAMES, EstimationError, MediaMixOLS, recover_coefficients
from panel_mmm.ground_truth import assign_ground_truth, media_contribution


class TestGroundTruth:

    def test_indexed_by_channel(self, default_config):
        truth = assign_ground_truth(default_config)

        assert tuple(truth.index) == CHANNEL_NAMES
        assert truth['META'] == 0.8
        assert truth['PR'] == 2.0

    def test_contribution_is_dot_product(self, default_result):
        wide = default_result.media_wide.head(3)
        truth = default_result.ground_truth
        contribution = media_contribution(wide, truth)

        expected = wide[list(CHANNEL_NAMES)].to_numpy() @ truth.to_numpy()
        np.testing.assert_allclose(contribution.to_numpy(), expected)


class TestRecovery:

    def test_plain_ols_recovers_low_noise_coefficients(self, low_noise_result):
        recovery = recover_coefficients(low_noise_result)
        comparison = recovery['comparison']

        assert list(comparison['channel']) == list(CHANNEL_NAMES)
        assert (comparison['abs_error'] < 0.1).all()

    def test_week_fixed_effects(self, low_noise_result):
        recovery = recover_coefficients(low_noise_result, fixed_effects='week')
        assert (recovery['comparison']['abs_error'] < 0.1).all()

    def test_region_week_fixed_effects_absorb_shared_shocks(self, default_config):
        from panel_mmm import run_simulation

        result = run_simulation(default_config.replace(scale=100.0))
        recovery = recover_coefficients(result, fixed_effects='region_week')
        assert (recovery['comparison']['abs_error'] < 0.1).all()

    def test_shock_only_sales_have_no_media_effect(self, low_noise_result):
        recovery = recover_coefficients(low_noise_result, target='sales')
        comparison = recovery['comparison']

        assert (comparison['true_coefficient'] == 0).all()
        assert (comparison['coefficient'].abs() < 0.1).all()

    def test_comparison_columns(self, low_noise_result):
        comparison = recover_coefficients(low_noise_result)['comparison']
        expected = ['channel', 'true_coefficient', 'coefficient', 'std_error', 't_value',
                    'p_value', 'ci_lower', 'ci_upper', 'abs_error', 'rel_error', 'within_ci']

        assert list(comparison.columns) == expected
        assert (comparison['ci_lower'] <= comparison['coefficient']).all()
        assert (comparison['coefficient'] <= comparison['ci_upper']).all()
        assert comparison['within_ci'].dtype == bool


class TestMediaMixOLS:

    def test_fit_records_metrics(self, low_noise_result):
        model = MediaMixOLS().fit(low_noise_result.frame, channels=CHANNEL_NAMES)

        assert model.is_fitted
        assert 0 < model.train_r2 <= 1
        assert model.train_rmse > 0
        assert np.isfinite(model.intercept)

    def test_summary_and_repr(self, low_noise_result):
        model = MediaMixOLS(fixed_effects='week')
        assert model.summary() == "Model not yet fitted"
        assert 'not fitted' in repr(model)

        model.fit(low_noise_result.frame, channels=CHANNEL_NAMES)
        assert 'Media Mix OLS Summary' in model.summary()
        assert "fixed_effects='week'" in repr(model)

    def test_verbose_prints_progress(self, low_noise_result, capsys):
        MediaMixOLS().fit(low_noise_result.frame, channels=['META'], verbose=True)
        out = capsys.readouterr().out

        assert 'Fitting OLS' in out
        assert 'R²' in out

    def test_formula(self):
        formula = MediaMixOLS(fixed_effects='region_week').build_formula('total_sales', ['META'])
        assert formula == 'Q("total_sales") ~ Q("META") + C(region_week)'

    def test_invalid_fixed_effects(self):
        with pytest.raises(ValueError):
            MediaMixOLS(fixed_effects='state')

    def test_query_before_fit_raises(self):
        with pytest.raises(EstimationError):
            MediaMixOLS().get_coefficients()


class TestEstimationErrors:

    def test_collinear_spend_is_singular(self, low_noise_result):
        frame = low_noise_result.frame.copy()
        frame['META_copy'] = frame['META'] * 2

        with pytest.raises(EstimationError, match='singular'):
            MediaMixOLS().fit(frame, channels=['META', 'META_copy'])

    def test_constant_spend_is_singular(self, low_noise_result):
        frame = low_noise_result.frame.copy()
        frame['flat'] = 1.0

        with pytest.raises(EstimationError, match='singular'):
            MediaMixOLS().fit(frame, channels=['META', 'flat'])

    def test_missing_column(self, low_noise_result):
        with pytest.raises(EstimationError, match='not found'):
            MediaMixOLS().fit(low_noise_result.frame, channels=['Radio'])

    def test_too_few_rows(self, low_noise_result):
        with pytest.raises(EstimationError, match='observations'):
            MediaMixOLS().fit(low_noise_result.frame.head(4), channels=CHANNEL_NAMES)

    def test_no_channels(self, low_noise_result):
        with pytest.raises(EstimationError):
            MediaMixOLS().fit(low_noise_result.frame, channels=[])

    def test_missing_truth(self, low_noise_result):
        model = MediaMixOLS().fit(low_noise_result.frame, channels=['META', 'PR'])
        with pytest.raises(EstimationError):
            model.compare_to_truth({'META': 0.8})
