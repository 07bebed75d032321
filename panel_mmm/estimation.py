"""
Ordinary least squares estimation of the media coefficients.

Fits sales on the per-channel spend of the modeling frame with
statsmodels, optionally absorbing time or region-time fixed effects, and
compares the recovered coefficients with the known ground truth.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
import statsmodels.formula.api as smf
from sklearn.metrics import r2_score, mean_absolute_percentage_error, mean_squared_error

from .exceptions import EstimationError

FIXED_EFFECTS = (None, 'week', 'region_week')


def _term(channel: str) -> str:
    """Formula term for a channel column; quoting allows any column name."""
    return f'Q("{channel}")'


class MediaMixOLS:
    """
    OLS media mix regression on a state-week panel.

    Attributes
    ----------
    fixed_effects : str or None
        None for a plain regression with an intercept, 'week' for week
        dummies, 'region_week' for one dummy per (region, week)
    alpha : float
        Significance level of the reported confidence intervals

    Examples
    --------
    >>> ols = MediaMixOLS(fixed_effects='region_week')
    >>> ols.fit(frame, channels=['META', 'TikTok'])
    >>> ols.compare_to_truth(truth)
    """

    def __init__(self, fixed_effects: Optional[str] = None, alpha: float = 0.05):
        if fixed_effects not in FIXED_EFFECTS:
            raise ValueError(
                f"fixed_effects must be one of {FIXED_EFFECTS}, got '{fixed_effects}'"
            )
        if not 0 < alpha < 1:
            raise ValueError("alpha must be between 0 and 1")

        self.fixed_effects = fixed_effects
        self.alpha = alpha
        self.results = None
        self.channels: List[str] = []
        self.target = None
        self.is_fitted = False

    def build_formula(self, target: str, channels: Sequence[str]) -> str:
        """Patsy formula for ``target`` on ``channels`` plus fixed effects."""
        formula = f'{_term(target)} ~ ' + ' + '.join(_term(c) for c in channels)
        if self.fixed_effects == 'week':
            formula += ' + C(week)'
        elif self.fixed_effects == 'region_week':
            formula += ' + C(region_week)'
        return formula

    def _prepare(self, frame: pd.DataFrame, target: str,
                 channels: Sequence[str]) -> pd.DataFrame:
        required = [target] + list(channels)
        if self.fixed_effects == 'week':
            required.append('week')
        elif self.fixed_effects == 'region_week':
            required += ['region', 'week']

        missing = [c for c in required if c not in frame.columns]
        if missing:
            raise EstimationError(f"Columns not found in modeling frame: {missing}")

        data = frame[list(dict.fromkeys(required))].copy()
        if data[[target] + list(channels)].isna().any().any():
            raise EstimationError("Modeling frame contains missing values")

        if self.fixed_effects == 'region_week':
            data['region_week'] = data['region'].astype(str) + '|' + data['week'].astype(str)
        return data

    def fit(self, frame: pd.DataFrame, channels: Sequence[str],
            target: str = 'total_sales', verbose: bool = False) -> 'MediaMixOLS':
        """
        Fit the regression.

        Parameters
        ----------
        frame : DataFrame
            One row per (state, week) with the target and a spend column per
            channel
        channels : sequence of str
            Spend columns to use as regressors
        target : str, default='total_sales'
            Outcome column
        verbose : bool, default=False
            Print fitting progress

        Returns
        -------
        self : MediaMixOLS
            Fitted model

        Raises
        ------
        EstimationError
            If columns are missing, there are too few rows, or the design
            matrix is rank deficient
        """
        channels = list(channels)
        if not channels:
            raise EstimationError("At least one channel is required")

        data = self._prepare(frame, target, channels)
        formula = self.build_formula(target, channels)

        if verbose:
            print(f"Building design matrix: {formula}")
        model = smf.ols(formula, data=data)

        n_obs, n_params = model.exog.shape
        if n_obs <= n_params:
            raise EstimationError(
                f"Not enough observations ({n_obs}) for {n_params} parameters"
            )
        rank = np.linalg.matrix_rank(model.exog)
        if rank < n_params:
            raise EstimationError(
                f"Design matrix is singular (rank {rank} < {n_params} columns); "
                f"spend columns may be collinear"
            )

        if verbose:
            print(f"Fitting OLS on {n_obs} rows, {n_params} parameters...")
        self.results = model.fit()

        y = data[target].to_numpy()
        fitted = self.results.fittedvalues.to_numpy()
        self.train_r2 = r2_score(y, fitted)
        self.train_mape = mean_absolute_percentage_error(y, fitted)
        self.train_rmse = np.sqrt(mean_squared_error(y, fitted))

        if verbose:
            print(f"\nTraining Performance:")
            print(f"  R²: {self.train_r2:.4f}")
            print(f"  MAPE: {self.train_mape:.2%}")
            print(f"  RMSE: {self.train_rmse:,.0f}")

        self.channels = channels
        self.target = target
        self.is_fitted = True
        return self

    def _check_fitted(self):
        if not self.is_fitted:
            raise EstimationError("Model must be fitted first")

    @property
    def intercept(self) -> float:
        self._check_fitted()
        return float(self.results.params['Intercept'])

    def get_coefficients(self) -> pd.DataFrame:
        """
        Channel coefficients with standard errors and confidence intervals.

        Returns
        -------
        DataFrame
            Columns ``channel, coefficient, std_error, t_value, p_value,
            ci_lower, ci_upper``
        """
        self._check_fitted()

        terms = [_term(c) for c in self.channels]
        conf_int = self.results.conf_int(alpha=self.alpha)

        return pd.DataFrame({
            'channel': self.channels,
            'coefficient': self.results.params[terms].to_numpy(),
            'std_error': self.results.bse[terms].to_numpy(),
            't_value': self.results.tvalues[terms].to_numpy(),
            'p_value': self.results.pvalues[terms].to_numpy(),
            'ci_lower': conf_int.loc[terms, 0].to_numpy(),
            'ci_upper': conf_int.loc[terms, 1].to_numpy(),
        })

    def compare_to_truth(self, truth) -> pd.DataFrame:
        """
        Compare recovered coefficients with known values.

        Parameters
        ----------
        truth : Series or dict
            True coefficient per channel

        Returns
        -------
        DataFrame
            Coefficient table plus ``true_coefficient``, ``abs_error``,
            ``rel_error`` and ``within_ci``
        """
        coefs = self.get_coefficients()
        truth = pd.Series(truth, dtype=float)

        missing = [c for c in self.channels if c not in truth.index]
        if missing:
            raise EstimationError(f"No true coefficient for channels: {missing}")

        coefs.insert(1, 'true_coefficient', truth[self.channels].to_numpy())
        coefs['abs_error'] = (coefs['coefficient'] - coefs['true_coefficient']).abs()
        with np.errstate(divide='ignore', invalid='ignore'):
            coefs['rel_error'] = coefs['abs_error'] / coefs['true_coefficient'].abs()
        coefs['within_ci'] = (
            (coefs['ci_lower'] <= coefs['true_coefficient'])
            & (coefs['true_coefficient'] <= coefs['ci_upper'])
        )
        return coefs

    def summary(self) -> str:
        """
        Generate model summary.

        Returns
        -------
        str
            Formatted summary
        """
        if not self.is_fitted:
            return "Model not yet fitted"

        summary = f"""
Media Mix OLS Summary
=====================

Target: {self.target}
Fixed Effects: {self.fixed_effects or 'none'}
Observations: {int(self.results.nobs)}

Training Performance:
  R²: {self.train_r2:.4f}
  MAPE: {self.train_mape:.2%}
  RMSE: {self.train_rmse:,.0f}

Marketing Channels: {len(self.channels)}
  {', '.join(self.channels)}
        """
        return summary

    def __repr__(self):
        status = "fitted" if self.is_fitted else "not fitted"
        return f"MediaMixOLS(fixed_effects={self.fixed_effects!r}, status='{status}')"


def recover_coefficients(result, fixed_effects: Optional[str] = None,
                         target: str = 'total_sales',
                         verbose: bool = False) -> Dict:
    """
    Fit ``MediaMixOLS`` on a simulation result and compare with its truth.

    Parameters
    ----------
    result : SimulationResult
        Output of ``run_simulation``
    fixed_effects : str, optional
        Passed to ``MediaMixOLS``
    target : str, default='total_sales'
        'total_sales' includes the media effect; 'sales' is the shock-only
        series, against which every true coefficient is zero
    verbose : bool, default=False
        Print fitting progress

    Returns
    -------
    dict
        ``model`` (fitted MediaMixOLS) and ``comparison`` (DataFrame)
    """
    channels = list(result.config.channel_names)
    model = MediaMixOLS(fixed_effects=fixed_effects)
    model.fit(result.frame, channels=channels, target=target, verbose=verbose)

    if target == 'total_sales':
        truth = result.ground_truth
    else:
        truth = pd.Series(0.0, index=channels)

    return {
        'model': model,
        'comparison': model.compare_to_truth(truth),
    }
