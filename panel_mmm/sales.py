"""
Sales synthesis from the shock hierarchy, plus rollups and media wiring.
"""

import numpy as np
import pandas as pd

from .config import SimulationConfig
from .exceptions import ConfigurationError
from .ground_truth import media_contribution
from .panel import Panel
from .shocks import ShockSet

SALES_COLUMNS = ['state', 'region', 'week', 'national_shock', 'regional_shock',
                 'state_shock', 'sales']


def combine_shocks(national, regional, state, baseline: float, scale: float,
                   weights) -> np.ndarray:
    """
    sales = baseline + scale * (w_nat * national + w_reg * regional + w_state * state)

    No floor or cap is applied.
    """
    w_nat, w_reg, w_state = weights
    return baseline + scale * (national * w_nat + regional * w_reg + state * w_state)


def synthesize_sales(cfg: SimulationConfig, panel: Panel, shocks: ShockSet) -> pd.DataFrame:
    """
    Build one sales record per (state, week).

    Parameters
    ----------
    cfg : SimulationConfig
        Baseline, scale and weights
    panel : Panel
        States, their regions and the calendar
    shocks : ShockSet
        National, regional and state shocks

    Returns
    -------
    DataFrame
        Columns ``state, region, week, national_shock, regional_shock,
        state_shock, sales`` ordered by state then week
    """
    states = list(panel.states)
    regions = [panel.region_of(st) for st in states]
    weeks = panel.weeks
    n_weeks = len(weeks)

    national = np.tile(shocks.national.to_numpy(), len(states))
    regional = np.concatenate([shocks.regional[region].to_numpy() for region in regions])
    state = np.concatenate([shocks.state[st].to_numpy() for st in states])

    sales = combine_shocks(national, regional, state, cfg.baseline, cfg.scale, cfg.weights)

    return pd.DataFrame({
        'state': np.repeat(states, n_weeks),
        'region': np.repeat(regions, n_weeks),
        'week': np.tile(weeks.values, len(states)),
        'national_shock': national,
        'regional_shock': regional,
        'state_shock': state,
        'sales': sales,
    }, columns=SALES_COLUMNS)


def regional_rollup(sales: pd.DataFrame, value: str = 'sales') -> pd.DataFrame:
    """
    Sum a per-state column over the member states of each region and week.

    Parameters
    ----------
    sales : DataFrame
        Per-state frame with ``region`` and ``week`` columns
    value : str, default='sales'
        Column to aggregate

    Returns
    -------
    DataFrame
        Columns ``region``, ``week`` and ``value``, ordered by region then week
    """
    if value not in sales.columns:
        raise ValueError(f"Column '{value}' not found in sales table")

    return (
        sales
        .groupby(['region', 'week'], sort=True)[value]
        .sum()
        .reset_index()
    )


def add_media_effect(sales: pd.DataFrame, media_wide: pd.DataFrame,
                     coefficients: pd.Series) -> pd.DataFrame:
    """
    Join media spend onto sales and add the known media contribution.

    The ``sales`` column keeps the pure shock formula; the media effect is
    added in two new columns:

    - ``media_contribution`` = sum over channels of coefficient x spend
    - ``total_sales`` = ``sales`` + ``media_contribution``

    Parameters
    ----------
    sales : DataFrame
        Output of ``synthesize_sales``
    media_wide : DataFrame
        Output of ``media_to_wide``
    coefficients : Series
        True coefficient per channel

    Returns
    -------
    DataFrame
        One row per (state, week) with sales, spend and the new columns
    """
    frame = sales.merge(media_wide, on=['state', 'week'], how='left', validate='one_to_one')

    channels = list(coefficients.index)
    absent = [c for c in channels if c not in frame.columns]
    if absent:
        raise ConfigurationError(f"media table lacks spend columns for {absent}")
    if frame[channels].isna().any().any():
        raise ConfigurationError("media spend is missing for some (state, week) pairs")

    frame['media_contribution'] = media_contribution(frame, coefficients)
    frame['total_sales'] = frame['sales'] + frame['media_contribution']
    return frame
