"""
Synthetic media spend per state, week and channel.

Spend for channel ``c`` in state ``s`` at week ``t`` (``T`` weeks) is::

    level_{s,c}   = mean_spend_c * exp(z - level_sigma_c**2 / 2),   z ~ N(0, level_sigma_c)
    trend_t       = 1 + growth_c * t / (T - 1)
    season_{s,t}  = 1 + seasonal_amplitude_c * sin(2 * pi * (t / 52 + phase_{s,c})),
                    phase_{s,c} ~ U(0, 1)
    u_{s,t}       = persistence_c * u_{s,t-1} + e_t,   e_t ~ N(0, volatility_c)
    spend         = level_{s,c} * trend_t * season_{s,t} * exp(u_{s,t})

so every value is strictly positive, states differ in level and seasonal
phase, and weeks differ through the trend, the season and the AR(1)
fluctuation. Channels and states are independent.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd
from scipy import signal

from .config import ChannelSpec, SimulationConfig
from .panel import Panel

WEEKS_PER_YEAR = 52


def ar1_fluctuation(innovations: np.ndarray, persistence: float) -> np.ndarray:
    """
    Filter innovations through an AR(1) recursion along the last axis.

    u_t = persistence * u_{t-1} + e_t

    The first innovation is inflated to the stationary spread so the
    series does not start from a calm state.
    """
    innovations = np.array(innovations, dtype=float)
    innovations[..., 0] = innovations[..., 0] / np.sqrt(1 - persistence ** 2)
    return signal.lfilter([1.0], [1.0, -persistence], innovations, axis=-1)


def channel_spend(spec: ChannelSpec, n_states: int, n_weeks: int,
                  rng: np.random.Generator) -> np.ndarray:
    """
    Spend matrix for one channel.

    Parameters
    ----------
    spec : ChannelSpec
        Channel parameters
    n_states : int
        Number of states (rows)
    n_weeks : int
        Number of weeks (columns)
    rng : numpy.random.Generator
        Random source

    Returns
    -------
    np.ndarray
        Positive array of shape (n_states, n_weeks)
    """
    z = rng.normal(0.0, spec.level_sigma, size=n_states)
    level = spec.mean_spend * np.exp(z - spec.level_sigma ** 2 / 2)

    t = np.arange(n_weeks)
    trend = 1 + spec.growth * t / max(n_weeks - 1, 1)

    phase = rng.uniform(0.0, 1.0, size=n_states)
    season = 1 + spec.seasonal_amplitude * np.sin(
        2 * np.pi * (t[None, :] / WEEKS_PER_YEAR + phase[:, None])
    )

    innovations = rng.normal(0.0, spec.volatility, size=(n_states, n_weeks))
    fluctuation = ar1_fluctuation(innovations, spec.persistence)

    return level[:, None] * trend[None, :] * season * np.exp(fluctuation)


def generate_media(cfg: SimulationConfig, panel: Panel) -> pd.DataFrame:
    """
    Generate spend for every (state, week, channel).

    Draws come from a stream seeded with ``cfg.seed + 2``, channel by
    channel in configuration order.

    Returns
    -------
    DataFrame
        Long table with columns ``state``, ``week``, ``channel``, ``spend``,
        ordered by state, week, then channel
    """
    rng = np.random.default_rng(cfg.seed + 2)
    states = list(panel.states)
    weeks = panel.weeks
    n_states, n_weeks = len(states), len(weeks)

    spend = np.stack([
        channel_spend(spec, n_states, n_weeks, rng) for spec in cfg.channels
    ])  # (channels, states, weeks)

    n_channels = len(cfg.channels)
    return pd.DataFrame({
        'state': np.repeat(states, n_weeks * n_channels),
        'week': np.tile(np.repeat(weeks.values, n_channels), n_states),
        'channel': np.tile(cfg.channel_names, n_states * n_weeks),
        'spend': spend.transpose(1, 2, 0).ravel(),
    })


def media_to_wide(media: pd.DataFrame,
                  channels: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Reshape long media spend to one row per (state, week).

    Parameters
    ----------
    media : DataFrame
        Long table from ``generate_media``
    channels : sequence of str, optional
        Column order of the spend columns. Defaults to order of appearance.

    Returns
    -------
    DataFrame
        Columns ``state``, ``week`` and one spend column per channel
    """
    if media.duplicated(['state', 'week', 'channel']).any():
        raise ValueError("media table has more than one row per (state, week, channel)")

    if channels is None:
        channels = list(pd.unique(media['channel']))
    present = set(media['channel'])
    unknown = present - set(channels)
    if unknown:
        raise ValueError(f"media table contains unknown channels: {sorted(unknown)}")
    absent = [c for c in channels if c not in present]
    if absent:
        raise ValueError(f"media table has no rows for channels: {absent}")

    wide = media.pivot(index=['state', 'week'], columns='channel', values='spend')
    order = pd.MultiIndex.from_product(
        [pd.unique(media['state']), pd.unique(media['week'])], names=['state', 'week']
    )
    wide = wide.reindex(index=order, columns=list(channels))
    wide.columns.name = None
    return wide.reset_index()
