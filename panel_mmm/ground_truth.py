"""
Known media coefficients of the data generating process.
"""

import pandas as pd

from .config import SimulationConfig
from .exceptions import ConfigurationError


def assign_ground_truth(cfg: SimulationConfig) -> pd.Series:
    """
    Fixed incremental-sales coefficient per channel.

    Returns
    -------
    Series
        Indexed by channel, in configuration order, named ``true_coefficient``
    """
    return pd.Series(
        [cfg.true_coefficients[name] for name in cfg.channel_names],
        index=pd.Index(cfg.channel_names, name='channel'),
        name='true_coefficient',
        dtype=float,
    )


def media_contribution(media_wide: pd.DataFrame, coefficients: pd.Series) -> pd.Series:
    """
    Incremental sales from media: sum over channels of coefficient x spend.

    Parameters
    ----------
    media_wide : DataFrame
        One spend column per channel
    coefficients : Series
        Coefficient per channel

    Returns
    -------
    Series
        Aligned with ``media_wide`` rows
    """
    missing = [c for c in coefficients.index if c not in media_wide.columns]
    if missing:
        raise ConfigurationError(f"media table lacks spend columns for {missing}")

    channels = list(coefficients.index)
    contribution = media_wide[channels].to_numpy(dtype=float) @ coefficients.to_numpy(dtype=float)
    return pd.Series(contribution, index=media_wide.index, name='media_contribution')
