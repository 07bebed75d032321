"""
Hierarchical ARIMA shocks.

Three independent families of correlated noise drive sales:

- national: one series shared by every state (integrated, so it drifts)
- regional: one stationary series per region
- state: one stationary series per state

Each series is an ARMA(1, 1) realization, integrated ``d`` times with a
cumulative sum.
"""

import math
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd
from statsmodels.tsa.arima_process import ArmaProcess

from .config import ArimaSpec, SimulationConfig
from .exceptions import GenerationError
from .panel import Panel


def burnin_length(process: ArmaProcess) -> int:
    """
    Number of warm-up draws discarded before the first kept value.

    Grows with the persistence of the AR part so that the kept sample
    starts close to the stationary distribution.
    """
    n_ar = len(process.arcoefs)
    n_ma = len(process.macoefs)
    roots = np.abs(np.atleast_1d(process.arroots))
    if roots.size and np.all(roots > 1):
        return n_ar + n_ma + math.ceil(6 / math.log(roots.min()))
    return n_ar + n_ma


def simulate_arima(spec: ArimaSpec, n_periods: int, rng: np.random.Generator,
                   level: str = 'series', unit: str = None) -> np.ndarray:
    """
    Draw one ARIMA(1, d, 1) realization.

    Parameters
    ----------
    spec : ArimaSpec
        AR coefficient, MA coefficient and differencing order
    n_periods : int
        Length of the returned series
    rng : numpy.random.Generator
        Source of the Gaussian innovations
    level, unit : str
        Labels used in error messages

    Returns
    -------
    np.ndarray
        Array of length ``n_periods``

    Raises
    ------
    GenerationError
        If the AR part is not stationary or the draw is not finite

    Examples
    --------
    >>> rng = np.random.default_rng(0)
    >>> simulate_arima(ArimaSpec(ar=0.5, ma=0.5), 10, rng).shape
    (10,)
    """
    # statsmodels expects lag polynomials with the AR sign flipped
    ar = np.r_[1, -spec.ar] if spec.ar else np.array([1.0])
    ma = np.r_[1, spec.ma] if spec.ma else np.array([1.0])
    process = ArmaProcess(ar=ar, ma=ma)
    if not process.isstationary:
        raise GenerationError(
            f"AR coefficient {spec.ar} is not stationary", level=level, unit=unit
        )

    values = process.generate_sample(
        nsample=n_periods,
        scale=1.0,
        distrvs=rng.standard_normal,
        burnin=burnin_length(process),
    )
    for _ in range(int(spec.d)):
        values = np.cumsum(values)

    if not np.all(np.isfinite(values)):
        raise GenerationError("draw contains non-finite values", level=level, unit=unit)
    return np.asarray(values, dtype=float)


@dataclass(frozen=True, eq=False)
class ShockSet:
    """
    Generated shocks, keyed by unit.

    Attributes
    ----------
    national : Series
        Indexed by week
    regional : dict
        Region label -> Series indexed by week
    state : dict
        State label -> Series indexed by week
    """
    national: pd.Series
    regional: Dict[str, pd.Series]
    state: Dict[str, pd.Series]

    def regional_frame(self) -> pd.DataFrame:
        """Weeks x regions table of the regional shocks."""
        return pd.DataFrame(self.regional)

    def state_frame(self) -> pd.DataFrame:
        """Weeks x states table of the state shocks."""
        return pd.DataFrame(self.state)


def generate_shocks(cfg: SimulationConfig, panel: Panel) -> ShockSet:
    """
    Generate the national, regional and state shocks for ``panel``.

    Draws come from one stream seeded with ``cfg.seed + 1`` in a fixed
    order: national first, then regions and states in label order.
    """
    rng = np.random.default_rng(cfg.seed + 1)
    weeks = panel.weeks
    n_weeks = len(weeks)

    national = pd.Series(
        simulate_arima(cfg.national_arima, n_weeks, rng, level='national'),
        index=weeks, name='national',
    )

    regional = {
        region: pd.Series(
            simulate_arima(cfg.regional_arima, n_weeks, rng, level='regional', unit=region),
            index=weeks, name=region,
        )
        for region in panel.regions
    }

    state = {
        st: pd.Series(
            simulate_arima(cfg.state_arima, n_weeks, rng, level='state', unit=st),
            index=weeks, name=st,
        )
        for st in panel.states
    }

    return ShockSet(national=national, regional=regional, state=state)
