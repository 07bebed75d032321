"""
Configuration for the synthetic panel simulation.

All constants of a run live on a ``SimulationConfig`` that is passed
explicitly to every generator. The defaults reproduce the reference
setup: 50 states in 5 regions, 104 weeks from 2023-01-01, a sales
baseline of 1,000,000 moved by weighted national/regional/state ARIMA
shocks, and six marketing channels.
"""

import dataclasses
import numbers
from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError


# -------------------------------
# DEFAULT CONSTANTS
# -------------------------------

DEFAULT_SEED = 123
DEFAULT_START_DATE = '2023-01-01'
DEFAULT_END_DATE = '2024-12-28'
WEEK_FREQ = 'W-SUN'

CHANNEL_NAMES = ('META', 'Instagram', 'TikTok', 'Influencers', 'OOH', 'PR')

# Incremental sales per unit of spend
DEFAULT_TRUE_COEFFICIENTS = {
    'META': 0.8,
    'Instagram': 1.2,
    'TikTok': 1.5,
    'Influencers': 0.6,
    'OOH': 0.4,
    'PR': 2.0,
}


def _is_integer(value, minimum: int) -> bool:
    """True for an int (not bool) that is at least ``minimum``."""
    return (isinstance(value, numbers.Integral) and not isinstance(value, bool)
            and value >= minimum)


@dataclass(frozen=True)
class ArimaSpec:
    """
    ARIMA(1, d, 1) parameters for one level of the shock hierarchy.

    Parameters
    ----------
    ar : float
        First-order autoregressive coefficient
    ma : float
        First-order moving-average coefficient
    d : int
        Differencing (integration) order. d > 0 gives a non-stationary
        series whose spread grows with its length.
    """
    ar: float
    ma: float
    d: int = 0

    def validate(self, level: str) -> None:
        if not (np.isfinite(self.ar) and np.isfinite(self.ma)):
            raise ConfigurationError(f"{level} ARIMA coefficients must be finite")
        if not _is_integer(self.d, 0):
            raise ConfigurationError(
                f"{level} differencing order must be a non-negative integer, got {self.d}"
            )


@dataclass(frozen=True)
class ChannelSpec:
    """
    Spend-generation parameters for one marketing channel.

    Weekly spend for a state is
    ``level * (1 + growth * t / (T - 1)) * (1 + seasonal_amplitude * sin(...)) * exp(u_t)``
    where ``level`` is a lognormal draw around ``mean_spend`` and ``u_t`` is
    an AR(1) fluctuation with the given persistence and volatility.
    """
    name: str
    mean_spend: float
    level_sigma: float = 0.3
    growth: float = 0.0
    seasonal_amplitude: float = 0.2
    persistence: float = 0.5
    volatility: float = 0.2

    def validate(self) -> None:
        if not self.name:
            raise ConfigurationError("channel name must be non-empty")
        if not self.mean_spend > 0:
            raise ConfigurationError(f"{self.name}: mean_spend must be positive")
        if self.level_sigma < 0 or self.volatility < 0:
            raise ConfigurationError(f"{self.name}: level_sigma and volatility must be non-negative")
        if not 0 <= self.persistence < 1:
            raise ConfigurationError(f"{self.name}: persistence must be in [0, 1)")
        if not abs(self.seasonal_amplitude) < 1:
            raise ConfigurationError(f"{self.name}: seasonal_amplitude must be in (-1, 1)")
        if not self.growth > -1:
            raise ConfigurationError(f"{self.name}: growth must be greater than -1")


DEFAULT_CHANNELS = (
    ChannelSpec('META', mean_spend=20000, level_sigma=0.30, growth=0.10,
                seasonal_amplitude=0.20, persistence=0.6, volatility=0.15),
    ChannelSpec('Instagram', mean_spend=15000, level_sigma=0.35, growth=0.25,
                seasonal_amplitude=0.15, persistence=0.5, volatility=0.20),
    ChannelSpec('TikTok', mean_spend=12000, level_sigma=0.45, growth=0.60,
                seasonal_amplitude=0.10, persistence=0.4, volatility=0.25),
    ChannelSpec('Influencers', mean_spend=8000, level_sigma=0.50, growth=0.30,
                seasonal_amplitude=0.25, persistence=0.3, volatility=0.30),
    ChannelSpec('OOH', mean_spend=25000, level_sigma=0.25, growth=-0.10,
                seasonal_amplitude=0.30, persistence=0.8, volatility=0.10),
    ChannelSpec('PR', mean_spend=5000, level_sigma=0.40, growth=0.0,
                seasonal_amplitude=0.10, persistence=0.2, volatility=0.35),
)


# -------------------------------
# CONFIGURATION
# -------------------------------

@dataclass(frozen=True)
class SimulationConfig:
    """
    Complete, validated settings of one simulation run.

    Validation runs on construction, so an invalid configuration fails
    before any random draw is made.

    Examples
    --------
    >>> cfg = SimulationConfig()
    >>> cfg.n_weeks
    104
    >>> small = cfg.replace(n_states=10, seed=7)
    """
    n_states: int = 50
    n_regions: int = 5
    start_date: str = DEFAULT_START_DATE
    end_date: str = DEFAULT_END_DATE
    seed: int = DEFAULT_SEED

    # Sales = baseline + scale * (w_nat * national + w_reg * regional + w_state * state)
    baseline: float = 1_000_000.0
    scale: float = 10_000.0
    weights: Tuple[float, float, float] = (5.0, 3.0, 1.0)

    national_arima: ArimaSpec = ArimaSpec(ar=0.9, ma=0.2, d=1)
    regional_arima: ArimaSpec = ArimaSpec(ar=0.5, ma=0.5, d=0)
    state_arima: ArimaSpec = ArimaSpec(ar=0.7, ma=0.25, d=0)

    channels: Tuple[ChannelSpec, ...] = DEFAULT_CHANNELS
    true_coefficients: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_TRUE_COEFFICIENTS)
    )

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if any setting is unusable."""
        if not _is_integer(self.n_states, 1):
            raise ConfigurationError(f"n_states must be a positive integer, got {self.n_states}")
        if not _is_integer(self.n_regions, 1):
            raise ConfigurationError(f"n_regions must be a positive integer, got {self.n_regions}")
        # seed + 2 must still be a valid numpy seed
        if not _is_integer(self.seed, 0):
            raise ConfigurationError(f"seed must be a non-negative integer, got {self.seed!r}")

        try:
            start = pd.Timestamp(self.start_date)
            end = pd.Timestamp(self.end_date)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid date range: {exc}") from exc
        if end < start:
            raise ConfigurationError(f"end_date {self.end_date} is before start_date {self.start_date}")
        if self.n_weeks == 0:
            raise ConfigurationError(
                f"no week-ending Sunday between {self.start_date} and {self.end_date}"
            )

        if not np.isfinite(self.baseline):
            raise ConfigurationError("baseline must be finite")
        if not np.isfinite(self.scale) or self.scale < 0:
            raise ConfigurationError(f"scale must be finite and non-negative, got {self.scale}")
        if len(self.weights) != 3:
            raise ConfigurationError("weights must hold (national, regional, state) values")
        if not all(np.isfinite(w) for w in self.weights):
            raise ConfigurationError("weights must be finite")

        self.national_arima.validate('national')
        self.regional_arima.validate('regional')
        self.state_arima.validate('state')

        if not self.channels:
            raise ConfigurationError("at least one channel is required")
        names = self.channel_names
        if len(set(names)) != len(names):
            raise ConfigurationError(f"duplicate channel names: {names}")
        for channel in self.channels:
            channel.validate()

        if set(self.true_coefficients) != set(names):
            missing = sorted(set(names) - set(self.true_coefficients))
            extra = sorted(set(self.true_coefficients) - set(names))
            raise ConfigurationError(
                f"true_coefficients must cover the channel set exactly "
                f"(missing={missing}, unknown={extra})"
            )
        if not all(np.isfinite(v) for v in self.true_coefficients.values()):
            raise ConfigurationError("true_coefficients must be finite")

    @property
    def weeks(self) -> pd.DatetimeIndex:
        """Week-ending Sundays between ``start_date`` and ``end_date``."""
        return pd.date_range(self.start_date, self.end_date, freq=WEEK_FREQ, name='week')

    @property
    def n_weeks(self) -> int:
        return len(self.weeks)

    @property
    def channel_names(self) -> Tuple[str, ...]:
        return tuple(channel.name for channel in self.channels)

    @property
    def state_labels(self) -> Tuple[str, ...]:
        return tuple(f"S{i}" for i in range(1, self.n_states + 1))

    @property
    def region_labels(self) -> Tuple[str, ...]:
        return tuple(f"R{i}" for i in range(1, self.n_regions + 1))

    def replace(self, **changes) -> 'SimulationConfig':
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict:
        """Plain-python representation, suitable for ``json.dump``."""
        return {
            'n_states': self.n_states,
            'n_regions': self.n_regions,
            'start_date': str(self.start_date),
            'end_date': str(self.end_date),
            'n_weeks': self.n_weeks,
            'seed': self.seed,
            'baseline': self.baseline,
            'scale': self.scale,
            'weights': {
                'national': self.weights[0],
                'regional': self.weights[1],
                'state': self.weights[2],
            },
            'arima': {
                'national': dataclasses.asdict(self.national_arima),
                'regional': dataclasses.asdict(self.regional_arima),
                'state': dataclasses.asdict(self.state_arima),
            },
            'channels': [dataclasses.asdict(channel) for channel in self.channels],
            'true_coefficients': dict(self.true_coefficients),
        }
