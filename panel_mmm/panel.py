"""
Panel construction: state-to-region assignment and the weekly calendar.
"""

import warnings
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .config import SimulationConfig


@dataclass(frozen=True, eq=False)
class Panel:
    """
    Cross-sectional and time structure of a simulation.

    Attributes
    ----------
    assignments : DataFrame
        One row per state with columns ``state`` and ``region``
    weeks : DatetimeIndex
        Ordered week-ending Sundays
    regions : tuple of str
        All region labels, including regions that drew no states
    """
    assignments: pd.DataFrame
    weeks: pd.DatetimeIndex
    regions: Tuple[str, ...]

    @property
    def states(self) -> Tuple[str, ...]:
        return tuple(self.assignments['state'])

    @property
    def state_regions(self) -> Dict[str, str]:
        return dict(zip(self.assignments['state'], self.assignments['region']))

    def region_of(self, state: str) -> str:
        """Region label of ``state``."""
        try:
            return self.state_regions[state]
        except KeyError:
            raise KeyError(f"Unknown state: {state}") from None

    def members(self, region: str) -> List[str]:
        """States assigned to ``region``, in state order."""
        if region not in self.regions:
            raise KeyError(f"Unknown region: {region}")
        mask = self.assignments['region'] == region
        return self.assignments.loc[mask, 'state'].tolist()


def assign_regions(states, regions, rng: np.random.Generator) -> pd.DataFrame:
    """
    Assign every state to one region, uniformly with replacement.

    Parameters
    ----------
    states : sequence of str
        State labels
    regions : sequence of str
        Region labels
    rng : numpy.random.Generator
        Random source

    Returns
    -------
    DataFrame
        Columns ``state`` and ``region``, one row per state
    """
    drawn = rng.choice(np.asarray(regions), size=len(states), replace=True)
    return pd.DataFrame({'state': list(states), 'region': drawn.tolist()})


def build_panel(cfg: SimulationConfig) -> Panel:
    """
    Build the state/region panel and weekly calendar for ``cfg``.

    The region draw uses its own stream seeded with ``cfg.seed``, so the
    assignment only depends on the seed and the two counts.
    """
    rng = np.random.default_rng(cfg.seed)

    assignments = assign_regions(cfg.state_labels, cfg.region_labels, rng)

    empty = sorted(set(cfg.region_labels) - set(assignments['region']),
                   key=cfg.region_labels.index)
    if empty:
        warnings.warn(f"Regions without member states: {', '.join(empty)}")

    return Panel(assignments=assignments, weeks=cfg.weeks, regions=cfg.region_labels)
