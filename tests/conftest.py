"""
Shared fixtures for the panel_mmm test suite.
"""
import matplotlib
matplotlib.use('Agg')

import pytest

from panel_mmm import SimulationConfig, run_simulation


@pytest.fixture(scope='session')
def default_config():
    """Reference configuration (seed 123, 50 states, 5 regions, 104 weeks)."""
    return SimulationConfig()


@pytest.fixture(scope='session')
def default_result(default_config):
    """Full simulation with the reference configuration."""
    return run_simulation(default_config)


@pytest.fixture(scope='session')
def small_config():
    """Small panel for quick structural checks."""
    return SimulationConfig(n_states=8, n_regions=3, start_date='2023-01-01',
                            end_date='2023-06-30', seed=7)


@pytest.fixture(scope='session')
def low_noise_result(default_config):
    """Simulation where the shocks are tiny relative to the media effect."""
    return run_simulation(default_config.replace(scale=0.1))
