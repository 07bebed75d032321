"""
Panel MMM Simulation Package

A synthetic media mix modeling workflow on a state/region panel:
- Panel construction (states, regions, weekly calendar)
- Hierarchical ARIMA shocks and sales synthesis
- Media spend generation for six channels
- Ground-truth coefficients and OLS recovery
"""

__version__ = "0.1.0"

from .config import (
    ArimaSpec,
    ChannelSpec,
    SimulationConfig,
    CHANNEL_NAMES,
)

from .exceptions import (
    SimulationError,
    ConfigurationError,
    GenerationError,
    EstimationError,
)

from .panel import Panel, build_panel
from .shocks import ShockSet, simulate_arima, generate_shocks
from .sales import synthesize_sales, regional_rollup, add_media_effect
from .media import generate_media, media_to_wide
from .ground_truth import assign_ground_truth, media_contribution

from .estimation import (
    MediaMixOLS,
    recover_coefficients
)

from .pipeline import (
    SimulationResult,
    run_simulation,
    save_outputs
)

__all__ = [
    # Configuration
    'ArimaSpec',
    'ChannelSpec',
    'SimulationConfig',
    'CHANNEL_NAMES',
    # Errors
    'SimulationError',
    'ConfigurationError',
    'GenerationError',
    'EstimationError',
    # Generation
    'Panel',
    'build_panel',
    'ShockSet',
    'simulate_arima',
    'generate_shocks',
    'synthesize_sales',
    'regional_rollup',
    'add_media_effect',
    'generate_media',
    'media_to_wide',
    'assign_ground_truth',
    'media_contribution',
    # Estimation
    'MediaMixOLS',
    'recover_coefficients',
    # Pipeline
    'SimulationResult',
    'run_simulation',
    'save_outputs'
]
