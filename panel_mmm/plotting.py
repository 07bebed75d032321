"""
Static charts for inspecting a simulation.
"""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_regional_sales(rollup: pd.DataFrame, value: str = 'sales', ax=None):
    """
    Line chart of weekly regional totals, one line per region.

    Parameters
    ----------
    rollup : DataFrame
        Output of ``regional_rollup`` (``region``, ``week``, ``value``)
    value : str, default='sales'
        Column to plot
    ax : matplotlib Axes, optional
        Axes to draw on; a new figure is created when omitted

    Returns
    -------
    matplotlib.figure.Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))
    else:
        fig = ax.figure

    for region, sub in rollup.groupby('region', sort=True):
        ax.plot(sub['week'], sub[value], label=region)

    ax.set_xlabel('Week')
    ax.set_ylabel(f'Total {value.replace("_", " ")}')
    ax.set_title('Weekly Sales by Region')
    ax.legend()
    ax.grid(True, alpha=0.3)
    fig.autofmt_xdate()
    return fig


def plot_coefficient_recovery(comparison: pd.DataFrame, ax=None):
    """
    Estimated coefficients with confidence intervals against the truth.

    Parameters
    ----------
    comparison : DataFrame
        Output of ``MediaMixOLS.compare_to_truth``
    ax : matplotlib Axes, optional

    Returns
    -------
    matplotlib.figure.Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))
    else:
        fig = ax.figure

    x = np.arange(len(comparison))
    estimate = comparison['coefficient'].to_numpy()
    yerr = np.vstack([
        estimate - comparison['ci_lower'].to_numpy(),
        comparison['ci_upper'].to_numpy() - estimate,
    ])

    ax.errorbar(x, estimate, yerr=yerr, fmt='o', capsize=4, label='Estimate (CI)')
    ax.scatter(x, comparison['true_coefficient'], marker='x', color='red',
               zorder=3, label='True coefficient')

    ax.set_xticks(x)
    ax.set_xticklabels(comparison['channel'])
    ax.set_ylabel('Incremental sales per unit spend')
    ax.set_title('Coefficient Recovery')
    ax.legend()
    ax.grid(True, alpha=0.3)
    return fig
