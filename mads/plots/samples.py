"""
Sample matrix and data series plots.
"""

from typing import Any, Mapping, Optional

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from mads.config import DEFAULT_CONFIG, PLOT_SIZES, MadsConfig
from mads.data.problem import MadsError, get_opt_param_keys, get_plot_labels
from mads.plots.formats import save_figure
from mads.plots.shaping import samples_frame
from mads.plots.style import COLORS, apply_style, parameter_palette, stacked_axes


def scatter_plot_samples(
    madsdata: Mapping[str, Any],
    samples: np.ndarray,
    filename: str,
    format: str = '',
    dot_size: float = 2.5,
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Pairwise scatter matrix of parameter samples.

    Histograms on the diagonal, scatter plots elsewhere.

    Args:
        madsdata: Problem dictionary (labels of the adjustable parameters)
        samples: Matrix of samples, one row per sample and one column per
            adjustable parameter
        filename: Output file name
        format: Output plot format (``png``, ``pdf``, etc.)
        dot_size: Marker diameter in points
    """
    config = config or DEFAULT_CONFIG
    paramkeys = get_opt_param_keys(madsdata)
    labels = get_plot_labels(madsdata, paramkeys)
    df = samples_frame(samples, labels)
    n = len(labels)
    if n == 0:
        raise MadsError("There are no adjustable parameters to plot")

    size = PLOT_SIZES.scatter_cell * n
    fig, axes = plt.subplots(n, n, figsize=(size, size), squeeze=False)
    for i, xlabel in enumerate(labels):
        for j, ylabel in enumerate(labels):
            ax = axes[i, j]
            if i == j:
                sns.histplot(df[xlabel], ax=ax, color=COLORS['primary'])
                apply_style(ax, xlabel=xlabel)
                ax.set_ylabel('')
            else:
                ax.scatter(df[xlabel], df[ylabel], s=dot_size ** 2, color=COLORS['primary'])
                apply_style(ax, xlabel=xlabel, ylabel=ylabel)
    fig.tight_layout()
    save_figure(fig, filename, format, config)
    return fig


def plot_series(
    X: np.ndarray,
    filename: str,
    format: str = '',
    xtitle: str = 'X',
    ytitle: str = 'Y',
    title: str = 'Sources',
    name: str = 'Source',
    combined: bool = True,
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Plot the columns of ``X`` as series over their row index (1-based).

    Args:
        X: Matrix (points x series)
        combined: All series in one panel with a legend titled ``title``;
            otherwise one panel per series titled ``<name> <i>``
    """
    config = config or DEFAULT_CONFIG
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X[:, np.newaxis]
    nT, nS = X.shape
    x = np.arange(1, nT + 1)

    if combined:
        fig, ax = plt.subplots(figsize=(PLOT_SIZES.panel_width, PLOT_SIZES.panel_height))
        for i, color in enumerate(parameter_palette(nS)):
            ax.plot(x, X[:, i], color=color, label=f"{name} {i + 1}")
        ax.legend(title=title, loc='upper left', bbox_to_anchor=(1.0, 1.0), frameon=False)
        apply_style(ax, xlabel=xtitle, ylabel=ytitle)
    else:
        fig, axes = stacked_axes(nS, PLOT_SIZES.panel_width, PLOT_SIZES.series_height)
        for i, ax in enumerate(axes):
            ax.plot(x, X[:, i], color=COLORS['primary'])
            apply_style(ax, title=f"{name} {i + 1}", xlabel=xtitle, ylabel=ytitle)
        fig.tight_layout()

    save_figure(fig, filename, format, config)
    return fig
