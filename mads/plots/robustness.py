"""
BIG-DT robustness curves: maximum probability of failure against the
info-gap horizon of uncertainty, one line per decision choice.
"""

from typing import Any, Mapping, Optional

import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns

from mads.config import DEFAULT_CONFIG, PLOT_SIZES, MadsConfig
from mads.data.problem import get_mads_rootname
from mads.plots.formats import save_figure
from mads.plots.shaping import robustness_frame
from mads.plots.style import apply_style, cycle_color


def plot_robustness_curves(
    madsdata: Mapping[str, Any],
    bigdtresults: Mapping[str, Any],
    filename: str = '',
    format: str = '',
    maxprob: float = 1.0,
    maxhoriz: float = np.inf,
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Plot BIG-DT robustness curves.

    Args:
        madsdata: Problem dictionary (choice names)
        bigdtresults: Output of ``do_bigdt``
        maxprob: Upper limit of the probability axis
        maxhoriz: Upper limit of the horizon axis (capped at the largest horizon)

    Output: ``<root>-robustness`` unless ``filename`` is given.
    """
    config = config or DEFAULT_CONFIG
    df = robustness_frame(madsdata, bigdtresults)
    maxhoriz = min(maxhoriz, float(df['horizon'].max()))

    choices = list(df['Choices'].unique())
    palette = [cycle_color(i) for i in range(len(choices))]

    fig, ax = plt.subplots(figsize=(PLOT_SIZES.robustness_width, PLOT_SIZES.robustness_height))
    sns.lineplot(data=df, x='horizon', y='maxfailureprob', hue='Choices',
                 hue_order=choices, palette=palette, ax=ax)
    ax.set_xlim(right=maxhoriz)
    ax.set_ylim(top=maxprob)
    apply_style(ax, xlabel='Horizon of uncertainty', ylabel='Maximum probability of failure')

    if filename == '':
        filename = f"{get_mads_rootname(madsdata)}-robustness"
    save_figure(fig, filename, format, config)
    return fig
