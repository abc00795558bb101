"""
Model predictions against observations, per well or for the whole
observation set.
"""

import re
from collections import OrderedDict
from typing import Any, Callable, List, Mapping, Optional, Pattern, Union

import pandas as pd
import matplotlib.pyplot as plt

from mads.config import DEFAULT_CONFIG, MATCH_COLORS, PLOT_SIZES, MadsConfig
from mads.data.forward import ModelFunction, forward
from mads.data.problem import (
    copy_problem,
    get_mads_rootname,
    set_obs_weights,
    set_well_weights,
    with_well_observations,
)
from mads.plots.formats import save_figure
from mads.plots.shaping import match_frame
from mads.plots.style import apply_style, stacked_axes


def _draw_match(ax, df: pd.DataFrame):
    """Prediction as a line (points when single), targets as points."""
    pred = df.dropna(subset=['prediction'])
    obs = df.dropna(subset=['target'])
    if len(pred) > 1:
        ax.plot(pred['time'], pred['prediction'], color=MATCH_COLORS['prediction'],
                linewidth=3, label='Model')
    else:
        ax.scatter(pred['time'], pred['prediction'], color=MATCH_COLORS['prediction'],
                   s=30, label='Model', zorder=3)
    ax.scatter(obs['time'], obs['target'], color=MATCH_COLORS['observation'],
               s=30, label='Observations', zorder=4)


def _filter_observations(
    madsdata: Mapping[str, Any],
    result: Mapping[str, float],
    rx: Pattern,
    key2time: Callable[[str], float]
):
    """Restrict observations and results to keys matching ``rx``."""
    newobs = OrderedDict()
    newresult = OrderedDict()
    for key, obs in madsdata.get('Observations', {}).items():
        if rx.search(key):
            obs = dict(obs)
            if 'time' not in obs:
                obs['time'] = key2time(key)
            newobs[key] = obs
            if key in result:
                newresult[key] = result[key]
    newmadsdata = {k: v for k, v in madsdata.items() if k != 'Wells'}
    newmadsdata['Observations'] = newobs
    return newmadsdata, newresult


def plot_matches(
    madsdata: Mapping[str, Any],
    result: Optional[Mapping[str, float]] = None,
    rx: Union[str, Pattern, None] = None,
    filename: str = '',
    format: str = '',
    title: str = '',
    ylabel: str = 'y',
    xlabel: str = 'time',
    separate_files: bool = False,
    hsize: float = PLOT_SIZES.panel_width,
    key2time: Callable[[str], float] = lambda k: 0.0,
    model: Optional[ModelFunction] = None,
    config: Optional[MadsConfig] = None
) -> Union[plt.Figure, List[plt.Figure]]:
    """
    Plot the matches between model predictions and observations.

    Args:
        madsdata: Problem dictionary
        result: Model predictions; computed with all weights set to 1 when None
        rx: Regular expression selecting observations to plot
        filename: Output file name (default ``<root>-match``)
        format: Output plot format (``png``, ``pdf``, etc.)
        separate_files: One file per well (``<root>-match-<well>``)
        key2time: Time for selected observations that have none

    Returns:
        The figure, or the list of per-well figures with ``separate_files``
    """
    config = config or DEFAULT_CONFIG
    madsdata = with_well_observations(madsdata)
    if result is None:
        weighted = copy_problem(madsdata)
        if 'Wells' in weighted:
            set_well_weights(weighted, 1)
        elif 'Observations' in weighted:
            set_obs_weights(weighted, 1)
        result = forward(weighted, model=model)

    if rx is not None:
        if isinstance(rx, str):
            rx = re.compile(rx)
        if title == '':
            title = rx.pattern
        madsdata, result = _filter_observations(madsdata, result, rx, key2time)

    rootname = get_mads_rootname(madsdata)
    df = match_frame(madsdata, result)

    if 'Wells' in madsdata:
        groups = list(df.groupby('well', sort=False))
        if separate_files:
            figures = []
            for wellname, welldf in groups:
                fig, ax = plt.subplots(figsize=(hsize, PLOT_SIZES.panel_height))
                _draw_match(ax, welldf)
                apply_style(ax, title=wellname, xlabel=xlabel, ylabel=ylabel)
                save_figure(fig, f"{rootname}-match-{wellname}", format, config)
                figures.append(fig)
            return figures

        fig, axes = stacked_axes(len(groups), hsize, PLOT_SIZES.panel_height)
        for ax, (wellname, welldf) in zip(axes, groups):
            _draw_match(ax, welldf)
            apply_style(ax, title=wellname, xlabel=xlabel, ylabel=ylabel)
    else:
        fig, ax = plt.subplots(figsize=(hsize, PLOT_SIZES.panel_height))
        _draw_match(ax, df)
        apply_style(ax, title=title, xlabel=xlabel, ylabel=ylabel)

    fig.tight_layout()
    if filename == '':
        filename = f"{rootname}-match"
    save_figure(fig, filename, format, config)
    return fig
