"""
Spaghetti Plots

Model predictions for sampled parameter values drawn over the observations,
either one parameter at a time or all adjustable parameters together.
"""

from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from mads.config import DEFAULT_CONFIG, PLOT_SIZES, MadsConfig
from mads.data.forward import ModelFunction, make_mads_command_function
from mads.data.problem import (
    MadsError,
    get_mads_rootname,
    get_obs_keys,
    get_opt_param_keys,
    with_well_observations,
)
from mads.data.sampling import parameter_sample
from mads.log import madsoutput
from mads.plots.formats import save_figure
from mads.plots.shaping import observation_series, spaghetti_matrix, well_series
from mads.plots.style import apply_style, cycle_color, stacked_axes

SamplesOrCount = Union[int, Mapping[str, Sequence[float]]]


def _resolve_samples(madsdata: Mapping[str, Any], samples: SamplesOrCount, seed: int):
    if isinstance(samples, (int, np.integer)):
        return parameter_sample(madsdata, int(samples), seed=seed if seed != 0 else None)
    return samples


def _draw_observations(ax, t, d, obs_plot_dots: bool):
    if obs_plot_dots:
        ax.scatter(t, d, color='red', s=9, zorder=3)
    else:
        ax.plot(t, d, color='black', linewidth=3, zorder=3)


def _series(madsdata: Mapping[str, Any]) -> pd.DataFrame:
    if 'Wells' in madsdata:
        return well_series(madsdata)
    return observation_series(madsdata)


def _draw_spaghetti(
    data: pd.DataFrame,
    Y: np.ndarray,
    obskeys: Sequence[str],
    xtitle: str,
    ytitle: str,
    obs_plot_dots: bool
) -> plt.Figure:
    """Observations and sample trajectories, one panel per active well."""
    numberofsamples = Y.shape[1]
    if 'well' not in data:
        fig, ax = plt.subplots(figsize=(PLOT_SIZES.panel_width, PLOT_SIZES.panel_height))
        for i in range(numberofsamples):
            ax.plot(data['time'], Y[:, i], color=cycle_color(i), linewidth=1)
        _draw_observations(ax, data['time'], data['target'], obs_plot_dots)
        apply_style(ax, xlabel=xtitle, ylabel=ytitle)
        return fig

    rows = {k: j for j, k in enumerate(obskeys)}
    groups = list(data.groupby('well', sort=False))
    fig, axes = stacked_axes(len(groups), PLOT_SIZES.panel_width, PLOT_SIZES.panel_height)
    for ax, (wellname, welldata) in zip(axes, groups):
        index = [rows[k] for k in welldata['name']]
        for i in range(numberofsamples):
            ax.plot(welldata['time'], Y[index, i], color=cycle_color(i), linewidth=1)
        _draw_observations(ax, welldata['time'], welldata['target'], obs_plot_dots)
        apply_style(ax, title=wellname, xlabel=xtitle, ylabel=ytitle)
    fig.tight_layout()
    return fig


def spaghetti_plots(
    madsdata: Mapping[str, Any],
    samples: SamplesOrCount,
    format: str = '',
    keyword: str = '',
    xtitle: str = 'X',
    ytitle: str = 'Y',
    obs_plot_dots: bool = True,
    seed: int = 0,
    model: Optional[ModelFunction] = None,
    config: Optional[MadsConfig] = None
) -> list:
    """
    Generate a separate spaghetti plot for each adjustable parameter.

    Only the plotted parameter varies; the others stay at their initial values.

    Args:
        madsdata: Problem dictionary
        samples: Parameter name -> sample values, or a number of samples to draw
        keyword: Added to the file names
        obs_plot_dots: Plot observations as dots (otherwise as a line)
        seed: Random seed used when drawing samples (0 for none)

    Output: ``<root>[-<keyword>]-<param>-<n>-spaghetti`` per parameter.
    """
    config = config or DEFAULT_CONFIG
    madsdata = with_well_observations(madsdata)
    data = _series(madsdata)
    samples = _resolve_samples(madsdata, samples, seed)
    rootname = get_mads_rootname(madsdata)
    func = make_mads_command_function(madsdata, model=model, calczeroweightobs=True)
    paramoptkeys = get_opt_param_keys(madsdata)
    if not paramoptkeys:
        raise MadsError("There are no adjustable parameters to sample")
    obskeys = get_obs_keys(madsdata)
    numberofsamples = len(samples[paramoptkeys[0]])

    madsoutput("Spaghetti plots for each selected model parameter (type != null) ...", config)
    figures = []
    for paramkey in paramoptkeys:
        madsoutput(f"Parameter: {paramkey} ...", config)
        Y = spaghetti_matrix(madsdata, samples, func, [paramkey], obskeys, config)
        fig = _draw_spaghetti(data, Y, obskeys, xtitle, ytitle, obs_plot_dots)
        if keyword == '':
            filename = f"{rootname}-{paramkey}-{numberofsamples}-spaghetti"
        else:
            filename = f"{rootname}-{keyword}-{paramkey}-{numberofsamples}-spaghetti"
        save_figure(fig, filename, format, config)
        figures.append(fig)
    return figures


def spaghetti_plot(
    madsdata: Mapping[str, Any],
    samples: SamplesOrCount,
    filename: str = '',
    keyword: str = '',
    format: str = '',
    xtitle: str = 'X',
    ytitle: str = 'Y',
    obs_plot_dots: bool = True,
    seed: int = 0,
    model: Optional[ModelFunction] = None,
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Generate a combined spaghetti plot with all adjustable parameters sampled.

    Output: ``<root>[-<keyword>]-<n>-spaghetti`` unless ``filename`` is given.
    """
    config = config or DEFAULT_CONFIG
    madsdata = with_well_observations(madsdata)
    data = _series(madsdata)
    samples = _resolve_samples(madsdata, samples, seed)
    rootname = get_mads_rootname(madsdata)
    func = make_mads_command_function(madsdata, model=model, calczeroweightobs=True)
    paramoptkeys = get_opt_param_keys(madsdata)
    if not paramoptkeys:
        raise MadsError("There are no adjustable parameters to sample")
    obskeys = get_obs_keys(madsdata)
    numberofsamples = len(samples[paramoptkeys[0]])

    madsoutput("Spaghetti plots for all the selected model parameter (type != null) ...", config)
    Y = spaghetti_matrix(madsdata, samples, func, paramoptkeys, obskeys, config)
    fig = _draw_spaghetti(data, Y, obskeys, xtitle, ytitle, obs_plot_dots)

    if filename == '':
        if keyword == '':
            filename = f"{rootname}-{numberofsamples}-spaghetti"
        else:
            filename = f"{rootname}-{keyword}-{numberofsamples}-spaghetti"
    save_figure(fig, filename, format, config)
    return fig
