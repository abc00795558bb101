"""
Sensitivity Analysis Plots

Total effects, main effects and output variances of the adjustable
parameters over time, stacked under the observed data:
- per well (Wells problems)
- over a filtered set of observations
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Pattern, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from mads.config import (
    DEFAULT_CONFIG,
    PLOT_SIZES,
    SA_EFFECTS,
    SA_XTITLE,
    SA_YTITLE,
    MadsConfig,
)
from mads.data.problem import (
    MadsError,
    filter_keys,
    get_extension,
    get_mads_rootname,
    get_opt_param_keys,
    get_plot_labels,
    get_rootname,
    get_target,
    get_time,
    get_well_keys,
    well_obs_key,
)
from mads.plots.formats import save_figure
from mads.plots.shaping import (
    clamp_float32,
    effect_frame,
    normalize_total_effects,
    sa_effects,
)
from mads.plots.style import COLORS, apply_style, parameter_palette, stacked_axes

logger = logging.getLogger(__name__)

EFFECT_ORDER = ('tes', 'mes', 'var')


def _draw_effect(ax, df: pd.DataFrame, xtitle: str, ylabel: str, legend: bool = True, unit_range: bool = False):
    labels = list(pd.unique(df['parameter']))
    palette = parameter_palette(len(labels))
    for color, label in zip(palette, labels):
        part = df[df['parameter'] == label]
        ax.plot(part['x'], part['y'], color=color, linewidth=1.5, label=label)
    if unit_range:
        ax.set_ylim(0, 1)
    if legend:
        ax.legend(loc='upper left', bbox_to_anchor=(1.0, 1.0), frameon=False, fontsize=8)
    apply_style(ax, xlabel=xtitle, ylabel=ylabel)


def _effect_frames(
    times: np.ndarray,
    effects: Dict[str, np.ndarray],
    labels: List[str],
    clamp: bool
) -> Dict[str, pd.DataFrame]:
    """Non-empty effect frames keyed by effect name, in plotting order."""
    frames = {}
    for name in EFFECT_ORDER:
        df = effect_frame(times, effects[name], labels)
        if df.empty:
            continue
        if clamp:
            df = clamp_float32(df, name.upper())
        frames[name] = df
    return frames


def _print_ranges(tag: str, df: pd.DataFrame):
    print(f"{tag} xmax {df['x'].max()} xmin {df['x'].min()} ymax {df['y'].max()} ymin {df['y'].min()}")


def plot_well_sa_results(
    madsdata: Mapping[str, Any],
    result: Mapping[str, Any],
    wellname: Optional[str] = None,
    xtitle: str = SA_XTITLE,
    ytitle: str = SA_YTITLE,
    filename: str = '',
    format: str = '',
    config: Optional[MadsConfig] = None
) -> Union[plt.Figure, List[plt.Figure]]:
    """
    Plot sensitivity analysis results for one well, or every active well.

    Args:
        madsdata: Problem dictionary with a ``Wells`` section
        result: Sensitivity results with ``mes``, ``tes``, ``var``,
            ``samplesize`` and ``method``
        wellname: Well to plot (all active wells when None)
        filename: Output file name (default ``<root>-<well>-<method>-<samplesize>``)

    Returns:
        The figure, or one figure per well when ``wellname`` is None
    """
    config = config or DEFAULT_CONFIG
    if 'Wells' not in madsdata:
        raise MadsError("There is no 'Wells' data in the MADS input dataset")

    if wellname is None:
        wells = get_well_keys(madsdata)
        figures = []
        for name in wells:
            wellfile = filename
            if filename != '' and len(wells) > 1:
                root, ext = get_rootname(filename), get_extension(filename)
                wellfile = f"{root}-{name}" + (f".{ext}" if ext else '')
            figures.append(plot_well_sa_results(
                madsdata, result, name, xtitle=xtitle, ytitle=ytitle,
                filename=wellfile, format=format, config=config
            ))
        return figures

    if wellname not in madsdata['Wells']:
        raise MadsError(f"There is no well with name {wellname} in 'Wells' class of the MADS input dataset")

    samples = madsdata['Wells'][wellname].get('obs', []) or []
    if not samples:
        raise MadsError("No data to plot")
    paramkeys = get_opt_param_keys(madsdata)
    times = np.array([get_time(o, wellname) for o in samples], dtype=float)
    targets = np.array([get_target(o, wellname) for o in samples], dtype=float)
    obskeys = [well_obs_key(wellname, get_time(o, wellname, warn=False)) for o in samples]

    effects = sa_effects(result, obskeys, paramkeys)
    frames = _effect_frames(times, effects, paramkeys, clamp=False)

    fig, axes = stacked_axes(1 + len(frames), PLOT_SIZES.panel_width, PLOT_SIZES.panel_height)
    axes[0].scatter(times, targets, color=COLORS['primary'], s=20)
    apply_style(axes[0], title=wellname, xlabel=xtitle, ylabel=ytitle)
    for i, (ax, (name, df)) in enumerate(zip(axes[1:], frames.items())):
        _draw_effect(ax, df, xtitle, SA_EFFECTS[name], legend=(i == 0))
    fig.tight_layout()

    if filename == '':
        rootname = get_mads_rootname(madsdata)
        filename = f"{rootname}-{wellname}-{result['method']}-{result['samplesize']}"
    save_figure(fig, filename, format, config)
    return fig


def plot_obs_sa_results(
    madsdata: Mapping[str, Any],
    result: Mapping[str, Any],
    filter: Union[str, Pattern] = '',
    keyword: str = '',
    filename: str = '',
    format: str = '',
    debug: bool = False,
    separate_files: bool = False,
    xtitle: str = SA_XTITLE,
    ytitle: str = SA_YTITLE,
    config: Optional[MadsConfig] = None
) -> Union[plt.Figure, List[plt.Figure]]:
    """
    Plot sensitivity analysis results for the observations.

    Total effects are shifted to be non-negative and scaled into [0, 1].

    Args:
        madsdata: Problem dictionary with an ``Observations`` section
        result: Sensitivity results
        filter: Plot only observations whose key contains ``filter``
        keyword: Added to the default file name
        debug: Print data ranges of every panel
        separate_files: Write total and main effects to separate files
            (``-total_effect`` / ``-main_effect``)

    Returns:
        The stacked figure, or [total effect, main effect] figures
    """
    config = config or DEFAULT_CONFIG
    if 'Observations' not in madsdata:
        raise MadsError("There is no 'Observations' class in the MADS input dataset")

    obsdict = madsdata['Observations']
    obskeys = filter_keys(obsdict, filter)
    if not obskeys:
        raise MadsError("No data to plot")
    paramkeys = get_opt_param_keys(madsdata)
    plotlabels = get_plot_labels(madsdata, paramkeys)

    times = np.array([get_time(obsdict[k], k) for k in obskeys], dtype=float)
    targets = np.array([get_target(obsdict[k], k) for k in obskeys], dtype=float)

    effects = sa_effects(result, obskeys, paramkeys)
    effects['tes'] = normalize_total_effects(effects['tes'])
    frames = _effect_frames(times, effects, plotlabels, clamp=True)

    if debug:
        _print_ranges("DAT", pd.DataFrame({'x': times, 'y': targets}))
        for name, df in frames.items():
            _print_ranges(name.upper(), df)

    if filename == '':
        rootname = get_mads_rootname(madsdata)
        method = result['method']
        if keyword != '':
            filename = f"{rootname}-{method}-{keyword}-{result['samplesize']}"
        else:
            filename = f"{rootname}-{method}-{result['samplesize']}"

    if separate_files:
        root, ext = get_rootname(filename), get_extension(filename)
        suffix = f".{ext}" if ext else ''
        figures = []
        for name, tag in (('tes', 'total_effect'), ('mes', 'main_effect')):
            if name not in frames:
                logger.warning("No %s values to plot", SA_EFFECTS[name])
                continue
            fig, ax = plt.subplots(figsize=(PLOT_SIZES.panel_width, PLOT_SIZES.panel_height))
            _draw_effect(ax, frames[name], xtitle, SA_EFFECTS[name], unit_range=True)
            save_figure(fig, f"{root}-{tag}{suffix}", format, config)
            figures.append(fig)
        return figures

    fig, axes = stacked_axes(1 + len(frames), PLOT_SIZES.panel_width, PLOT_SIZES.panel_height)
    axes[0].plot(times, targets, color=COLORS['primary'], linewidth=1.5)
    apply_style(axes[0], xlabel=xtitle, ylabel=ytitle)
    for ax, (name, df) in zip(axes[1:], frames.items()):
        _draw_effect(ax, df, xtitle, SA_EFFECTS[name], unit_range=(name != 'var'))
    fig.tight_layout()
    save_figure(fig, filename, format, config)
    return fig
