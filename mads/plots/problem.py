"""
Problem setup and grid plots: where the wells and contaminant sources are,
and the simulated concentration field around them.
"""

from typing import Any, Mapping, Optional

import numpy as np
import matplotlib.pyplot as plt
from matplotlib import colors as mcolors
from matplotlib import ticker
from matplotlib.patches import Rectangle

from mads.config import DEFAULT_CONFIG, GRID_LEVELS, PLOT_SIZES, MadsConfig
from mads.data.problem import (
    MadsError,
    get_mads_rootname,
    get_well_keys,
    get_well_target,
)
from mads.plots.formats import save_figure
from mads.plots.shaping import problem_frame, source_rectangles
from mads.plots.style import COLORS, apply_style


def plot_mads_problem(
    madsdata: Mapping[str, Any],
    format: str = '',
    filename: str = '',
    keyword: str = '',
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Plot contaminant sources and wells defined in the problem.

    Output: ``<root>-problemsetup`` or ``<root>-<keyword>-problemsetup``.
    """
    config = config or DEFAULT_CONFIG
    dfw = problem_frame(madsdata)
    rectangles = source_rectangles(madsdata)
    if dfw.empty and len(rectangles) == 0:
        raise MadsError("Nothing to plot!")

    xs = np.concatenate([dfw['x'].values, rectangles[:, 0], rectangles[:, 0] + rectangles[:, 2]])
    ys = np.concatenate([dfw['y'].values, rectangles[:, 1], rectangles[:, 1] + rectangles[:, 3]])
    xmin, xmax = xs.min(), xs.max()
    ymin, ymax = ys.min(), ys.max()
    dx = xmax - xmin
    dy = ymax - ymin

    fig, ax = plt.subplots(figsize=(PLOT_SIZES.problem_width, PLOT_SIZES.problem_height))

    for xo, yo, w, h in rectangles:
        ax.add_patch(Rectangle(
            (xo, yo), w, h,
            facecolor=COLORS['source'], edgecolor=COLORS['source'], alpha=0.2
        ))

    ax.scatter(dfw['x'], dfw['y'], s=25, color=COLORS['primary'], label='Wells', zorder=3)
    for _, row in dfw.iterrows():
        ax.annotate(row['label'], xy=(row['x'], row['y']), xytext=(3, 3),
                    textcoords='offset points', fontsize=8, color=COLORS['primary'])

    ax.set_xlim(xmin - dx / 6, xmax + dx / 6)
    ax.set_ylim(ymin - dy / 6, ymax + dy / 6)
    ax.xaxis.set_major_formatter(ticker.FormatStrFormatter('%.0f'))
    ax.yaxis.set_major_formatter(ticker.FormatStrFormatter('%.0f'))
    for label in ax.get_yticklabels():
        label.set_rotation(90)
    ax.legend(loc='upper right', frameon=False)
    apply_style(ax, xlabel='x [m]', ylabel='y [m]')

    if filename == '':
        rootname = get_mads_rootname(madsdata)
        if keyword != '':
            filename = f"{rootname}-{keyword}-problemsetup"
        else:
            filename = f"{rootname}-problemsetup"
    save_figure(fig, filename, format, config)
    return fig


def plot_grid(
    madsdata: Mapping[str, Any],
    s: np.ndarray,
    addtitle: bool = True,
    title: str = '',
    filename: str = '',
    format: str = '',
    config: Optional[MadsConfig] = None
) -> plt.Figure:
    """
    Contour a gridded model solution with the wells on top.

    Args:
        madsdata: Problem dictionary with a ``Grid`` section
        s: Concentrations on the grid, (nx, ny) or (nx, ny, nt); the first
           time slice is drawn
        addtitle: Add a plot title
        title: Plot title (default: problem name and grid time)
    """
    config = config or DEFAULT_CONFIG
    if 'Grid' not in madsdata:
        raise MadsError("There is no 'Grid' data in the MADS input dataset")
    grid = madsdata['Grid']
    xmin, xmax = grid['xmin'], grid['xmax']
    ymin, ymax = grid['ymin'], grid['ymax']

    s = np.asarray(s, dtype=float)
    field = s[:, :, 0] if s.ndim == 3 else s
    field = np.ma.masked_less_equal(field.T, 0)

    levels = GRID_LEVELS
    norm = mcolors.LogNorm(vmin=min(levels), vmax=max(levels))

    w, h = plt.figaspect(0.5)
    fig, ax = plt.subplots(figsize=(w, h))
    ax.set_aspect('equal')
    contours = ax.contourf(
        field, levels=levels, norm=norm, cmap='jet', origin='lower',
        extent=[xmin, xmax, ymin, ymax]
    )
    fig.colorbar(contours, ax=ax, shrink=0.5)

    x, y, c, labels = [], [], [], []
    for wellname in get_well_keys(madsdata, on_only=False):
        well = madsdata['Wells'][wellname]
        obs = well.get('obs') or []
        target = get_well_target(obs[-1]) if obs else None
        x.append(well['x'])
        y.append(well['y'])
        c.append(target if target is not None else min(levels))
        labels.append(wellname)
    if x:
        clipped = np.clip(np.asarray(c, dtype=float), min(levels), max(levels))
        ax.scatter(x, y, marker='o', c=clipped, s=70, cmap='jet', norm=norm, edgecolors='k')
        for label, xi, yi in zip(labels, x, y):
            ax.annotate(label, xy=(xi, yi), xytext=(-2, 2), fontsize=8,
                        textcoords='offset points', ha='right', va='bottom')

    if addtitle:
        if title == '':
            probname = get_mads_rootname(madsdata, first=False)
            title = f"{probname} Time = {grid.get('time', '')}"
        ax.set_title(title)

    if filename == '':
        filename = f"{get_mads_rootname(madsdata)}-grid"
    save_figure(fig, filename, format, config)
    return fig
