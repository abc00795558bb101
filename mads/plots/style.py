"""
Plot styling shared by all MADS figures.

Neutral palette, minimal axis decoration.
"""

import matplotlib.pyplot as plt
import seaborn as sns

from mads.config import CYCLE_COLORS

COLORS = {
    'primary': '#2C3E50',      # Dark blue-gray
    'secondary': '#7F8C8D',    # Gray
    'background': '#FAFAFA',   # Off-white
    'grid': '#ECF0F1',         # Light gray grid
    'source': 'orange',        # Contaminant source boxes
}


def apply_style(ax, title: str = None, xlabel: str = None, ylabel: str = None):
    """Apply consistent styling to axis."""
    ax.set_facecolor(COLORS['background'])
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.spines['left'].set_color(COLORS['secondary'])
    ax.spines['bottom'].set_color(COLORS['secondary'])
    ax.tick_params(colors=COLORS['primary'])
    ax.grid(True, alpha=0.3, color=COLORS['grid'])

    if title:
        ax.set_title(title, fontsize=12, fontweight='bold', color=COLORS['primary'])
    if xlabel:
        ax.set_xlabel(xlabel, fontsize=10, color=COLORS['primary'])
    if ylabel:
        ax.set_ylabel(ylabel, fontsize=10, color=COLORS['primary'])


def cycle_color(i: int) -> str:
    """Sample trajectory color, cycling through the fixed palette."""
    return CYCLE_COLORS[i % len(CYCLE_COLORS)]


def parameter_palette(n: int):
    """Distinct colors for per-parameter effect lines."""
    return sns.color_palette('tab10' if n <= 10 else 'husl', n)


def stacked_axes(n_panels: int, width: float, panel_height: float):
    """Figure with ``n_panels`` vertically stacked axes (always a list)."""
    fig, axes = plt.subplots(n_panels, 1, figsize=(width, panel_height * n_panels), squeeze=False)
    return fig, list(axes[:, 0])
