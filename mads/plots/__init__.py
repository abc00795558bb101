"""
Plots module: image output, data shaping and the MADS plot builders.
"""

from .formats import ImageFormat, set_image_file_format, save_figure
from .matches import plot_matches
from .problem import plot_mads_problem, plot_grid
from .robustness import plot_robustness_curves
from .samples import scatter_plot_samples, plot_series
from .sensitivity import plot_well_sa_results, plot_obs_sa_results
from .spaghetti import spaghetti_plot, spaghetti_plots

__all__ = [
    'ImageFormat', 'set_image_file_format', 'save_figure',
    'plot_matches', 'plot_mads_problem', 'plot_grid',
    'plot_robustness_curves', 'scatter_plot_samples', 'plot_series',
    'plot_well_sa_results', 'plot_obs_sa_results',
    'spaghetti_plot', 'spaghetti_plots',
]
