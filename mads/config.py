"""
Central configuration for MADS plotting and decision support.

Run-time flags (quiet mode, verbosity, plotting switch) and plot layout
constants are defined here. The run-time flags live in a single
``MadsConfig`` object created once at startup and passed to the functions
that need it.
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

# =============================================================================
# RUN-TIME CONFIGURATION
# =============================================================================

@dataclass
class MadsConfig:
    """Process-wide settings, fixed once the run starts."""

    quiet: bool = True                 # Suppress progress output
    verbosity: int = 1                 # Messages above this level are hidden
    debug: int = 1                     # Debug message level
    plotting: bool = True              # Plot functions write images
    long_tests: bool = False           # Execute long tests
    output_dir: str = "."              # Directory for generated images
    dpi: int = 150                     # Raster resolution (PNG)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> 'MadsConfig':
        """
        Build configuration from MADS_* environment variables.

        MADS_QUIET and MADS_NOT_QUIET toggle quiet mode (the latter wins),
        MADS_NO_PLOT disables plotting and MADS_LONG_TESTS enables long tests.
        """
        if environ is None:
            environ = os.environ

        config = cls()
        if 'MADS_QUIET' in environ:
            config.quiet = True
        if 'MADS_NOT_QUIET' in environ:
            config.quiet = False
        if 'MADS_NO_PLOT' in environ:
            config.plotting = False
        if 'MADS_LONG_TESTS' in environ:
            config.long_tests = True

        for key, value in overrides.items():
            if not hasattr(config, key):
                raise TypeError(f"Unknown configuration option: {key}")
            setattr(config, key, value)
        return config

    def output_path(self, filename: str) -> str:
        """Place a bare filename inside the output directory."""
        if os.path.isabs(filename) or self.output_dir in ('', '.'):
            return filename
        return os.path.join(self.output_dir, filename)


DEFAULT_CONFIG = MadsConfig()

# =============================================================================
# PLOT LAYOUT (inches)
# =============================================================================

@dataclass(frozen=True)
class PlotSizes:
    """Figure dimensions used by the plot builders."""

    panel_width: float = 6.0           # Width of stacked panels
    panel_height: float = 4.0          # Height added per stacked panel
    problem_width: float = 6.0         # Problem setup plot
    problem_height: float = 4.0
    robustness_width: float = 4.0      # BIG-DT robustness curves
    robustness_height: float = 3.0
    scatter_cell: float = 3.0          # Scatter matrix cell size per variable
    series_height: float = 2.0         # Per-series height in separate layout

PLOT_SIZES = PlotSizes()

# Colors cycled through by spaghetti and robustness plots
CYCLE_COLORS: Tuple[str, ...] = ('red', 'blue', 'green', 'cyan', 'magenta', 'yellow')

# Model predictions vs. observations
MATCH_COLORS: Dict[str, str] = {
    'prediction': 'blue',
    'observation': 'red',
}

# Concentration contour levels for grid plots
GRID_LEVELS = [10, 30, 100, 300, 1000, 3000, 10000, 30000, 100000]

# =============================================================================
# DEFAULT AXIS TITLES
# =============================================================================

SA_XTITLE = "Time [years]"
SA_YTITLE = "Concentration [ppb]"

DEFAULT_ROOTNAME = "mads"

# Sensitivity-analysis result keys
SA_EFFECTS: Dict[str, str] = {
    'tes': 'Total Effect',
    'mes': 'Main Effect',
    'var': 'Output Variance',
}
