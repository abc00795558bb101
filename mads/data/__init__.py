"""
Data module: problem dictionaries, parameter sampling and model binding.
"""

from .problem import MadsError, load_problem, get_mads_rootname
from .sampling import parameter_sample, latin_hypercube
from .forward import forward, make_mads_command_function
from .io import save_results, load_results

__all__ = [
    'MadsError', 'load_problem', 'get_mads_rootname',
    'parameter_sample', 'latin_hypercube',
    'forward', 'make_mads_command_function',
    'save_results', 'load_results',
]
