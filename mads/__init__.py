"""
MADS: model analysis and decision support for contaminant transport
problems. Problem dictionaries, plot builders and BIG-DT problem assembly.
"""

from .config import MadsConfig, DEFAULT_CONFIG
from .data import MadsError, load_problem, forward

__version__ = '0.1.0'

__all__ = ['MadsConfig', 'DEFAULT_CONFIG', 'MadsError', 'load_problem', 'forward']
