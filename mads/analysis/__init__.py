"""
Analysis module for likelihoods and BIG-DT decision support.
"""

from .bigdt import BigDT, RobustnessSolver, make_bigdt, do_bigdt
from .likelihood import make_mads_conditional_loglikelihood, make_log_prior

__all__ = [
    'BigDT', 'RobustnessSolver', 'make_bigdt', 'do_bigdt',
    'make_mads_conditional_loglikelihood', 'make_log_prior',
]
