"""
Parameter Sampling

Draws samples of the adjustable model parameters from the distributions
declared in the problem dictionary:
- ``dist: Uniform(a, b)``, ``Normal(mu, sigma)``, ``LogNormal(mu, sigma)``
- otherwise uniform between ``min`` and ``max`` (in log10 space for
  ``log: true`` parameters)

Latin Hypercube Sampling is available for design-space coverage.
"""

import re
from collections import OrderedDict
from typing import Any, Mapping, Optional, Sequence

import numpy as np
from scipy import stats
from scipy.stats import qmc

from mads.data.problem import (
    MadsError,
    get_opt_param_keys,
)

DIST_PATTERN = re.compile(r'^\s*(\w+)\s*\((.*)\)\s*$')


def _parse_dist(text: str):
    """Turn a ``Name(a, b)`` string into a frozen scipy distribution."""
    match = DIST_PATTERN.match(text)
    if match is None:
        raise MadsError(f"Cannot parse distribution '{text}'")
    name = match.group(1).lower()
    try:
        args = [float(a) for a in match.group(2).split(',') if a.strip()]
    except ValueError as e:
        raise MadsError(f"Cannot parse distribution '{text}'") from e

    if name == 'uniform' and len(args) == 2:
        return stats.uniform(loc=args[0], scale=args[1] - args[0])
    if name == 'normal' and len(args) == 2:
        return stats.norm(loc=args[0], scale=args[1])
    if name == 'lognormal' and len(args) == 2:
        return stats.lognorm(s=args[1], scale=np.exp(args[0]))
    raise MadsError(f"Unsupported distribution '{text}'")


def get_param_distribution(madsdata: Mapping[str, Any], paramkey: str):
    """
    Frozen distribution of a parameter, or None when it has no bounds.

    Log-transformed parameters get a distribution over log10 values.
    """
    param = madsdata['Parameters'][paramkey]
    if 'dist' in param:
        return _parse_dist(str(param['dist']))

    low, high = param.get('min'), param.get('max')
    if low is None or high is None:
        return None
    low, high = float(low), float(high)
    if param.get('log', False):
        if low <= 0 or high <= 0:
            raise MadsError(f"Log-transformed parameter {paramkey} needs positive bounds")
        low, high = np.log10(low), np.log10(high)
    return stats.uniform(loc=low, scale=high - low)


def is_log_param(madsdata: Mapping[str, Any], paramkey: str) -> bool:
    param = madsdata['Parameters'][paramkey]
    return bool(param.get('log', False)) and 'dist' not in param


class ParameterSampler:
    """
    Samples the adjustable parameters of a problem.

    Samples are returned as ordered dicts of parameter name -> array so they
    can be fed to the forward model one column at a time.
    """

    def __init__(self, madsdata: Mapping[str, Any], seed: Optional[int] = None):
        self.madsdata = madsdata
        self.seed = seed
        self.param_names = get_opt_param_keys(madsdata)
        self.n_params = len(self.param_names)

    def sample_random(self, n_samples: int) -> 'OrderedDict[str, np.ndarray]':
        """Independent draws from each parameter distribution."""
        rng = np.random.default_rng(self.seed)
        samples = OrderedDict()
        for param in self.param_names:
            dist = get_param_distribution(self.madsdata, param)
            if dist is None:
                raise MadsError(f"Parameter {param} has no distribution or bounds to sample from")
            values = dist.rvs(size=n_samples, random_state=rng)
            if is_log_param(self.madsdata, param):
                values = 10 ** values
            samples[param] = np.atleast_1d(values)
        return samples

    def sample_lhs(self, n_samples: int) -> 'OrderedDict[str, np.ndarray]':
        """Latin Hypercube samples pushed through each parameter distribution."""
        sampler = qmc.LatinHypercube(d=self.n_params, seed=self.seed)
        unit_samples = sampler.random(n=n_samples)

        samples = OrderedDict()
        for i, param in enumerate(self.param_names):
            dist = get_param_distribution(self.madsdata, param)
            if dist is None:
                raise MadsError(f"Parameter {param} has no distribution or bounds to sample from")
            values = dist.ppf(unit_samples[:, i])
            if is_log_param(self.madsdata, param):
                values = 10 ** values
            samples[param] = values
        return samples


def parameter_sample(
    madsdata: Mapping[str, Any],
    n_samples: int,
    seed: Optional[int] = None,
    method: str = 'random'
) -> 'OrderedDict[str, np.ndarray]':
    """
    Sample the adjustable parameters.

    Args:
        madsdata: Problem dictionary
        n_samples: Number of samples
        seed: Random seed (None for fresh entropy)
        method: 'random' or 'lhs'

    Returns:
        Ordered dict of parameter name -> sample array
    """
    sampler = ParameterSampler(madsdata, seed=seed)
    if method == 'random':
        return sampler.sample_random(n_samples)
    if method == 'lhs':
        return sampler.sample_lhs(n_samples)
    raise ValueError(f"Unknown sampling method: {method}")


def latin_hypercube(
    lower: Sequence[float],
    upper: Sequence[float],
    n_samples: int,
    seed: Optional[int] = None
) -> np.ndarray:
    """
    Latin Hypercube points between ``lower`` and ``upper``.

    Returns:
        Array of shape (dimensions, n_samples)
    """
    lower = np.atleast_1d(np.asarray(lower, dtype=float))
    upper = np.atleast_1d(np.asarray(upper, dtype=float))
    sampler = qmc.LatinHypercube(d=len(lower), seed=seed)
    unit_samples = sampler.random(n=n_samples)
    return qmc.scale(unit_samples, lower, upper).T


def samples_to_matrix(madsdata: Mapping[str, Any], samples: Mapping[str, Sequence[float]]) -> np.ndarray:
    """Stack samples into an (n_params x n_samples) matrix in parameter order."""
    keys = get_opt_param_keys(madsdata)
    missing = [k for k in keys if k not in samples]
    if missing:
        raise MadsError(f"Samples are missing parameters: {', '.join(missing)}")
    return np.vstack([np.asarray(samples[k], dtype=float) for k in keys])
