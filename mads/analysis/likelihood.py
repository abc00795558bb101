"""
Likelihood and Prior Functions

Builds the closures consumed by Bayesian and BIG-DT analyses:
- weighted least-squares conditional log-likelihood
- log-prior from the parameter distributions
- wrappers taking arrays of adjustable parameter values
"""

from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

from mads.data.forward import (
    ModelFunction,
    make_array_function,
    make_mads_command_function,
)
from mads.data.problem import get_opt_param_keys, get_weight
from mads.data.sampling import get_param_distribution, is_log_param


def make_mads_conditional_loglikelihood(
    madsdata: Mapping[str, Any],
    weightfactor: float = 1.0
) -> Callable[[Mapping[str, float], Mapping[str, Any]], float]:
    """
    Conditional log-likelihood of predictions given observations.

    Each observation with a target contributes ``-(w * weightfactor * (target - prediction))**2``.
    """
    def conditionalloglikelihood(predictions: Mapping[str, float], observations: Mapping[str, Any]) -> float:
        loglhood = 0.0
        for obsname, pred in predictions.items():
            obs = observations.get(obsname)
            if obs is None or 'target' not in obs:
                continue
            diff = obs['target'] - pred
            weight = get_weight(obs) * weightfactor
            loglhood -= weight * weight * diff * diff
        return loglhood

    return conditionalloglikelihood


def make_log_prior(madsdata: Mapping[str, Any]) -> Callable[[Mapping[str, float]], float]:
    """Sum of log densities of the adjustable parameters."""
    optparamkeys = get_opt_param_keys(madsdata)
    distributions = {k: get_param_distribution(madsdata, k) for k in optparamkeys}
    logparams = {k for k in optparamkeys if is_log_param(madsdata, k)}

    def logprior(params: Mapping[str, float]) -> float:
        total = 0.0
        for key, dist in distributions.items():
            if dist is None:
                continue
            value = params[key]
            if key in logparams:
                value = np.log10(value) if value > 0 else -np.inf
            total += float(dist.logpdf(value))
        return total

    return logprior


def make_array_conditional_loglikelihood(
    madsdata: Mapping[str, Any],
    conditionalloglikelihood: Callable,
    model: Optional[ModelFunction] = None
) -> Callable[[Sequence[float]], float]:
    """Log-likelihood as a function of adjustable parameter values."""
    f = make_mads_command_function(madsdata, model=model)
    observations = madsdata.get('Observations', {})

    def likelihood(params: Mapping[str, float]) -> float:
        return conditionalloglikelihood(f(params), observations)

    return make_array_function(madsdata, likelihood)


def make_make_array_conditional_loglikelihood(
    madsdata: Mapping[str, Any],
    model: Optional[ModelFunction] = None
) -> Callable[[Sequence[float]], Callable[[Sequence[float]], float]]:
    """
    Factory of log-likelihoods indexed by likelihood parameters.

    ``likelihoodparams[0]`` is the log10 of the observation weight factor.
    """
    def makeloglikelihood(likelihoodparams: Sequence[float]):
        log10weightfactor = likelihoodparams[0]
        conditional = make_mads_conditional_loglikelihood(madsdata, weightfactor=10 ** log10weightfactor)
        return make_array_conditional_loglikelihood(madsdata, conditional, model=model)

    return makeloglikelihood
