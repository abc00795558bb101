"""
BIG-DT Problem Assembly

Bayesian Information-Gap Decision Theory (BIG-DT) ranks decision choices by
their robustness to uncertainty. The robustness-curve computation belongs to
an external solver; this module builds what the solver consumes:
- log-likelihood family indexed by the info-gap horizon
- log-prior and nominal parameter values
- performance-goal satisfaction checks and horizon of failure
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from mads.config import DEFAULT_CONFIG, MadsConfig
from mads.data.forward import ModelFunction, make_array_function, make_mads_command_function
from mads.data.problem import (
    MadsError,
    copy_problem,
    evaluate_expression,
    get_opt_param_keys,
    get_param_dict,
    get_params_init,
    is_opt,
)
from mads.data.sampling import latin_hypercube, parameter_sample, samples_to_matrix
from mads.analysis.likelihood import make_log_prior, make_make_array_conditional_loglikelihood

logger = logging.getLogger(__name__)


@dataclass
class BigDT:
    """BIG-DT problem handed to the robustness-curve solver."""
    make_loglikelihood: Callable[[Sequence[float]], Callable[[Sequence[float]], float]]
    logprior: Callable[[Sequence[float]], float]
    nominal_params: List[float]
    likelihood_params_min: Callable[[float], List[float]]
    likelihood_params_max: Callable[[float], List[float]]
    performance_goal_satisfied: Callable[[Sequence[float], float], bool]
    get_horizon_of_failure: Callable[[Sequence[float]], float]


class RobustnessSolver(Protocol):
    """Contract of the external robust decision analysis library."""

    def make_failure_probabilities(self, modelparams: np.ndarray) -> Callable:
        ...

    def robustness_curve(
        self,
        bigdt: BigDT,
        max_horizon: float,
        num_likelihoods: int,
        failure_probabilities: Callable,
        num_horizons: int,
        likelihood_params: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray, Any]:
        ...


def _goal_values(madsdata: Mapping[str, Any], f: Callable, arrayparams: Sequence[float]) -> List[Tuple[Dict, float]]:
    """Evaluate every performance goal expression for the given parameters."""
    params = get_param_dict(madsdata)
    params.update(zip(get_opt_param_keys(madsdata), (float(v) for v in np.atleast_1d(arrayparams))))
    values = OrderedDict(params)
    values.update(f(params))
    return [
        (goal, evaluate_expression(goal['exp'], values))
        for goal in madsdata.get('Performance Goals', [])
    ]


def goal_satisfied(goal: Mapping[str, Any], expval: float, horizon: float) -> bool:
    """Check one goal against both ends of the horizon band ``[(1-h)v, (1+h)v]``."""
    if 'lessthan' in goal:
        threshold = goal['lessthan']
        if (1 + horizon) * expval >= threshold or (1 - horizon) * expval >= threshold:
            return False
    if 'greaterthan' in goal:
        threshold = goal['greaterthan']
        if (1 + horizon) * expval <= threshold or (1 - horizon) * expval <= threshold:
            return False
    return True


def goal_horizon_of_failure(goal: Mapping[str, Any], expval: float, horizon: float = np.inf) -> float:
    """Smallest relative perturbation of ``expval`` that crosses a goal threshold."""
    for bound in ('lessthan', 'greaterthan'):
        if bound not in goal:
            continue
        threshold = goal[bound]
        if expval == 0:
            candidate = np.sign(threshold) * np.inf if threshold != 0 else 0.0
        elif expval * threshold >= 0:
            # same sign
            candidate = threshold / expval - 1
        else:
            candidate = 1 - threshold / expval
        horizon = max(0.0, min(horizon, candidate))
    return horizon


def make_bigdt(madsdata: Mapping[str, Any], choice: Mapping[str, Any], model: Optional[ModelFunction] = None) -> BigDT:
    """Set up a BIG-DT problem for one choice on a copy of the problem."""
    return make_bigdt_inplace(copy_problem(madsdata), choice, model=model)


def make_bigdt_inplace(madsdata: Dict[str, Any], choice: Mapping[str, Any], model: Optional[ModelFunction] = None) -> BigDT:
    """
    Set up a BIG-DT problem, writing the decision parameters into ``madsdata``.

    Args:
        madsdata: Problem dictionary (modified)
        choice: Choice with a ``Parameters`` mapping of decision values
        model: Forward model (defaults to the problem's ``Model``)
    """
    logger.info("Decision parameters:")
    for paramname, value in choice.get('Parameters', {}).items():
        if paramname not in madsdata.get('Parameters', {}):
            raise MadsError(f"Decision parameter, {paramname}, is not defined in the problem.")
        if is_opt(madsdata, paramname):
            raise MadsError(
                f"Decision parameter, {paramname}, is also an adjustable (type = \"opt\") parameter."
            )
        madsdata['Parameters'][paramname]['init'] = value
        logger.info("Decision parameter %s set to %s.", paramname, value)

    makeloglikelihood = make_make_array_conditional_loglikelihood(madsdata, model=model)
    logprior = make_array_function(madsdata, make_log_prior(madsdata))
    nominalparams = get_params_init(madsdata, get_opt_param_keys(madsdata))
    f = make_mads_command_function(madsdata, model=model, calczeroweightobs=True, calcpredictions=True)

    def likelihoodparamsmax(horizon: float) -> List[float]:
        return [horizon]

    def likelihoodparamsmin(horizon: float) -> List[float]:
        return [-horizon]

    def performancegoalsatisfied(arrayparams: Sequence[float], horizon: float) -> bool:
        for goal, expval in _goal_values(madsdata, f, arrayparams):
            if not goal_satisfied(goal, expval, horizon):
                return False
        return True

    def gethorizonoffailure(arrayparams: Sequence[float]) -> float:
        horizonoffailure = np.inf
        for goal, expval in _goal_values(madsdata, f, arrayparams):
            horizonoffailure = goal_horizon_of_failure(goal, expval, horizonoffailure)
        return horizonoffailure

    return BigDT(
        make_loglikelihood=makeloglikelihood,
        logprior=logprior,
        nominal_params=nominalparams,
        likelihood_params_min=likelihoodparamsmin,
        likelihood_params_max=likelihoodparamsmax,
        performance_goal_satisfied=performancegoalsatisfied,
        get_horizon_of_failure=gethorizonoffailure,
    )


def do_bigdt(
    madsdata: Mapping[str, Any],
    nummodelruns: int,
    solver: RobustnessSolver,
    numhorizons: int = 100,
    max_horizon: float = 3.0,
    numlikelihoods: int = 25,
    seed: Optional[int] = None,
    model: Optional[ModelFunction] = None,
    config: Optional[MadsConfig] = None
) -> Dict[str, np.ndarray]:
    """
    Run a BIG-DT analysis over all choices of the problem.

    Args:
        madsdata: Problem dictionary with ``Choices`` and ``Performance Goals``
        nummodelruns: Number of parameter samples (model runs)
        solver: Robustness-curve solver
        numhorizons: Number of info-gap horizons of uncertainty
        max_horizon: Maximum info-gap horizon of uncertainty
        numlikelihoods: Number of Bayesian likelihoods
        seed: Random seed for parameter and likelihood sampling

    Returns:
        Dict with ``maxfailureprobs`` (numhorizons x choices) and ``horizons``
    """
    config = config or DEFAULT_CONFIG
    choices = madsdata.get('Choices')
    if not choices:
        raise MadsError("There is no 'Choices' data in the MADS input dataset")
    if 'Performance Goals' not in madsdata:
        raise MadsError("There is no 'Performance Goals' data in the MADS input dataset")

    parametersamples = parameter_sample(madsdata, nummodelruns, seed=seed)
    modelparams = samples_to_matrix(madsdata, parametersamples)
    getfailureprobs = solver.make_failure_probabilities(modelparams)

    maxfailureprobs = np.zeros((numhorizons, len(choices)))
    horizons = None
    likelihoodparams = None

    logger.info("Choices:")
    for i, choice in enumerate(tqdm(choices, desc="Computing", disable=config.quiet)):
        logger.info("Choice #%d: %s", i + 1, choice.get('name', i + 1))
        bigdt = make_bigdt(madsdata, choice, model=model)
        if likelihoodparams is None:
            likelihoodparams = latin_hypercube(
                bigdt.likelihood_params_min(max_horizon),
                bigdt.likelihood_params_max(max_horizon),
                numlikelihoods,
                seed=seed,
            )
        curve, horizons, _ = solver.robustness_curve(
            bigdt, max_horizon, numlikelihoods,
            failure_probabilities=getfailureprobs,
            num_horizons=numhorizons,
            likelihood_params=likelihoodparams,
        )
        maxfailureprobs[:, i] = curve

    return {'maxfailureprobs': maxfailureprobs, 'horizons': np.asarray(horizons)}
