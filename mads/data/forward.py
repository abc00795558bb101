"""
Forward Model Binding

The contaminant-transport (or any other) model is not part of this package.
It is a callable ``model(paramdict) -> {observation: value}`` bound either
through the ``Model`` entry of the problem dictionary (a callable or an
import path ``package.module:function``) or passed explicitly.
"""

import importlib
from collections import OrderedDict
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import numpy as np

from mads.data.problem import (
    MadsError,
    get_obs_keys,
    get_opt_param_keys,
    get_param_dict,
    get_weight,
)

ModelFunction = Callable[[Mapping[str, float]], Mapping[str, float]]


def _import_model(path: str) -> ModelFunction:
    module_name, _, func_name = path.partition(':')
    if not module_name or not func_name:
        raise MadsError(f"Model must be given as 'package.module:function', got '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise MadsError(f"Cannot import model module '{module_name}': {e}") from e
    try:
        return getattr(module, func_name)
    except AttributeError as e:
        raise MadsError(f"Module '{module_name}' has no model function '{func_name}'") from e


def get_model_function(madsdata: Mapping[str, Any], model: Optional[ModelFunction] = None) -> ModelFunction:
    """Resolve the forward model for a problem."""
    if model is not None:
        return model
    bound = madsdata.get('Model')
    if bound is None:
        raise MadsError("No forward model defined: set 'Model' in the problem or pass one")
    if callable(bound):
        return bound
    return _import_model(str(bound))


def make_mads_command_function(
    madsdata: Mapping[str, Any],
    model: Optional[ModelFunction] = None,
    calczeroweightobs: bool = False,
    calcpredictions: bool = False
) -> Callable[[Mapping[str, float]], 'OrderedDict[str, float]']:
    """
    Build ``f(paramdict)`` returning model outputs for the observations.

    Args:
        madsdata: Problem dictionary
        model: Forward model (defaults to the problem's ``Model``)
        calczeroweightobs: Also return observations with zero weight
        calcpredictions: Also return the entries of the ``Predictions`` section

    Returns:
        Function mapping (partial) parameter dicts to ordered model outputs
    """
    func = get_model_function(madsdata, model)
    observations = madsdata.get('Observations', {})
    obskeys = [
        k for k in get_obs_keys(madsdata)
        if calczeroweightobs or get_weight(observations[k]) > 0
    ]
    if calcpredictions:
        obskeys += [k for k in madsdata.get('Predictions', {}) if k not in obskeys]
    defaults = get_param_dict(madsdata)

    def madscommandfunction(paramdict: Mapping[str, float]) -> 'OrderedDict[str, float]':
        params = OrderedDict(defaults)
        params.update(paramdict)
        output = func(params)
        missing = [k for k in obskeys if k not in output]
        if missing:
            raise MadsError(f"Model output is missing observations: {', '.join(missing[:5])}")
        return OrderedDict((k, float(output[k])) for k in obskeys)

    return madscommandfunction


def forward(
    madsdata: Mapping[str, Any],
    paramdict: Optional[Mapping[str, float]] = None,
    model: Optional[ModelFunction] = None
) -> 'OrderedDict[str, float]':
    """Run the model once at the initial (or given) parameter values."""
    f = make_mads_command_function(madsdata, model=model, calczeroweightobs=True)
    return f(paramdict or {})


def make_array_function(madsdata: Mapping[str, Any], f: Callable[[Dict[str, float]], Any]) -> Callable:
    """Wrap a parameter-dict function into one of adjustable parameter arrays."""
    optparamkeys = get_opt_param_keys(madsdata)
    defaults = get_param_dict(madsdata)

    def arrayfunction(arrayparameters: Sequence[float]):
        arrayparameters = np.atleast_1d(arrayparameters)
        if len(arrayparameters) != len(optparamkeys):
            raise MadsError(
                f"Expected {len(optparamkeys)} parameter values, got {len(arrayparameters)}"
            )
        params = OrderedDict(defaults)
        params.update(zip(optparamkeys, (float(v) for v in arrayparameters)))
        return f(params)

    return arrayfunction
