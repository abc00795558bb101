"""
MADS Problem Dictionary

Loading and read access for the nested problem description:
- Parameters (initial values, bounds, distributions, plot names)
- Observations (time, target, weight)
- Wells (location, on/off switch, time series of concentrations)
- Sources, Choices and Performance Goals (passed through as loaded)
"""

import copy
import logging
import os
import re
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Pattern, Union

import numpy as np
import pandas as pd
import yaml

from mads.config import DEFAULT_ROOTNAME

logger = logging.getLogger(__name__)

# Sections stored as name -> record mappings
KEYED_SECTIONS = ('Parameters', 'Observations', 'Wells', 'Predictions')


class MadsError(Exception):
    """User-facing error: the problem dictionary cannot support the request."""


# =============================================================================
# LOADING
# =============================================================================

def _ordered_section(section: Any) -> 'OrderedDict[str, Any]':
    """Normalize a section written as a list of one-key mappings."""
    if isinstance(section, list):
        merged = OrderedDict()
        for item in section:
            if not isinstance(item, dict):
                raise MadsError(f"Unexpected entry in problem section: {item!r}")
            merged.update(item)
        return merged
    return OrderedDict(section or {})


def load_problem(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a MADS problem dictionary from YAML.

    Args:
        path: Path to the ``.mads``/``.yaml`` problem file

    Returns:
        Problem dictionary with ``Filename`` set to ``path``
    """
    with open(path, 'r') as f:
        madsdata = yaml.safe_load(f) or {}

    if not isinstance(madsdata, dict):
        raise MadsError(f"Problem file {path} does not contain a mapping")

    for section in KEYED_SECTIONS:
        if section in madsdata:
            madsdata[section] = _ordered_section(madsdata[section])

    madsdata['Filename'] = str(path)
    if 'Wells' in madsdata:
        wells_to_observations(madsdata)

    logger.info("Loaded problem %s", path)
    return madsdata


def copy_problem(madsdata: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep copy, keeping a bound model callable shared."""
    model = madsdata.get('Model')
    data = {k: v for k, v in madsdata.items() if k != 'Model'}
    duplicate = copy.deepcopy(data)
    if model is not None:
        duplicate['Model'] = model
    return duplicate

# =============================================================================
# FILE NAMES
# =============================================================================

def get_rootname(filename: str, first: bool = True) -> str:
    """
    Strip the extension from a file name, keeping its directory.

    With ``first`` the name is cut at the first dot of the base name
    (``w01.v2.mads`` -> ``w01``), otherwise at the last one.
    """
    directory, base = os.path.split(filename)
    parts = base.split('.')
    if len(parts) == 1 or parts[0] == '':
        root = base
    elif first:
        root = parts[0]
    else:
        root = '.'.join(parts[:-1])
    return os.path.join(directory, root) if directory else root


def get_extension(filename: str) -> str:
    """Text after the last dot of the base name, or ''."""
    base = os.path.basename(filename)
    if '.' not in base.lstrip('.'):
        return ''
    return base.rsplit('.', 1)[1]


def get_mads_rootname(madsdata: Mapping[str, Any], first: bool = True) -> str:
    """Root name used to build default output file names."""
    filename = madsdata.get('Filename')
    if not filename:
        return DEFAULT_ROOTNAME
    return get_rootname(str(filename), first=first)

# =============================================================================
# PARAMETERS
# =============================================================================

def get_param_keys(madsdata: Mapping[str, Any]) -> List[str]:
    return list(madsdata.get('Parameters', {}).keys())


def is_opt(madsdata: Mapping[str, Any], paramkey: str) -> bool:
    """Adjustable parameter: ``type: opt`` or no type given at all."""
    param = madsdata.get('Parameters', {}).get(paramkey)
    if param is None:
        return False
    return 'type' not in param or param['type'] == 'opt'


def get_opt_param_keys(madsdata: Mapping[str, Any]) -> List[str]:
    return [k for k in get_param_keys(madsdata) if is_opt(madsdata, k)]


def _param_field(madsdata, keys, name, default) -> List[Any]:
    params = madsdata.get('Parameters', {})
    if keys is None:
        keys = get_param_keys(madsdata)
    return [params[k].get(name, default) for k in keys]


def get_params_init(madsdata: Mapping[str, Any], keys: Optional[List[str]] = None) -> List[float]:
    return _param_field(madsdata, keys, 'init', 0.0)


def get_params_min(madsdata: Mapping[str, Any], keys: Optional[List[str]] = None) -> List[float]:
    return [float(v) for v in _param_field(madsdata, keys, 'min', -np.inf)]


def get_params_max(madsdata: Mapping[str, Any], keys: Optional[List[str]] = None) -> List[float]:
    return [float(v) for v in _param_field(madsdata, keys, 'max', np.inf)]


def get_params_plot_name(madsdata: Mapping[str, Any], keys: Optional[List[str]] = None) -> List[str]:
    return _param_field(madsdata, keys, 'plotname', '')


def get_plot_labels(madsdata: Mapping[str, Any], keys: List[str]) -> List[str]:
    """Plot names for ``keys``, falling back to the keys themselves."""
    labels = get_params_plot_name(madsdata, keys)
    if not labels or labels[0] == '':
        return list(keys)
    return labels


def get_param_dict(madsdata: Mapping[str, Any]) -> 'OrderedDict[str, float]':
    """Parameter name -> initial value, in definition order."""
    return OrderedDict(zip(get_param_keys(madsdata), get_params_init(madsdata)))

# =============================================================================
# OBSERVATIONS
# =============================================================================

def get_obs_keys(madsdata: Mapping[str, Any]) -> List[str]:
    return list(madsdata.get('Observations', {}).keys())


def get_time(obs: Mapping[str, Any], name: str = '', warn: bool = True) -> float:
    """Observation time (``time`` or ``t``); 0 with a warning when missing."""
    if 'time' in obs:
        return obs['time']
    if 't' in obs:
        return obs['t']
    if warn:
        logger.warning("Observation time is missing for observation %s!", name)
    return 0


def get_target(obs: Mapping[str, Any], name: str = '', warn: bool = True) -> float:
    """Observation target (``target`` or ``c``); 0 with a warning when missing."""
    if 'target' in obs:
        return obs['target']
    if 'c' in obs:
        return obs['c']
    if warn:
        logger.warning("Observation target is missing for observation %s!", name)
    return 0


def get_weight(obs: Mapping[str, Any]) -> float:
    return obs.get('weight', 1.0)


def set_obs_weights(madsdata: Dict[str, Any], value: float) -> None:
    for obs in madsdata.get('Observations', {}).values():
        obs['weight'] = value


def set_well_weights(madsdata: Dict[str, Any], value: float) -> None:
    """Set weights of all well samples and of the observations derived from them."""
    for well in madsdata.get('Wells', {}).values():
        for obs in well.get('obs', []) or []:
            obs['weight'] = value
    for obs in madsdata.get('Observations', {}).values():
        if 'well' in obs:
            obs['weight'] = value


def filter_keys(mapping: Mapping[str, Any], pattern: Union[str, Pattern, None] = '') -> List[str]:
    """Keys containing ``pattern`` (substring or compiled regex)."""
    if pattern is None or pattern == '':
        return list(mapping.keys())
    if isinstance(pattern, re.Pattern):
        return [k for k in mapping if pattern.search(k)]
    return [k for k in mapping if pattern in k]

# =============================================================================
# WELLS
# =============================================================================

def get_well_keys(madsdata: Mapping[str, Any], on_only: bool = True) -> List[str]:
    wells = madsdata.get('Wells', {})
    return [k for k, w in wells.items() if not on_only or w.get('on', True)]


def well_obs_key(wellname: str, time: Any) -> str:
    """Observation key of a well sample, e.g. ``w01_5``."""
    if isinstance(time, float) and time.is_integer():
        time = int(time)
    return f"{wellname}_{time}"


def get_well_target(obs: Mapping[str, Any]) -> Optional[float]:
    if 'c' in obs:
        return obs['c']
    if 'target' in obs:
        return obs['target']
    return None


def wells_to_observations(madsdata: Dict[str, Any]) -> 'OrderedDict[str, Dict[str, Any]]':
    """
    Expose the samples of active wells as ``Observations``.

    Each sample becomes ``<well>_<time>`` with its target, weight, time and
    owning well. Existing observations are replaced.
    """
    observations = OrderedDict()
    for wellname in get_well_keys(madsdata):
        for obs in madsdata['Wells'][wellname].get('obs', []) or []:
            time = get_time(obs, wellname)
            record = {
                'time': time,
                'weight': get_weight(obs),
                'well': wellname,
            }
            target = get_well_target(obs)
            if target is not None:
                record['target'] = target
            observations[well_obs_key(wellname, time)] = record
    madsdata['Observations'] = observations
    return observations


def with_well_observations(madsdata: Mapping[str, Any]) -> Mapping[str, Any]:
    """Copy of a Wells problem with its observations derived, when it has none."""
    if 'Wells' in madsdata and 'Observations' not in madsdata:
        madsdata = copy_problem(madsdata)
        wells_to_observations(madsdata)
    return madsdata

# =============================================================================
# EXPRESSIONS
# =============================================================================

def evaluate_expression(expression: str, values: Mapping[str, float]) -> float:
    """
    Evaluate a performance-goal expression such as ``"w01_50 + 2 * ks"``.

    Args:
        expression: Arithmetic expression over parameter/observation names
        values: Name -> value mapping used to resolve the names
    """
    try:
        result = pd.eval(expression, local_dict=dict(values), engine='python')
    except (NameError, KeyError, SyntaxError) as e:
        raise MadsError(f"Cannot evaluate expression '{expression}': {e}") from e
    return float(result)
