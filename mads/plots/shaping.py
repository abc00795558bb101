"""
Plot Data Shaping

Turns problem dictionaries, model outputs and analysis results into
row-oriented DataFrames consumed by the plot builders:
- model/observation matches per well or observation
- observation and well time series
- sensitivity effects per parameter (long format)
- problem setup (well locations, source boxes)
- robustness curves per choice
- spaghetti trajectories of sampled parameters
"""

import logging
import numbers
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from mads.config import DEFAULT_CONFIG, MadsConfig
from mads.data.problem import (
    MadsError,
    get_obs_keys,
    get_param_dict,
    get_target,
    get_time,
    get_weight,
    get_well_keys,
    get_well_target,
    well_obs_key,
)

logger = logging.getLogger(__name__)

FLOAT32_MAX = float(np.finfo(np.float32).max)

MATCH_COLUMNS = ['well', 'name', 'time', 'target', 'prediction']

# =============================================================================
# MATCHES
# =============================================================================

def _well_match_rows(madsdata: Mapping[str, Any], result: Mapping[str, float]) -> List[Dict]:
    rows = []
    for wellname in get_well_keys(madsdata):
        for obs in madsdata['Wells'][wellname].get('obs', []) or []:
            time = get_time(obs, wellname)
            obskey = well_obs_key(wellname, time)
            target = get_well_target(obs)
            if target is None or not get_weight(obs) > 0:
                target = np.nan
            rows.append({
                'well': wellname,
                'name': obskey,
                'time': time,
                'target': target,
                'prediction': result.get(obskey, np.nan),
            })
    return rows


def _observation_match_rows(madsdata: Mapping[str, Any], result: Mapping[str, float]) -> List[Dict]:
    rows = []
    observations = madsdata['Observations']
    for obskey in get_obs_keys(madsdata):
        obs = observations[obskey]
        time = get_time(obs, obskey)
        target = np.nan
        prediction = result.get(obskey, np.nan)
        if get_weight(obs) > 0:
            target = get_target(obs, obskey)
        elif not isinstance(time, numbers.Real):
            # zero weight and a non-numeric time: nothing to place on the axis
            prediction = np.nan
        rows.append({
            'well': None,
            'name': obskey,
            'time': time,
            'target': target,
            'prediction': prediction,
        })
    return rows


def match_frame(madsdata: Mapping[str, Any], result: Mapping[str, float]) -> pd.DataFrame:
    """
    One row per well sample (or observation) with target and prediction.

    Targets of zero-weight samples and missing predictions are NaN; rows
    with neither are dropped.

    Raises:
        MadsError: When there is no Wells/Observations section or no data
    """
    if 'Wells' in madsdata:
        rows = _well_match_rows(madsdata, result)
    elif 'Observations' in madsdata:
        rows = _observation_match_rows(madsdata, result)
    else:
        raise MadsError("Nothing to plot!")

    df = pd.DataFrame(rows, columns=MATCH_COLUMNS)
    df = df.dropna(subset=['target', 'prediction'], how='all').reset_index(drop=True)
    if df.empty:
        raise MadsError("No data to plot")
    return df

# =============================================================================
# TIME SERIES
# =============================================================================

def observation_series(madsdata: Mapping[str, Any]) -> pd.DataFrame:
    """Time and target per observation; missing fields become 0."""
    if 'Observations' not in madsdata:
        raise MadsError("There is no 'Observations' class in the MADS input dataset")
    rows = []
    for obskey in get_obs_keys(madsdata):
        obs = madsdata['Observations'][obskey]
        rows.append({
            'name': obskey,
            'time': get_time(obs, obskey),
            'target': get_target(obs, obskey),
        })
    if not rows:
        raise MadsError("No data to plot")
    return pd.DataFrame(rows, columns=['name', 'time', 'target'])


def well_series(madsdata: Mapping[str, Any]) -> pd.DataFrame:
    """Time and target of every sample of the active wells."""
    if 'Wells' not in madsdata:
        raise MadsError("There is no 'Wells' data in the MADS input dataset")
    rows = []
    for wellname in get_well_keys(madsdata):
        for obs in madsdata['Wells'][wellname].get('obs', []) or []:
            time = get_time(obs, wellname)
            name = well_obs_key(wellname, time)
            target = get_well_target(obs)
            if target is None:
                logger.warning("Observation/calibration data are missing for well %s!", wellname)
                time, target = 0, 0
            rows.append({'well': wellname, 'name': name, 'time': time, 'target': target})
    if not rows:
        raise MadsError("No data to plot")
    return pd.DataFrame(rows, columns=['well', 'name', 'time', 'target'])

# =============================================================================
# SENSITIVITY EFFECTS
# =============================================================================

def sa_effects(
    result: Mapping[str, Any],
    obskeys: Sequence[str],
    paramkeys: Sequence[str]
) -> Dict[str, np.ndarray]:
    """
    Main effects, total effects and variances as (parameters x observations) arrays.

    Missing entries are NaN.
    """
    effects = {}
    for name in ('mes', 'tes', 'var'):
        table = result.get(name, {})
        values = np.full((len(paramkeys), len(obskeys)), np.nan)
        for i, obskey in enumerate(obskeys):
            row = table.get(obskey, {})
            for j, paramkey in enumerate(paramkeys):
                value = row.get(paramkey)
                if value is not None:
                    values[j, i] = value
        effects[name] = values
    return effects


def normalize_total_effects(tes: np.ndarray) -> np.ndarray:
    """Shift total effects to be non-negative and scale them into [0, 1]."""
    tes = np.array(tes, dtype=float)
    if np.all(np.isnan(tes)):
        return tes
    mintes = np.nanmin(tes)
    if mintes < 0:
        tes = tes - mintes
    maxtes = np.nanmax(tes)
    if maxtes > 1:
        tes = tes / maxtes
    return tes


def effect_frame(times: Sequence[float], values: np.ndarray, labels: Sequence[str]) -> pd.DataFrame:
    """Long ``x, y, parameter`` frame, one block per parameter, without NaN rows."""
    frames = [
        pd.DataFrame({'x': np.asarray(times, dtype=float), 'y': values[j], 'parameter': label})
        for j, label in enumerate(labels)
    ]
    if not frames:
        return pd.DataFrame(columns=['x', 'y', 'parameter'])
    df = pd.concat(frames, ignore_index=True)
    return df.dropna().reset_index(drop=True)


def clamp_float32(df: pd.DataFrame, label: str) -> pd.DataFrame:
    """Clamp ``y`` values that a float32 backend cannot represent."""
    if not df.empty and df['y'].abs().max() > FLOAT32_MAX:
        logger.warning("%s values larger than %s in magnitude", label, FLOAT32_MAX)
        df = df.copy()
        df['y'] = df['y'].clip(lower=-FLOAT32_MAX, upper=FLOAT32_MAX)
    return df

# =============================================================================
# PROBLEM SETUP
# =============================================================================

def _init_value(value: Any) -> float:
    if isinstance(value, Mapping):
        return float(value['init'])
    return float(value)


def problem_frame(madsdata: Mapping[str, Any]) -> pd.DataFrame:
    """Unique locations of the active wells."""
    if 'Wells' not in madsdata:
        raise MadsError("There is no 'Wells' data in the MADS input dataset")
    df = pd.DataFrame(
        [
            {
                'x': float(madsdata['Wells'][w]['x']),
                'y': float(madsdata['Wells'][w]['y']),
                'label': w,
                'category': 'Wells',
            }
            for w in get_well_keys(madsdata)
        ],
        columns=['x', 'y', 'label', 'category']
    )
    return df.drop_duplicates(subset=['x', 'y']).reset_index(drop=True)


def source_rectangles(madsdata: Mapping[str, Any]) -> np.ndarray:
    """Box sources as rows of ``[xmin, ymin, dx, dy]``."""
    rectangles = []
    for source in madsdata.get('Sources', []) or []:
        sourcetype = next(iter(source))
        if sourcetype != 'box':
            continue
        box = source[sourcetype]
        dx = _init_value(box['dx'])
        dy = _init_value(box['dy'])
        rectangles.append([
            _init_value(box['x']) - dx / 2,
            _init_value(box['y']) - dy / 2,
            dx,
            dy,
        ])
    return np.array(rectangles, dtype=float).reshape(-1, 4)

# =============================================================================
# ROBUSTNESS
# =============================================================================

def robustness_frame(madsdata: Mapping[str, Any], bigdtresults: Mapping[str, Any]) -> pd.DataFrame:
    """Maximum failure probability per horizon, one block per choice."""
    maxfailureprobs = np.asarray(bigdtresults['maxfailureprobs'], dtype=float)
    if maxfailureprobs.ndim == 1:
        maxfailureprobs = maxfailureprobs.reshape(-1, 1)
    if maxfailureprobs.ndim != 2 or 0 in maxfailureprobs.shape:
        raise MadsError("No robustness curves to plot")
    horizons = np.asarray(bigdtresults['horizons'], dtype=float)
    choices = madsdata.get('Choices', [])
    frames = []
    for i in range(maxfailureprobs.shape[1]):
        name = choices[i].get('name', f"Choice {i + 1}") if i < len(choices) else f"Choice {i + 1}"
        frames.append(pd.DataFrame({
            'horizon': horizons,
            'maxfailureprob': maxfailureprobs[:, i],
            'Choices': name,
        }))
    return pd.concat(frames, ignore_index=True)

# =============================================================================
# SPAGHETTI
# =============================================================================

def spaghetti_matrix(
    madsdata: Mapping[str, Any],
    samples: Mapping[str, Sequence[float]],
    func: Callable[[Mapping[str, float]], Mapping[str, float]],
    paramkeys: Sequence[str],
    obskeys: Sequence[str],
    config: Optional[MadsConfig] = None
) -> np.ndarray:
    """
    Model outputs (observations x samples) with ``paramkeys`` set per sample.

    Parameters not in ``paramkeys`` stay at their initial values.
    """
    config = config or DEFAULT_CONFIG
    numberofsamples = len(samples[paramkeys[0]])
    paramdict = OrderedDict(get_param_dict(madsdata))
    Y = np.zeros((len(obskeys), numberofsamples))
    for i in tqdm(range(numberofsamples), desc="Computing", disable=config.quiet):
        params = OrderedDict(paramdict)
        for paramkey in paramkeys:
            params[paramkey] = samples[paramkey][i]
        result = func(params)
        Y[:, i] = [result[k] for k in obskeys]
    return Y


def samples_frame(samples: np.ndarray, labels: Sequence[str]) -> pd.DataFrame:
    """Sample matrix (samples x parameters) as a labelled frame."""
    samples = np.atleast_2d(np.asarray(samples, dtype=float))
    if samples.shape[1] != len(labels):
        raise MadsError(f"Sample matrix has {samples.shape[1]} columns for {len(labels)} parameters")
    return pd.DataFrame(samples, columns=list(labels))
