"""
Shared fixtures: small in-memory MADS problems with an analytic model.
"""

import os
from collections import OrderedDict

os.environ.setdefault('MPLBACKEND', 'Agg')

import pytest

from mads.config import MadsConfig
from mads.data.problem import wells_to_observations


def well_model(params):
    """Linear concentration trends: w01 = a*t + b, w02 = 2*a*t + b + k."""
    a, b, k = params['a'], params['b'], params['k']
    out = OrderedDict()
    for t in (1, 2):
        out[f"w01_{t}"] = a * t + b
        out[f"w02_{t}"] = 2 * a * t + b + k
    out['p1'] = a + b
    return out


def obs_model(params):
    a, b = params['a'], params['b']
    return OrderedDict((f"o{t}", a * t + b) for t in (1, 2, 3))


def _parameters():
    return OrderedDict([
        ('a', {'init': 1.0, 'min': 0.0, 'max': 2.0, 'type': 'opt', 'plotname': 'Slope'}),
        ('b', {'init': 2.0, 'min': 0.0, 'max': 4.0, 'plotname': 'Offset'}),
        ('k', {'init': 0.5, 'type': None}),
    ])


@pytest.fixture
def config(tmp_path):
    return MadsConfig(quiet=True, plotting=True, output_dir=str(tmp_path))


@pytest.fixture
def wells_problem(tmp_path):
    madsdata = {
        'Filename': str(tmp_path / 'toy.mads'),
        'Parameters': _parameters(),
        'Wells': OrderedDict([
            ('w01', {'x': 100.0, 'y': 200.0, 'on': True, 'obs': [
                {'t': 1, 'c': 3.0, 'weight': 1},
                {'t': 2, 'c': 4.0, 'weight': 1},
            ]}),
            ('w02', {'x': 300.0, 'y': 250.0, 'on': True, 'obs': [
                {'t': 1, 'c': 4.5, 'weight': 1},
                {'t': 2, 'c': 6.5, 'weight': 0},
            ]}),
            ('w03', {'x': 500.0, 'y': 50.0, 'on': False, 'obs': [
                {'t': 1, 'c': 1.0},
            ]}),
        ]),
        'Sources': [
            {'box': {'x': {'init': 50.0}, 'y': {'init': 150.0}, 'dx': {'init': 20.0}, 'dy': {'init': 10.0}}},
        ],
        'Model': well_model,
    }
    wells_to_observations(madsdata)
    return madsdata


@pytest.fixture
def obs_problem(tmp_path):
    return {
        'Filename': str(tmp_path / 'obs.mads'),
        'Parameters': _parameters(),
        'Observations': OrderedDict([
            ('o1', {'time': 1.0, 'target': 3.0, 'weight': 1}),
            ('o2', {'time': 2.0, 'target': 4.0, 'weight': 1}),
            ('o3', {'time': 3.0, 'target': 5.5, 'weight': 0}),
        ]),
        'Model': obs_model,
    }


@pytest.fixture
def bigdt_problem(wells_problem):
    madsdata = dict(wells_problem)
    madsdata['Parameters'] = _parameters()
    madsdata['Choices'] = [
        {'name': 'Pump', 'Parameters': {'k': 0.0}},
        {'name': 'Wait', 'Parameters': {'k': 1.0}},
    ]
    madsdata['Performance Goals'] = [
        {'exp': 'w02_2', 'lessthan': 10.0},
    ]
    return madsdata


@pytest.fixture
def sa_result():
    """Sensitivity results for the wells problem (a, b)."""
    keys = ['w01_1', 'w01_2', 'w02_1', 'w02_2']
    return {
        'method': 'efast',
        'samplesize': 100,
        'mes': {k: {'a': 0.2 + 0.1 * i, 'b': 0.6 - 0.1 * i} for i, k in enumerate(keys)},
        'tes': {k: {'a': 0.3 + 0.1 * i, 'b': 0.7 - 0.1 * i} for i, k in enumerate(keys)},
        'var': {k: {'a': 1.0 + i, 'b': 2.0} for i, k in enumerate(keys)},
    }
