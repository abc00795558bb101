"""
Tests for forward model binding, likelihoods and priors.
"""

import os

import numpy as np
import pytest

from mads.config import MadsConfig
from mads.data.forward import (
    forward,
    get_model_function,
    make_array_function,
    make_mads_command_function,
)
from mads.data.io import load_results, save_results
from mads.data.problem import MadsError
from mads.analysis.likelihood import (
    make_array_conditional_loglikelihood,
    make_log_prior,
    make_mads_conditional_loglikelihood,
    make_make_array_conditional_loglikelihood,
)


# =============================================================================
# FORWARD MODEL TESTS
# =============================================================================

class TestForwardModel:

    def test_model_from_import_path(self):
        assert get_model_function({'Model': 'os.path:join'}) is os.path.join

    def test_missing_model(self):
        with pytest.raises(MadsError, match="No forward model defined"):
            get_model_function({})

    def test_bad_import_path(self):
        with pytest.raises(MadsError, match="package.module:function"):
            get_model_function({'Model': 'no_colon_here'})

    def test_explicit_model_wins(self, wells_problem):
        def other(params):
            return {}
        assert get_model_function(wells_problem, other) is other

    def test_forward_includes_zero_weight(self, wells_problem):
        result = forward(wells_problem)
        assert list(result) == ['w01_1', 'w01_2', 'w02_1', 'w02_2']
        assert result['w02_2'] == pytest.approx(6.5)

    def test_command_function_skips_zero_weight(self, wells_problem):
        f = make_mads_command_function(wells_problem)
        assert list(f({})) == ['w01_1', 'w01_2', 'w02_1']

    def test_command_function_merges_params(self, wells_problem):
        f = make_mads_command_function(wells_problem)
        assert f({'a': 2.0})['w01_2'] == pytest.approx(6.0)

    def test_predictions_included(self, wells_problem):
        wells_problem['Predictions'] = {'p1': {}}
        f = make_mads_command_function(wells_problem, calcpredictions=True)
        assert f({})['p1'] == pytest.approx(3.0)

    def test_missing_output(self, obs_problem):
        f = make_mads_command_function(obs_problem, model=lambda params: {'o1': 1.0})
        with pytest.raises(MadsError, match="missing observations"):
            f({})

    def test_array_function(self, wells_problem):
        f = make_array_function(wells_problem, lambda params: params['a'] + params['b'] + params['k'])
        assert f([1.0, 1.0]) == pytest.approx(2.5)
        with pytest.raises(MadsError, match="Expected 2 parameter values"):
            f([1.0])


# =============================================================================
# LIKELIHOOD TESTS
# =============================================================================

class TestLikelihood:

    def test_perfect_fit_is_zero(self, wells_problem):
        f = make_mads_command_function(wells_problem)
        conditional = make_mads_conditional_loglikelihood(wells_problem)
        assert conditional(f({}), wells_problem['Observations']) == pytest.approx(0.0)

    def test_weighted_residuals(self, wells_problem):
        conditional = make_mads_conditional_loglikelihood(wells_problem, weightfactor=10.0)
        loglikelihood = make_array_conditional_loglikelihood(wells_problem, conditional)
        assert loglikelihood([1.5, 2.0]) == pytest.approx(-225.0)

    def test_likelihood_factory_uses_log10_weight(self, wells_problem):
        make = make_make_array_conditional_loglikelihood(wells_problem)
        assert make([0.0])([1.5, 2.0]) == pytest.approx(-2.25)
        assert make([1.0])([1.5, 2.0]) == pytest.approx(-225.0)

    def test_log_prior(self, wells_problem):
        logprior = make_log_prior(wells_problem)
        assert logprior({'a': 1.0, 'b': 2.0}) == pytest.approx(np.log(0.125))
        assert logprior({'a': 3.0, 'b': 2.0}) == -np.inf


# =============================================================================
# PERSISTENCE TESTS
# =============================================================================

class TestResultsIO:

    def test_round_trip(self, tmp_path):
        results = {'maxfailureprobs': np.eye(2), 'horizons': np.array([0.0, 1.0])}
        path = save_results(results, tmp_path / 'out' / 'bigdt.joblib')
        loaded = load_results(path)
        np.testing.assert_allclose(loaded['maxfailureprobs'], np.eye(2))

    def test_saved_message_unless_quiet(self, tmp_path, capsys):
        results = {'horizons': np.array([0.0, 1.0])}
        save_results(results, tmp_path / 'loud.joblib', MadsConfig(quiet=False))
        assert "Saved:" in capsys.readouterr().out
        save_results(results, tmp_path / 'silent.joblib', MadsConfig(quiet=True))
        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_results(tmp_path / 'nope.joblib')
