"""
Tests for problem dictionary loading and accessors.
"""

import logging
import re

import numpy as np
import pytest
import yaml

from mads.config import MadsConfig
from mads.data.problem import (
    MadsError,
    copy_problem,
    evaluate_expression,
    filter_keys,
    get_extension,
    get_mads_rootname,
    get_opt_param_keys,
    get_param_dict,
    get_params_max,
    get_params_min,
    get_plot_labels,
    get_target,
    get_time,
    get_well_keys,
    load_problem,
    set_well_weights,
    well_obs_key,
    get_rootname,
)


# =============================================================================
# FILE NAME TESTS
# =============================================================================

class TestRootNames:

    def test_rootname_first_dot(self):
        assert get_rootname("dir/w01.v2.mads") == "dir/w01"
        assert get_rootname("dir/w01.v2.mads", first=False) == "dir/w01.v2"
        assert get_rootname("plain") == "plain"

    def test_extension(self):
        assert get_extension("a/b.c.png") == "png"
        assert get_extension("a.dir/noext") == ""

    def test_mads_rootname_default(self):
        assert get_mads_rootname({}) == "mads"
        assert get_mads_rootname({'Filename': 'ex/toy.mads'}) == "ex/toy"


# =============================================================================
# LOADING TESTS
# =============================================================================

class TestLoadProblem:

    def test_wells_become_observations(self, tmp_path):
        data = {
            'Parameters': [{'a': {'init': 1, 'min': 0, 'max': 2}}],
            'Wells': [
                {'w01': {'x': 1, 'y': 2, 'on': True, 'obs': [{'t': 1, 'c': 3.0}, {'t': 2.0, 'c': 4.0, 'weight': 0}]}},
                {'w02': {'x': 5, 'y': 6, 'on': False, 'obs': [{'t': 1, 'c': 1.0}]}},
            ],
        }
        path = tmp_path / 'problem.mads'
        path.write_text(yaml.safe_dump(data))

        madsdata = load_problem(path)

        assert madsdata['Filename'] == str(path)
        assert list(madsdata['Parameters']) == ['a']
        assert list(madsdata['Observations']) == ['w01_1', 'w01_2']
        assert madsdata['Observations']['w01_2'] == {'time': 2.0, 'weight': 0, 'well': 'w01', 'target': 4.0}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / 'bad.mads'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(MadsError, match="does not contain a mapping"):
            load_problem(path)

    def test_copy_keeps_model_shared(self, wells_problem):
        duplicate = copy_problem(wells_problem)
        assert duplicate['Model'] is wells_problem['Model']
        duplicate['Parameters']['a']['init'] = 99
        assert wells_problem['Parameters']['a']['init'] == 1.0


# =============================================================================
# ACCESSOR TESTS
# =============================================================================

class TestAccessors:

    def test_opt_params_exclude_null_type(self, wells_problem):
        assert get_opt_param_keys(wells_problem) == ['a', 'b']

    def test_bounds_default_to_infinity(self, wells_problem):
        assert get_params_min(wells_problem) == [0.0, 0.0, -np.inf]
        assert get_params_max(wells_problem, ['k']) == [np.inf]

    def test_plot_labels(self, wells_problem):
        assert get_plot_labels(wells_problem, ['a', 'b']) == ['Slope', 'Offset']
        assert get_plot_labels(wells_problem, ['k']) == ['k']

    def test_param_dict_order(self, wells_problem):
        assert list(get_param_dict(wells_problem).items()) == [('a', 1.0), ('b', 2.0), ('k', 0.5)]

    def test_missing_time_and_target_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger='mads'):
            assert get_time({}, 'o1') == 0
            assert get_target({}, 'o1') == 0
        assert "time is missing for observation o1" in caplog.text
        assert "target is missing for observation o1" in caplog.text

    def test_short_field_names(self):
        assert get_time({'t': 5}) == 5
        assert get_target({'c': 7.5}) == 7.5

    def test_well_keys(self, wells_problem):
        assert get_well_keys(wells_problem) == ['w01', 'w02']
        assert get_well_keys(wells_problem, on_only=False) == ['w01', 'w02', 'w03']

    def test_well_obs_key(self):
        assert well_obs_key('w01', 5.0) == 'w01_5'
        assert well_obs_key('w01', 2.5) == 'w01_2.5'
        assert well_obs_key('w01', 3) == 'w01_3'

    def test_set_well_weights(self, wells_problem):
        set_well_weights(wells_problem, 1)
        assert wells_problem['Wells']['w02']['obs'][1]['weight'] == 1
        assert wells_problem['Observations']['w02_2']['weight'] == 1

    def test_filter_keys(self):
        mapping = {'w01_1': 1, 'w01_2': 2, 'w02_1': 3}
        assert filter_keys(mapping, 'w01') == ['w01_1', 'w01_2']
        assert filter_keys(mapping, re.compile(r'_1$')) == ['w01_1', 'w02_1']
        assert filter_keys(mapping, '') == list(mapping)


# =============================================================================
# EXPRESSION TESTS
# =============================================================================

class TestEvaluateExpression:

    def test_arithmetic(self):
        assert evaluate_expression("w01_5 + 2 * a", {'w01_5': 1.5, 'a': 2.0}) == pytest.approx(5.5)

    def test_unknown_name(self):
        with pytest.raises(MadsError, match="Cannot evaluate"):
            evaluate_expression("missing + 1", {'a': 1.0})


# =============================================================================
# CONFIGURATION TESTS
# =============================================================================

class TestConfig:

    def test_environment_flags(self):
        config = MadsConfig.from_environment({'MADS_QUIET': '', 'MADS_NOT_QUIET': '', 'MADS_NO_PLOT': ''})
        assert config.quiet is False
        assert config.plotting is False
        assert config.long_tests is False

    def test_defaults(self):
        config = MadsConfig.from_environment({})
        assert config.quiet is True
        assert config.plotting is True

    def test_unknown_override(self):
        with pytest.raises(TypeError, match="Unknown configuration option"):
            MadsConfig.from_environment({}, colour='red')

    def test_output_path(self, tmp_path):
        config = MadsConfig(output_dir=str(tmp_path))
        assert config.output_path('a.png') == str(tmp_path / 'a.png')
        assert MadsConfig().output_path('a.png') == 'a.png'
