#!/usr/bin/env python
"""
MADS - Plotting and Decision Support Pipeline

Runs the plotting and analysis steps for a MADS problem file:
1. Problem setup plot (wells and sources)
2. Model predictions against observations
3. Spaghetti plots of sampled parameters
4. Scatter matrix of parameter samples
5. BIG-DT robustness analysis (external solver)

Usage:
    python -m mads.pipeline problem.mads --all
    python -m mads.pipeline problem.mads --matches --format pdf
    python -m mads.pipeline problem.mads --spaghetti 50 --keyword test
    python -m mads.pipeline problem.mads --bigdt 1000 --solver mypkg.solver:Solver
    python -m mads.pipeline problem.mads --robustness results/bigdt.joblib
"""

import argparse
import importlib
import os
from datetime import datetime
from pathlib import Path

os.environ.setdefault('MPLBACKEND', 'Agg')


def _banner(title: str):
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70)


def run_problem_setup(madsdata, args, config):
    """Step 1: Problem setup plot."""
    _banner("STEP 1: PROBLEM SETUP")

    from mads.plots.problem import plot_mads_problem

    plot_mads_problem(madsdata, format=args.format, keyword=args.keyword, config=config)


def run_matches(madsdata, args, config):
    """Step 2: Model predictions against observations."""
    _banner("STEP 2: MODEL MATCHES")

    from mads.plots.matches import plot_matches

    plot_matches(madsdata, format=args.format, separate_files=args.separate_files, config=config)


def run_spaghetti(madsdata, args, config):
    """Step 3: Spaghetti plots."""
    _banner("STEP 3: SPAGHETTI PLOTS")

    from mads.data.sampling import parameter_sample
    from mads.plots.spaghetti import spaghetti_plot, spaghetti_plots

    samples = parameter_sample(madsdata, args.spaghetti, seed=args.seed)
    spaghetti_plots(madsdata, samples, format=args.format, keyword=args.keyword, config=config)
    spaghetti_plot(madsdata, samples, format=args.format, keyword=args.keyword, config=config)

    print(f"\n✓ Spaghetti plots for {args.spaghetti} samples")


def run_scatter(madsdata, args, config):
    """Step 4: Scatter matrix of parameter samples."""
    _banner("STEP 4: PARAMETER SAMPLES")

    from mads.data.problem import get_mads_rootname
    from mads.data.sampling import parameter_sample, samples_to_matrix
    from mads.plots.samples import scatter_plot_samples

    samples = parameter_sample(madsdata, args.scatter, seed=args.seed, method='lhs')
    matrix = samples_to_matrix(madsdata, samples).T
    rootname = get_mads_rootname(madsdata)
    scatter_plot_samples(madsdata, matrix, f"{rootname}-{args.scatter}-samples", format=args.format, config=config)

    print(f"\n✓ Scatter matrix for {args.scatter} samples")


def _load_solver(path: str):
    module_name, _, attr = path.partition(':')
    if not module_name or not attr:
        raise SystemExit(f"Solver must be given as 'package.module:Class', got '{path}'")
    solver = getattr(importlib.import_module(module_name), attr)
    return solver() if isinstance(solver, type) else solver


def run_bigdt(madsdata, args, config):
    """Step 5: BIG-DT robustness analysis."""
    _banner("STEP 5: BIG-DT ROBUSTNESS ANALYSIS")

    from mads.analysis.bigdt import do_bigdt
    from mads.data.io import load_results, save_results
    from mads.data.problem import get_mads_rootname
    from mads.plots.robustness import plot_robustness_curves

    if args.robustness:
        results = load_results(args.robustness)
    else:
        if not args.solver:
            raise SystemExit("--bigdt needs a robustness solver (--solver package.module:Class)")
        solver = _load_solver(args.solver)
        results = do_bigdt(madsdata, args.bigdt, solver, seed=args.seed, config=config)
        save_results(results, config.output_path(f"{get_mads_rootname(madsdata)}-bigdt.joblib"), config)

    plot_robustness_curves(madsdata, results, format=args.format, config=config)

    print(f"\n✓ Robustness curves for {len(madsdata.get('Choices', []))} choices")


def run_full_pipeline(madsdata, args, config):
    """Run every step that needs no extra input."""
    print("\n" + "#" * 70)
    print("#  MADS PLOTTING AND DECISION SUPPORT PIPELINE")
    print(f"#  Problem: {madsdata.get('Filename', '')}")
    print("#" * 70)
    print(f"\nStarted: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    if 'Wells' in madsdata:
        run_problem_setup(madsdata, args, config)
    run_matches(madsdata, args, config)
    if args.spaghetti:
        run_spaghetti(madsdata, args, config)
    if args.scatter:
        run_scatter(madsdata, args, config)
    if args.bigdt or args.robustness:
        run_bigdt(madsdata, args, config)

    print("\n" + "=" * 70)
    print("PIPELINE COMPLETE")
    print("=" * 70)
    print(f"Finished: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="MADS plotting and BIG-DT decision support"
    )
    parser.add_argument('problem', type=Path, help='MADS problem file (YAML)')
    parser.add_argument('--all', action='store_true', help='Run complete pipeline')
    parser.add_argument('--problem-setup', action='store_true', help='Plot wells and sources')
    parser.add_argument('--matches', action='store_true', help='Plot model matches')
    parser.add_argument('--separate-files', action='store_true', help='One match plot per well')
    parser.add_argument('--spaghetti', type=int, default=0, metavar='N', help='Spaghetti plots for N samples')
    parser.add_argument('--scatter', type=int, default=0, metavar='N', help='Scatter matrix of N samples')
    parser.add_argument('--bigdt', type=int, default=0, metavar='N', help='BIG-DT analysis with N model runs')
    parser.add_argument('--solver', default='', help='Robustness solver as package.module:Class')
    parser.add_argument('--robustness', type=Path, default=None, help='Plot saved BIG-DT results')
    parser.add_argument('--format', default='', help='Image format (png, pdf, ps, eps, svg)')
    parser.add_argument('--keyword', default='', help='Keyword added to output file names')
    parser.add_argument('--output-dir', default='.', help='Directory for generated images')
    parser.add_argument('--seed', type=int, default=None, help='Random seed')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--quiet', action='store_true', help='Suppress progress output')
    verbosity.add_argument('--verbose', action='store_true', help='Show progress and debug output')

    args = parser.parse_args(argv)

    from mads.config import MadsConfig
    from mads.data.problem import load_problem
    from mads.log import setup_logging

    overrides = {'output_dir': args.output_dir}
    if args.quiet:
        overrides['quiet'] = True
    elif args.verbose:
        overrides.update(quiet=False, verbosity=2)
    elif 'MADS_QUIET' not in os.environ:
        overrides['quiet'] = False
    config = MadsConfig.from_environment(**overrides)
    setup_logging(config)

    madsdata = load_problem(args.problem)

    steps = [args.problem_setup, args.matches, args.spaghetti, args.scatter, args.bigdt, args.robustness]
    if args.all or not any(steps):
        run_full_pipeline(madsdata, args, config)
    else:
        if args.problem_setup:
            run_problem_setup(madsdata, args, config)
        if args.matches:
            run_matches(madsdata, args, config)
        if args.spaghetti:
            run_spaghetti(madsdata, args, config)
        if args.scatter:
            run_scatter(madsdata, args, config)
        if args.bigdt or args.robustness:
            run_bigdt(madsdata, args, config)


if __name__ == "__main__":
    main()
