"""
Main Orchestration Script

Runs the feature selection pipeline for each configured dataset:
1. Load dataset
2. Numeric coercion and imputation
3. Selection (correlation filter, RFE, lasso, random forest)
4. Reports and method comparison
5. Figures (optional)
"""

import argparse
from pathlib import Path

import yaml

from featsel.exceptions import ConfigurationError, DomainError
from featsel.feature_selection import SELECTORS, compare_results, correlation_matrix
from featsel.pipeline import FeatureSelectionPipeline, compare_selectors, format_comparison
from featsel.preprocessing import load_dataset, coerce_numeric

SEEDED_STEPS = ('rfe', 'lasso', 'random_forest')


def load_config(config_path='config/config.yml'):
    """Load configuration from YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def _step_params(step, config, matrix, seed):
    params = dict((config.get('selectors') or {}).get(step) or {})
    if step in SEEDED_STEPS:
        params.setdefault('seed', seed)
    if step == 'rfe' and params.get('sizes'):
        sizes = [s for s in params['sizes'] if s <= matrix.n_features]
        if len(sizes) < len(params['sizes']):
            print(f"    [Note] RFE sizes above {matrix.n_features} features ignored")
        params['sizes'] = sizes or None
    return params


def run_dataset(name, dataset_config, config, steps, seed=None, compare=None,
                top_n=None, compare_top_n=None, precision=4, figures_dir=None, verbose=True):
    """
    Run every requested selection step on one dataset.

    Returns:
        dict: method name -> SelectionResult (skipped steps are absent).
    """
    print("\n" + "=" * 80)
    print(f"DATASET: {name}")
    print("=" * 80)

    dataset_config = dict(dataset_config or {})
    source = dataset_config.pop('source', name)
    dataset = load_dataset(source, verbose=verbose, **dataset_config)

    prep = config.get('preprocessing') or {}
    matrix = coerce_numeric(
        dataset,
        fill_value=prep.get('fill_value', 0.0),
        strategy=prep.get('strategy', 'constant'),
        verbose=verbose,
    )

    results = {}
    for step in steps:
        pipeline = FeatureSelectionPipeline.from_matrix(matrix, verbose=verbose)
        try:
            pipeline.select(step, **_step_params(step, config, matrix, seed))
        except DomainError as exc:
            print(f"\n[SKIP] {step} on {name}: {exc}")
            continue
        results[step] = pipeline.result
        print()
        print(pipeline.report(top_n=top_n, precision=precision))

    if compare:
        first, second = compare
        if first in results and second in results:
            comparison = compare_results(results[first], results[second], top_n=compare_top_n)
        else:
            try:
                _, _, comparison = compare_selectors(
                    matrix, first, second, top_n=compare_top_n,
                    first_params=_step_params(first, config, matrix, seed),
                    second_params=_step_params(second, config, matrix, seed),
                    verbose=verbose,
                )
            except DomainError as exc:
                print(f"\n[SKIP] comparison {first} vs {second} on {name}: {exc}")
                comparison = None
        if comparison is not None:
            print()
            print(format_comparison(comparison))

    if figures_dir:
        from featsel.visualization import create_all_visualizations
        cutoff = ((config.get('selectors') or {}).get('correlation') or {}).get('cutoff')
        create_all_visualizations(
            results, figures_dir, name, corr=correlation_matrix(matrix), cutoff=cutoff
        )

    return results


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Feature selection pipeline: filter, wrapper and embedded methods'
    )
    parser.add_argument('--config', type=str, default='config/config.yml', help='Config file')
    parser.add_argument('--dataset', nargs='+', help='Datasets to run (default: all configured)')
    parser.add_argument('--steps', nargs='+', choices=sorted(SELECTORS), help='Run specific steps only')
    parser.add_argument('--compare', nargs=2, metavar=('FIRST', 'SECOND'),
                        choices=sorted(SELECTORS), help='Compare the top features of two methods')
    parser.add_argument('--top_n', type=int, help='Rows shown per report and compared')
    parser.add_argument('--seed', type=int, help='Random seed (overrides config)')
    parser.add_argument('--figures_dir', type=str, help='Save figures to this directory')
    parser.add_argument('--quiet', action='store_true', help='Only print reports')

    args = parser.parse_args(argv)

    config = load_config(args.config) if Path(args.config).exists() else {}
    if not config:
        print(f"[WARNING] Configuration file not found or empty: {args.config} (using defaults)")

    datasets = config.get('datasets') or {'breast_cancer': {}, 'iris': {}}
    names = args.dataset or list(datasets)
    unknown = [n for n in names if n not in datasets]
    if unknown:
        raise ConfigurationError(f"Datasets not configured: {unknown}")

    steps = args.steps or config.get('steps') or sorted(SELECTORS)
    seed = args.seed if args.seed is not None else config.get('seed')
    comparison_cfg = config.get('comparison') or {}
    compare = args.compare
    if compare is None and comparison_cfg.get('first') and comparison_cfg.get('second'):
        compare = (comparison_cfg['first'], comparison_cfg['second'])
    report_cfg = config.get('report') or {}
    top_n = args.top_n if args.top_n is not None else report_cfg.get("top_n")
    compare_top_n = args.top_n if args.top_n is not None else comparison_cfg.get("top_n", top_n)
    figures_dir = args.figures_dir or config.get('figures_dir')

    print("\n" + "=" * 80)
    print("FEATURE SELECTION PIPELINE")
    print("=" * 80)
    print(f"    Steps: {', '.join(steps)}")
    print(f"    Seed: {seed}")

    all_results = {}
    for name in names:
        all_results[name] = run_dataset(
            name, datasets[name], config, steps,
            seed=seed,
            compare=compare,
            top_n=top_n,
            compare_top_n=compare_top_n,
            precision=report_cfg.get('precision', 4),
            figures_dir=figures_dir,
            verbose=not args.quiet,
        )

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE")
    print("=" * 80)
    return all_results


if __name__ == '__main__':
    main()
