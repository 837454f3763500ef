"""
Visualization Module

Saves figures for selection results: ranked scores, the correlation heatmap,
the RFE score-by-size profile and the lasso cross-validation curve.
"""

import numpy as np
from pathlib import Path
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns

sns.set_theme(style="whitegrid", context="paper", palette="Set2")


def _prepare(output_file):
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    return output_file


def _save(fig, output_file):
    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"    [Saved] {output_file}")
    return output_file


def plot_selection_result(result, output_file, top_n=20, metric=None):
    """
    Horizontal bar chart of the top-ranked features.

    Args:
        result: SelectionResult to plot.
        output_file: PNG path.
        top_n: Number of features shown.
        metric: Optional name from ``result.extra_scores`` to plot instead of the main score.
    """
    output_file = _prepare(output_file)
    if metric is not None:
        result = result.ranked_by(metric)
    features = result.top(top_n)
    scores = list(result.scores[:len(features)])

    fig, ax = plt.subplots(figsize=(8, max(2.5, 0.35 * len(features) + 1)))
    if features:
        sns.barplot(x=scores, y=features, ax=ax, orient='h', color=sns.color_palette()[0])
    ax.set_xlabel(metric or 'score')
    ax.set_ylabel('')
    ax.set_title(f'{result.method}: top {len(features)} features')
    return _save(fig, output_file)


def plot_correlation_heatmap(corr, output_file, cutoff=None):
    """Heatmap of a correlation matrix (lower triangle), optionally outlining pairs above ``cutoff``."""
    output_file = _prepare(output_file)
    size = max(4, 0.4 * len(corr.columns) + 2)
    fig, ax = plt.subplots(figsize=(size, size))
    mask = np.triu(np.ones_like(corr.to_numpy(), dtype=bool), k=1)
    sns.heatmap(corr, mask=mask, cmap='RdBu_r', center=0, vmin=-1, vmax=1,
                square=True, linewidths=0.5, cbar_kws={'shrink': 0.7}, ax=ax)
    if cutoff is not None:
        rows, cols = np.where((np.abs(corr.to_numpy()) > cutoff) & ~mask)
        for i, j in zip(rows, cols):
            if i != j:
                ax.add_patch(plt.Rectangle((j, i), 1, 1, fill=False, edgecolor='gold', lw=1.5))
    ax.set_title('Feature correlation' + (f' (|r| > {cutoff} outlined)' if cutoff is not None else ''))
    return _save(fig, output_file)


def plot_size_profile(result, output_file):
    """Mean cross-validated score (+/- std) against RFE subset size."""
    output_file = _prepare(output_file)
    size_scores = dict(result.metadata['size_scores'])
    size_std = dict(result.metadata['size_score_std'])
    sizes = sorted(size_scores)
    means = np.array([size_scores[s] for s in sizes])
    stds = np.array([size_std[s] for s in sizes])

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(sizes, means, marker='o')
    ax.fill_between(sizes, means - stds, means + stds, alpha=0.2)
    ax.axvline(result.metadata['best_size'], color='grey', linestyle='--', lw=1)
    ax.set_xlabel('Number of features')
    ax.set_ylabel('Mean CV score')
    ax.set_title('Recursive feature elimination')
    return _save(fig, output_file)


def plot_lambda_curve(result, output_file):
    """Cross-validated metric along the lasso path with lambda_min and lambda_1se marked."""
    output_file = _prepare(output_file)
    lambdas = np.log(np.array(result.metadata['cv_lambdas']))
    means = np.array(result.metadata['cv_mean'])
    errors = np.array(result.metadata['cv_se'])

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.errorbar(lambdas, means, yerr=errors, fmt='o', ms=3, capsize=2, color='firebrick')
    ax.axvline(np.log(result.metadata['lambda_min']), color='grey', linestyle='--', lw=1, label='lambda_min')
    ax.axvline(np.log(result.metadata['lambda_1se']), color='grey', linestyle=':', lw=1, label='lambda_1se')
    ax.set_xlabel('log(lambda)')
    ax.set_ylabel(result.metadata['metric'])
    ax.legend()
    ax.set_title('L1 logistic regression cross-validation')
    return _save(fig, output_file)


def create_all_visualizations(results, output_dir, dataset_name, corr=None, cutoff=None):
    """
    Save every figure that applies to the given results.

    Args:
        results: Mapping of method name -> SelectionResult.
        output_dir: Directory for the PNG files.
        dataset_name: Prefix for file names.
        corr: Optional correlation matrix for the heatmap.
        cutoff: Correlation cutoff outlined in the heatmap.

    Returns:
        list: Paths of the saved figures.
    """
    print(f"\n[Visualization] Creating figures for {dataset_name}...")
    output_dir = Path(output_dir)
    saved = []
    if corr is not None and len(corr.columns) > 1:
        saved.append(plot_correlation_heatmap(corr, output_dir / f'{dataset_name}_correlation.png', cutoff))
    for method, result in results.items():
        if method != 'correlation' and len(result):
            saved.append(plot_selection_result(result, output_dir / f'{dataset_name}_{method}_scores.png'))
        if method == 'rfe':
            saved.append(plot_size_profile(result, output_dir / f'{dataset_name}_rfe_sizes.png'))
        if method == 'lasso':
            saved.append(plot_lambda_curve(result, output_dir / f'{dataset_name}_lasso_cv.png'))
        if method == 'random_forest':
            saved.append(plot_selection_result(
                result, output_dir / f'{dataset_name}_random_forest_impurity.png', metric='impurity'))
    return saved
