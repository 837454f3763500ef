"""Plain-text reports for selection results."""

import pandas as pd

_HEADER_KEYS = {
    "correlation": ("cutoff", "n_features"),
    "rfe": ("best_size", "best_score", "folds", "estimator", "seed"),
    "lasso": ("metric", "lambda_min", "lambda_1se", "lambda", "best_score", "positive_class", "seed"),
    "random_forest": ("task", "n_estimators", "oob_score", "ranked_by", "seed"),
}


def _fmt(value, precision):
    if isinstance(value, float):
        return f"{value:.{precision}g}" if abs(value) < 1e-3 and value != 0 else f"{value:.{precision}f}"
    return str(value)


def format_report(result, top_n=None, precision=4, title=None):
    """
    Render a SelectionResult as a ranked text table.

    Args:
        result: SelectionResult to render.
        top_n (int, optional): Only show the first ``top_n`` rows.
        precision (int): Decimal places for scores.
        title (str, optional): Heading line; defaults to the method name.

    Returns:
        str: The report.
    """
    lines = ["=" * 60, title or f"FEATURE SELECTION: {result.method.upper()}", "=" * 60]

    for key in _HEADER_KEYS.get(result.method, ()):
        if key in result.metadata:
            lines.append(f"{key:>16}: {_fmt(result.metadata[key], precision)}")

    frame = result.to_frame()
    if top_n is not None:
        frame = frame.head(top_n)

    if frame.empty:
        lines.append("")
        lines.append("(no features selected)")
    else:
        lines.append("")
        lines.append(frame.to_string(float_format=lambda v: f"{v:.{precision}f}"))
        if top_n is not None and len(result) > top_n:
            lines.append(f"... {len(result) - top_n} more")

    if result.method == "rfe" and "size_scores" in result.metadata:
        sizes = pd.DataFrame({
            "mean_score": pd.Series(dict(result.metadata["size_scores"])),
            "std": pd.Series(dict(result.metadata["size_score_std"])),
        })
        sizes.index.name = "size"
        lines.append("")
        lines.append("Cross-validated score by subset size:")
        lines.append(sizes.to_string(float_format=lambda v: f"{v:.{precision}f}"))

    return "\n".join(lines)


def format_comparison(comparison):
    """Render the output of ``compare_results`` as text."""
    top = comparison["top_n"] if comparison["top_n"] is not None else "all"
    return "\n".join([
        "=" * 60,
        f"COMPARISON: {comparison['first']} vs {comparison['second']} (top {top})",
        "=" * 60,
        f"  Common ({len(comparison['common'])}): {', '.join(comparison['common']) or '-'}",
        f"  Only {comparison['first']}: {', '.join(comparison['only_first']) or '-'}",
        f"  Only {comparison['second']}: {', '.join(comparison['only_second']) or '-'}",
        f"  Jaccard index: {comparison['jaccard']:.3f}",
    ])
