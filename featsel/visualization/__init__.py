"""Figures for feature selection results."""

from .visualizers import (
    create_all_visualizations,
    plot_selection_result,
    plot_correlation_heatmap,
    plot_size_profile,
    plot_lambda_curve
)

__all__ = [
    'create_all_visualizations',
    'plot_selection_result',
    'plot_correlation_heatmap',
    'plot_size_profile',
    'plot_lambda_curve'
]
