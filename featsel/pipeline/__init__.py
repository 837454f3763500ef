"""Pipeline driver and text reports."""

from .driver import FeatureSelectionPipeline, PipelineState, compare_selectors
from .report import format_report, format_comparison

__all__ = [
    'FeatureSelectionPipeline',
    'PipelineState',
    'compare_selectors',
    'format_report',
    'format_comparison'
]
