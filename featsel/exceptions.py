"""Error and warning types raised by the feature selection pipeline."""


class FeatureSelectionError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(FeatureSelectionError, ValueError):
    """Invalid parameters: subset sizes, fold counts, cutoffs, method names."""


class DomainError(FeatureSelectionError, ValueError):
    """Data that a selector cannot work with (e.g. a single-class target)."""


class EstimatorError(FeatureSelectionError, RuntimeError):
    """An external estimator failed during fit, score or importance extraction."""


class PipelineStateError(FeatureSelectionError, RuntimeError):
    """A pipeline step was requested out of order."""


class DataQualityWarning(UserWarning):
    """Missing or unparseable values were imputed."""
