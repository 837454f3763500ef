"""Feature selection evaluation pipeline for tabular classification data."""

__version__ = "1.0.0"
