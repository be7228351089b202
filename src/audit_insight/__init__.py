"""Audit Insight - normalize, score and browse front-end audit reports."""

__version__ = "0.1.0"
