"""Generators for audit report output files."""

from .dashboard import render_dashboard

__all__ = ["render_dashboard"]
