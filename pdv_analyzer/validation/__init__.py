"""Validation utilities.

This package contains *non-interactive* tooling for validating the velocity
estimates against simulated data with a known reference velocity.

Design goals
------------
1) Keep validation code out of the UI path (no UI coupling).
2) Make comparisons reproducible and scriptable.
3) Export per-sample / per-frame tables as DataFrames for plotting elsewhere.
"""

from .reference import (
    ErrorStats,
    VelocityComparison,
    compare_with_reference,
    pdv_table,
    quadrature_table,
)

__all__ = [
    "ErrorStats",
    "VelocityComparison",
    "compare_with_reference",
    "pdv_table",
    "quadrature_table",
]
