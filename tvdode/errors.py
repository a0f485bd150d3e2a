"""
Exception and warning types.

Two families are kept strictly apart:

- GridConfigError and its subclasses are recoverable configuration errors
  raised while building a grid, before any time stepping begins.
- IntegratorStateError signals a broken call protocol (bad order, mode,
  phase or history shape). It indicates a programming error in the caller
  and is never caught or retried inside the package.
"""

from __future__ import annotations


class GridConfigError(ValueError):
    """Invalid grid construction parameters."""


class InvalidRangeError(GridConfigError):
    """Domain bounds (or spacing ratio) are not admissible for the law."""


class InvalidCellCountError(GridConfigError):
    """A requested number of cells is smaller than 1."""


class IntegratorStateError(RuntimeError):
    """Fatal violation of the integrator call protocol."""


class GridResolutionWarning(UserWarning):
    """Some cells are narrower than the floating-point spacing of their edges."""
