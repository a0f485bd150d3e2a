"""
1D computational grids.

A grid is a partition of [xmin, xmax] into contiguous cells described by its
edge coordinates. Four spacing laws are provided:

- linear: uniform widths
- log: edges uniformly spaced in log(x)
- geometric: widths in geometric progression with a given ratio
- bilinear: two uniform sub-grids joined at a crossing point
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import GridResolutionWarning, InvalidCellCountError, InvalidRangeError

if TYPE_CHECKING:
    from .config import GridConfig

logger = logging.getLogger(__name__)


def _readonly(values: NDArray[np.float64]) -> NDArray[np.float64]:
    values.flags.writeable = False
    return values


@dataclass(frozen=True, eq=False)
class Grid1D:
    """
    Immutable 1D grid.

    Attributes
    ----------
    edges : NDArray[np.float64]
        Cell edge coordinates, length ncells + 1, read-only.
    name : str
        Informational label (e.g. "x [m]").

    Notes
    -----
    left, right, width and center are derived from ``edges`` on first access
    and cached. All returned arrays are read-only.
    """
    edges: NDArray[np.float64]
    name: str = ""

    def __post_init__(self) -> None:
        edges = np.array(self.edges, dtype=np.float64)
        if edges.ndim != 1 or edges.size < 2:
            raise InvalidCellCountError(
                f"Grid '{self.name}' needs a 1D edge array with at least 2 entries, "
                f"got shape {edges.shape}"
            )
        if not np.all(np.isfinite(edges)):
            raise InvalidRangeError(f"Grid '{self.name}' has non-finite edges")

        steps = np.diff(edges)
        if np.any(steps < 0):
            raise InvalidRangeError(f"Grid '{self.name}' edges must be increasing")

        n_collapsed = int(np.count_nonzero(steps == 0))
        if n_collapsed:
            warnings.warn(
                f"Grid '{self.name}': {n_collapsed} of {steps.size} cells are narrower "
                f"than the floating-point resolution of their edges and have zero width.",
                GridResolutionWarning,
                stacklevel=3,
            )

        object.__setattr__(self, "edges", _readonly(edges))

    @classmethod
    def from_edges(cls, edges: ArrayLike, name: str = "") -> "Grid1D":
        """Build a grid from an explicit, increasing edge sequence."""
        return cls(edges=np.asarray(edges, dtype=np.float64), name=name)

    @property
    def ncells(self) -> int:
        """Number of cells."""
        return self.edges.size - 1

    @property
    def xmin(self) -> float:
        """Left boundary."""
        return float(self.edges[0])

    @property
    def xmax(self) -> float:
        """Right boundary."""
        return float(self.edges[-1])

    @property
    def length(self) -> float:
        """Domain length."""
        return self.xmax - self.xmin

    @property
    def left(self) -> NDArray[np.float64]:
        """Left edge of each cell."""
        return self.edges[:-1]

    @property
    def right(self) -> NDArray[np.float64]:
        """Right edge of each cell."""
        return self.edges[1:]

    @cached_property
    def width(self) -> NDArray[np.float64]:
        """Cell widths, right - left."""
        return _readonly(self.right - self.left)

    @cached_property
    def center(self) -> NDArray[np.float64]:
        """Cell centers, (left + right) / 2."""
        return _readonly((self.left + self.right) / 2)

    @property
    def min_width(self) -> float:
        """Smallest cell width."""
        return float(self.width.min())

    def __len__(self) -> int:
        return self.ncells

    def __repr__(self) -> str:
        return (
            f"Grid1D(name={self.name!r}, ncells={self.ncells}, "
            f"xmin={self.xmin!r}, xmax={self.xmax!r})"
        )


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------

def _check_ncells(ncells: int) -> None:
    if ncells < 1:
        raise InvalidCellCountError(f"Number of cells must be >= 1, got {ncells}")


def _check_range(xmin: float, xmax: float) -> None:
    # written so that NaN bounds fail too
    if not xmin < xmax:
        raise InvalidRangeError(f"Grid requires xmin < xmax, got [{xmin}, {xmax}]")


def _finish(edges: NDArray[np.float64], xmin: float, xmax: float, name: str) -> Grid1D:
    """Pin the endpoints to the requested bounds and build the grid."""
    edges[0] = xmin
    edges[-1] = xmax
    grid = Grid1D(edges=edges, name=name)
    logger.debug("Built %r", grid)
    return grid


def _linear_edges(xmin: float, xmax: float, ncells: int) -> NDArray[np.float64]:
    return np.linspace(xmin, xmax, ncells + 1, dtype=np.float64)


# ---------------------------------------------------------------------------
# Spacing laws
# ---------------------------------------------------------------------------

def linear(xmin: float, xmax: float, ncells: int, name: str = "") -> Grid1D:
    """
    Uniform grid: edges[i] = xmin + i * (xmax - xmin) / ncells.

    Raises
    ------
    InvalidRangeError
        If xmax <= xmin.
    InvalidCellCountError
        If ncells < 1.
    """
    _check_ncells(ncells)
    _check_range(xmin, xmax)
    return _finish(_linear_edges(xmin, xmax, ncells), xmin, xmax, name)


def log(xmin: float, xmax: float, ncells: int, name: str = "") -> Grid1D:
    """
    Logarithmic grid: edges[i] = xmin * (xmax / xmin) ** (i / ncells).

    The ratio edges[i+1] / edges[i] is the same for every cell.

    Raises
    ------
    InvalidRangeError
        If xmin <= 0 or xmax <= xmin.
    InvalidCellCountError
        If ncells < 1.
    """
    _check_ncells(ncells)
    if not xmin > 0:
        raise InvalidRangeError(f"Log grid requires xmin > 0, got {xmin}")
    _check_range(xmin, xmax)

    exponent = np.arange(ncells + 1, dtype=np.float64) / ncells
    edges = xmin * (xmax / xmin) ** exponent
    return _finish(edges, xmin, xmax, name)


def geometric(
    xmin: float,
    xmax: float,
    ratio: float,
    ncells: int,
    name: str = "",
) -> Grid1D:
    """
    Geometrically stretched grid: width[i+1] = ratio * width[i].

    The first width is chosen so that the widths add up to xmax - xmin:

        w0 = (xmax - xmin) * (ratio - 1) / (ratio**ncells - 1)

    and ratio == 1 reduces to the uniform grid.

    Parameters
    ----------
    xmin, xmax : float
        Domain bounds.
    ratio : float
        Common ratio of successive widths (> 0). Values below 1 make the
        cells shrink towards xmax.
    ncells : int
        Number of cells.
    name : str
        Grid label.

    Raises
    ------
    InvalidRangeError
        If xmax <= xmin or ratio <= 0.
    InvalidCellCountError
        If ncells < 1.
    """
    _check_ncells(ncells)
    _check_range(xmin, xmax)
    if not ratio > 0:
        raise InvalidRangeError(f"Geometric grid requires ratio > 0, got {ratio}")

    length = xmax - xmin
    i = np.arange(ncells, dtype=np.float64)
    if ratio == 1:
        widths = np.full(ncells, length / ncells)
    elif ratio > 1:
        # same series, scaled by ratio**-ncells so ratio**ncells never overflows
        widths = length * (ratio - 1) * ratio ** (i - ncells) / (1 - ratio ** -ncells)
    else:
        widths = length * (ratio - 1) * ratio ** i / (ratio ** ncells - 1)

    edges = np.empty(ncells + 1, dtype=np.float64)
    edges[0] = xmin
    np.cumsum(widths, out=edges[1:])
    edges[1:] += xmin
    return _finish(edges, xmin, xmax, name)


def bilinear(
    xmin: float,
    xcross: float,
    xmax: float,
    ncells: Sequence[int],
    name: str = "",
) -> Grid1D:
    """
    Two uniform grids, [xmin, xcross] and [xcross, xmax], joined at xcross.

    Parameters
    ----------
    xmin, xcross, xmax : float
        Bounds and crossing point, xmin < xcross < xmax.
    ncells : sequence of two ints
        Cells in the left and right sub-grids. The edge at index
        ``ncells[0]`` is exactly ``xcross``.

    Raises
    ------
    InvalidRangeError
        If the three points are not strictly increasing.
    InvalidCellCountError
        If ``ncells`` does not hold two counts >= 1.
    """
    if len(ncells) != 2:
        raise InvalidCellCountError(
            f"Bilinear grid needs exactly two cell counts, got {len(ncells)}"
        )
    n_left, n_right = ncells
    _check_ncells(n_left)
    _check_ncells(n_right)
    _check_range(xmin, xcross)
    _check_range(xcross, xmax)

    left = _linear_edges(xmin, xcross, n_left)
    right = _linear_edges(xcross, xmax, n_right)
    left[-1] = xcross
    edges = np.concatenate([left, right[1:]])
    return _finish(edges, xmin, xmax, name)


def create_grid(config: "GridConfig") -> Grid1D:
    """
    Create a grid from configuration.

    Parameters
    ----------
    config : GridConfig
        Grid configuration.

    Returns
    -------
    Grid1D
        The computational grid.
    """
    if config.law == "linear":
        return linear(config.xmin, config.xmax, config.ncells, name=config.name)
    elif config.law == "log":
        return log(config.xmin, config.xmax, config.ncells, name=config.name)
    elif config.law == "geometric":
        return geometric(
            config.xmin, config.xmax, config.ratio, config.ncells, name=config.name
        )
    else:
        return bilinear(
            config.xmin, config.xcross, config.xmax, config.ncells, name=config.name
        )
