"""
Reference right-hand sides and initial conditions.

- linear_growth: the decoupled system du_k/dt = a_k u_k, with exact solution
  u_k(t) = u_k(0) exp(a_k t). Used for convergence checks.
- upwind_advection: first-order finite-volume upwind semi-discretization of
  u_t + a u_x = 0 on a (possibly non-uniform) Grid1D.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .grid import Grid1D
from .registry import get_problem, register_problem
from .timesteppers import RHSFunction

if TYPE_CHECKING:
    from .config import ProblemConfig


# ---------------------------------------------------------------------------
# Safe expression evaluation
# ---------------------------------------------------------------------------

# Whitelist of allowed names in IC expressions
SAFE_NAMESPACE: dict[str, Any] = {
    # Math functions
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "exp": np.exp,
    "log": np.log,
    "log10": np.log10,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "tanh": np.tanh,
    "floor": np.floor,
    "ceil": np.ceil,
    "sign": np.sign,
    "heaviside": np.heaviside,
    "where": np.where,
    # Constants
    "pi": np.pi,
    "e": np.e,
    # NumPy
    "np": np,
    "min": np.minimum,
    "max": np.maximum,
}


def evaluate_expression(
    expr: str,
    x: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Safely evaluate a math expression with 'x' as the coordinate.

    Parameters
    ----------
    expr : str
        Expression string (e.g., "where(abs(x - 0.5) < 0.1, 1.0, 0.0)").
    x : NDArray
        Coordinates, typically cell centers.

    Returns
    -------
    NDArray
        Evaluated values, shaped like x. Scalar results are broadcast.

    Raises
    ------
    ValueError
        If the expression is invalid or uses disallowed functions.
    """
    namespace = SAFE_NAMESPACE.copy()
    namespace["x"] = x

    try:
        result = eval(expr, {"__builtins__": {}}, namespace)
    except Exception as e:
        raise ValueError(
            f"Failed to evaluate initial condition expression: {expr!r}\n"
            f"Error: {e}"
        ) from e

    result = np.asarray(result, dtype=np.float64)
    if result.shape != x.shape:
        if result.ndim == 0:
            result = np.full_like(x, result)
        else:
            raise ValueError(
                f"IC expression result has shape {result.shape}, "
                f"expected {x.shape}"
            )

    return result


# ---------------------------------------------------------------------------
# Linear growth
# ---------------------------------------------------------------------------

def linear_growth(rates: ArrayLike) -> RHSFunction:
    """Derivative of du_k/dt = a_k u_k for the given rates a_k."""
    a = np.array(rates, dtype=np.float64)

    def fu(t: float, u: NDArray[np.float64]) -> NDArray[np.float64]:
        return a * u

    return fu


def linear_growth_exact(
    rates: ArrayLike,
    u0: ArrayLike,
    t: float,
    t0: float = 0.0,
) -> NDArray[np.float64]:
    """Exact solution u0 * exp(a (t - t0))."""
    return np.asarray(u0, dtype=np.float64) * np.exp(
        np.asarray(rates, dtype=np.float64) * (t - t0)
    )


# ---------------------------------------------------------------------------
# Upwind advection
# ---------------------------------------------------------------------------

Boundary = Literal["periodic", "transmissive"]


def get_ghost_values(
    u: NDArray[np.float64],
    boundary: Boundary,
) -> tuple[float, float]:
    """
    Ghost cell values for the left and right boundaries.

    Periodic wraps around; transmissive copies the boundary cell
    (zero gradient), which lets waves leave the domain.
    """
    if boundary == "periodic":
        return u[-1], u[0]
    elif boundary == "transmissive":
        return u[0], u[-1]
    else:
        raise ValueError(f"Unknown boundary type: {boundary}")


def upwind_advection(
    grid: Grid1D,
    velocity: float,
    boundary: Boundary = "periodic",
) -> RHSFunction:
    """
    First-order upwind finite-volume operator for u_t + a u_x = 0.

        du_i/dt = -(F_{i+1/2} - F_{i-1/2}) / width_i,  F = a * u_upwind

    where u_upwind is the cell value on the upstream side of each face.
    Forward Euler with this operator is TVD for |a| dt / min(width) <= 1,
    so every TVD time integrator keeps that property.

    Parameters
    ----------
    grid : Grid1D
        Grid holding the cell averages u_i.
    velocity : float
        Advection velocity a.
    boundary : str
        "periodic" or "transmissive".

    Returns
    -------
    Callable
        Derivative function f(t, u).
    """
    if boundary not in ("periodic", "transmissive"):
        raise ValueError(f"Unknown boundary type: {boundary}")
    width = grid.width
    n = grid.ncells

    def fu(t: float, u: NDArray[np.float64]) -> NDArray[np.float64]:
        if u.shape != (n,):
            raise ValueError(f"Expected {n} cell values, got shape {u.shape}")
        left_ghost, right_ghost = get_ghost_values(u, boundary)
        padded = np.concatenate(([left_ghost], u, [right_ghost]))

        # face j is the left face of cell j, j = 0..n
        if velocity >= 0:
            flux = velocity * padded[:-1]
        else:
            flux = velocity * padded[1:]
        return -(flux[1:] - flux[:-1]) / width

    return fu


def total_variation(u: NDArray[np.float64]) -> float:
    """Sum of |u_{i+1} - u_i|."""
    return float(np.abs(np.diff(u)).sum())


def cell_integral(grid: Grid1D, u: NDArray[np.float64]) -> float:
    """Integral of the cell averages u over the grid."""
    return float(np.dot(grid.width, u))


# ---------------------------------------------------------------------------
# Construction from configuration
# ---------------------------------------------------------------------------

@dataclass
class Problem:
    """
    A configured problem, ready for integration.

    Attributes
    ----------
    fu : Callable
        Derivative function f(t, u).
    u0 : NDArray
        Initial condition.
    coord_name : str
        Label of the output coordinate ("x" for cell centers, "k" for
        component indices).
    coords : NDArray
        Output coordinate of each component of u, shaped like u0.
    """
    fu: RHSFunction
    u0: NDArray[np.float64]
    coord_name: str
    coords: NDArray


@register_problem("advection")
def _build_advection(config: "ProblemConfig", grid: Grid1D) -> Problem:
    fu = upwind_advection(grid, config.velocity, config.boundary)
    x = np.asarray(grid.center)
    u0 = evaluate_expression(config.initial_condition, x)
    return Problem(fu=fu, u0=u0, coord_name="x", coords=x)


@register_problem("linear_growth")
def _build_linear_growth(config: "ProblemConfig", grid: Grid1D) -> Problem:
    rates: Sequence[float] = config.rates or []
    fu = linear_growth(rates)
    # the grid plays no role here; 'x' is bound to the rates
    u0 = evaluate_expression(config.initial_condition, np.array(rates, dtype=np.float64))
    return Problem(fu=fu, u0=u0, coord_name="k", coords=np.arange(u0.size))


def create_problem(config: "ProblemConfig", grid: Grid1D) -> Problem:
    """
    Build the derivative function, initial condition and output coordinate
    from configuration.

    Returns
    -------
    Problem
        The configured problem.
    """
    builder = get_problem(config.type)
    return builder(config, grid)
