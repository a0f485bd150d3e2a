"""
Explicit TVD Runge-Kutta time integration (orders 1, 2 and 3).

The schemes are the optimal TVD Runge-Kutta methods of Shu & Osher, written
as convex combinations of forward Euler steps (ICASE report 97-65, eqs.
4.10-4.11). If the spatial operator is TVD under forward Euler, these schemes
are TVD under the same time step restriction.

The integrator follows the LSODE calling convention: the caller owns an
IntegrationState whose ``phase`` tells the integrator whether this is the
first call of a problem, and whose ``mode`` selects between integrating up
to an output time and taking a single step.
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numpy.typing import NDArray

from .errors import IntegratorStateError
from .registry import register_timestepper
from .state import IntegrationState, Mode, Phase

logger = logging.getLogger(__name__)


# Derivative callback: (t, u) -> du/dt
RHSFunction = Callable[[float, NDArray[np.float64]], NDArray[np.float64]]

# Single-step update: (fu, u, t, dt, work) -> None, updates u in place
StepFunction = Callable[
    [RHSFunction, NDArray[np.float64], float, float, NDArray[np.float64]], None
]

VALID_ORDERS = (1, 2, 3)


@register_timestepper("tvd_rk1")
def tvd_rk1_update(
    fu: RHSFunction,
    u: NDArray[np.float64],
    t: float,
    dt: float,
    work: NDArray[np.float64],
) -> None:
    """
    Forward Euler step, in place.

    u^{n+1} = u^n + dt * f(t, u^n)

    Parameters
    ----------
    fu : Callable
        Derivative function f(t, u).
    u : NDArray
        Current solution, overwritten with the new one.
    t : float
        Current time.
    dt : float
        Time step.
    work : NDArray
        Scratch array shaped like u (unused for this scheme).
    """
    u += dt * fu(t, u)


@register_timestepper("tvd_rk2")
def tvd_rk2_update(
    fu: RHSFunction,
    u: NDArray[np.float64],
    t: float,
    dt: float,
    work: NDArray[np.float64],
) -> None:
    """
    Second-order TVD Runge-Kutta step (Heun), in place.

    u*      = u^n + dt * f(t, u^n)
    u^{n+1} = (u^n + u* + dt * f(t + dt, u*)) / 2
    """
    ui = work
    np.multiply(fu(t, u), dt, out=ui)
    ui += u
    ui += dt * fu(t + dt, ui)
    u += ui
    u /= 2


@register_timestepper("tvd_rk3")
def tvd_rk3_update(
    fu: RHSFunction,
    u: NDArray[np.float64],
    t: float,
    dt: float,
    work: NDArray[np.float64],
) -> None:
    """
    Third-order TVD Runge-Kutta step, in place.

    u*      = u^n + dt * f(t, u^n)
    u**     = (3 u^n + u* + dt * f(t + dt, u*)) / 4
    u^{n+1} = (u^n + 2 u** + 2 dt * f(t + dt/2, u**)) / 3
    """
    ui = work
    np.multiply(fu(t, u), dt, out=ui)
    ui += u
    ui += dt * fu(t + dt, ui)
    ui += 3 * u
    ui /= 4
    udot = fu(t + dt / 2, ui)
    u += 2 * ui
    u += (2 * dt) * udot
    u /= 3


_SCHEMES: dict[int, StepFunction] = {
    1: tvd_rk1_update,
    2: tvd_rk2_update,
    3: tvd_rk3_update,
}


def rktvd_step(
    fu: RHSFunction,
    state: IntegrationState,
    tout: float,
    dt: float,
    order: int = 3,
) -> IntegrationState:
    """
    Advance ``state`` with the TVD Runge-Kutta scheme of the given order.

    With ``state.mode == Mode.INTEGRATE`` steps of size ``dt`` are taken
    until ``state.t >= tout``; with ``Mode.SINGLE_STEP`` exactly one step is
    taken. There is no step size adjustment, so the last step overshoots
    ``tout`` when ``dt`` does not divide ``tout - t``.

    If ``state.t > tout`` on entry the call returns without touching the
    state.

    Parameters
    ----------
    fu : Callable
        Derivative function f(t, u) returning an array shaped like u.
    state : IntegrationState
        Caller-owned state, updated in place.
    tout : float
        Time at which the next output is wanted.
    dt : float
        Time step (> 0).
    order : int
        Order of the scheme: 1, 2 or 3.

    Returns
    -------
    IntegrationState
        The same ``state`` object.

    Raises
    ------
    IntegratorStateError
        On the first call (phase UNINITIALIZED) if ``order`` or ``mode`` is
        invalid; on any call if ``phase`` is not a valid Phase or ``dt`` is
        not positive.
    """
    if state.t > tout:
        return state

    if state.phase is Phase.UNINITIALIZED:
        if order not in VALID_ORDERS:
            raise IntegratorStateError(
                f"Invalid order {order!r} for TVD Runge-Kutta. Valid set: {VALID_ORDERS}"
            )
        if not isinstance(state.mode, Mode):
            raise IntegratorStateError(
                f"Invalid mode {state.mode!r} for TVD Runge-Kutta. "
                f"Valid set: {[m.name for m in Mode]}"
            )
    elif state.phase is not Phase.CONTINUING:
        raise IntegratorStateError(
            f"Invalid phase {state.phase!r} for TVD Runge-Kutta. "
            f"Valid set: {[p.name for p in Phase]}"
        )

    if not dt > 0:
        raise IntegratorStateError(f"Time step must be positive, got {dt!r}")

    scheme = _SCHEMES.get(order)
    if scheme is None:
        raise IntegratorStateError(f"No TVD Runge-Kutta scheme of order {order!r}")

    work = np.empty_like(state.u)
    single = state.mode is Mode.SINGLE_STEP
    t_start = state.t
    n = 0
    while True:
        scheme(fu, state.u, state.t, dt, work)
        state.t += dt
        n += 1
        if state.t >= tout or single:
            break

    state.n_steps += n
    if state.phase is Phase.UNINITIALIZED:
        state.phase = Phase.CONTINUING

    logger.debug(
        "rktvd order %d: %d step(s) from t=%.6g to t=%.6g (tout=%.6g)",
        order, n, t_start, state.t, tout,
    )
    return state
