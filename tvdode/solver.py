"""
Solver objects wrapping the TVD integrators.

A solver binds a derivative function and scheme parameters and owns one
IntegrationState, created by ``init``. Each ``step(tout, dt)`` call forwards
to the stateless integrator function with that state.

    solver = RKTVDSolver(fu, order=3)
    solver.init(u0, t0=0.0)
    for tout in output_times:
        state = solver.step(tout, dt)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .errors import IntegratorStateError
from .multistep import mstvd_step
from .registry import register_integrator
from .state import IntegrationState, Mode
from .timesteppers import RHSFunction, rktvd_step


class _Solver(ABC):
    """Common state handling for the solver classes."""

    name = ""

    def __init__(self, fu: RHSFunction):
        self.fu = fu
        self._state: IntegrationState | None = None

    @abstractmethod
    def _new_state(self, u0: ArrayLike, t0: float) -> IntegrationState:
        """Fresh state holding a copy of ``u0``."""
        pass

    def init(self, u0: ArrayLike, t0: float = 0.0) -> IntegrationState:
        """Start a new problem from a copy of ``u0`` at time ``t0``."""
        self._state = self._new_state(u0, t0)
        return self._state

    @property
    def state(self) -> IntegrationState:
        """The owned integration state."""
        if self._state is None:
            raise IntegratorStateError(
                f"{type(self).__name__}.init() must be called before stepping"
            )
        return self._state

    @property
    def t(self) -> float:
        """Current time."""
        return self.state.t

    @property
    def u(self) -> NDArray[np.float64]:
        """Current solution vector."""
        return self.state.u

    @abstractmethod
    def step(self, tout: float, dt: float) -> IntegrationState:
        """Advance the owned state towards ``tout``."""
        pass


@register_integrator("rktvd")
class RKTVDSolver(_Solver):
    """
    TVD Runge-Kutta solver of order 1, 2 or 3.

    Parameters
    ----------
    fu : Callable
        Derivative function f(t, u).
    order : int
        Scheme order; validated on the first step.
    mode : Mode
        INTEGRATE (advance to each tout) or SINGLE_STEP (one dt per call).
    """

    name = "rktvd"

    def __init__(self, fu: RHSFunction, order: int = 3, mode: Mode = Mode.INTEGRATE):
        super().__init__(fu)
        self.order = order
        self.mode = mode

    def _new_state(self, u0: ArrayLike, t0: float) -> IntegrationState:
        return IntegrationState(u=np.array(u0, dtype=np.float64), t=t0, mode=self.mode)

    def step(self, tout: float, dt: float) -> IntegrationState:
        """Advance to ``tout`` (or by one step in SINGLE_STEP mode)."""
        return rktvd_step(self.fu, self.state, tout, dt, self.order)


@register_integrator("mstvd3")
class MSTVDSolver(_Solver):
    """5-step, 3rd-order TVD multistep solver."""

    name = "mstvd3"

    def _new_state(self, u0: ArrayLike, t0: float) -> IntegrationState:
        return IntegrationState.for_multistep(u0, t0)

    def step(self, tout: float, dt: float) -> IntegrationState:
        """Advance while t <= ``tout``."""
        return mstvd_step(self.fu, self.state, tout, dt)
