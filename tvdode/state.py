"""
Integration state shared between the caller and the time integrators.

The integrators keep no state of their own between calls: everything that
must survive from one call to the next (solution, time, call-protocol flags
and, for the multistep scheme, the rolling history) lives in an
IntegrationState owned by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

MULTISTEP_DEPTH = 4


class Phase(Enum):
    """Call-protocol phase."""
    UNINITIALIZED = 1
    CONTINUING = 2


class Mode(Enum):
    """What a call to the RK-TVD integrator should do."""
    INTEGRATE = 1  # step until t >= tout
    SINGLE_STEP = 2  # exactly one step of size dt


class HistoryBuffer:
    """
    Fixed-capacity rolling buffer of past vectors.

    Slot 0 is the most recent entry and slot ``depth - 1`` the oldest.
    ``push`` shifts every slot one position into the past, in place, and
    drops the oldest entry; the buffer never grows.
    """

    def __init__(self, depth: int, size: int):
        self._values = np.zeros((depth, size), dtype=np.float64)

    @property
    def depth(self) -> int:
        """Number of slots."""
        return self._values.shape[0]

    @property
    def size(self) -> int:
        """Length of each stored vector."""
        return self._values.shape[1]

    @property
    def values(self) -> NDArray[np.float64]:
        """Backing array of shape (depth, size)."""
        return self._values

    def push(self, v: ArrayLike) -> None:
        """Store ``v`` as the most recent entry."""
        self._values[1:] = self._values[:-1]
        self._values[0] = v

    def __getitem__(self, slot: int) -> NDArray[np.float64]:
        return self._values[slot]

    def __len__(self) -> int:
        return self.depth

    def __repr__(self) -> str:
        return f"HistoryBuffer(depth={self.depth}, size={self.size})"


@dataclass
class IntegrationState:
    """
    Mutable per-run integration context.

    Attributes
    ----------
    u : NDArray[np.float64]
        Solution vector, updated in place by the integrators.
    t : float
        Current time.
    phase : Phase
        UNINITIALIZED until the first successful call, CONTINUING afterwards.
    mode : Mode
        RK-TVD call mode (ignored by the multistep integrator).
    history_u, history_udot : HistoryBuffer or None
        Past solutions and derivatives for the multistep integrator.
    """
    u: NDArray[np.float64]
    t: float = 0.0
    phase: Phase = Phase.UNINITIALIZED
    mode: Mode = Mode.INTEGRATE
    history_u: HistoryBuffer | None = None
    history_udot: HistoryBuffer | None = None
    n_steps: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        self.u = np.asarray(self.u, dtype=np.float64)
        self.t = float(self.t)

    @classmethod
    def for_multistep(
        cls,
        u0: ArrayLike,
        t0: float = 0.0,
        depth: int = MULTISTEP_DEPTH,
    ) -> "IntegrationState":
        """Fresh state with empty history buffers for the multistep integrator."""
        u = np.array(u0, dtype=np.float64)
        return cls(
            u=u,
            t=t0,
            history_u=HistoryBuffer(depth, u.size),
            history_udot=HistoryBuffer(depth, u.size),
        )

    @property
    def size(self) -> int:
        """Length of the solution vector."""
        return self.u.size
