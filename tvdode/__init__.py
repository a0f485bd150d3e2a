"""
tvdode: TVD time integration and 1D grids for method-of-lines solvers.

Usage:
    from tvdode import grid, RKTVDSolver

    gx = grid.geometric(0.0, 1.0, ratio=1.02, ncells=200)
    solver = RKTVDSolver(fu, order=3)
    solver.init(u0, t0=0.0)
    state = solver.step(tout=0.5, dt=1e-3)

Or via CLI:
    python run.py config.yaml
"""

from . import grid
from .config import SimulationConfig, load_config
from .errors import (
    GridConfigError,
    GridResolutionWarning,
    IntegratorStateError,
    InvalidCellCountError,
    InvalidRangeError,
)
from .grid import Grid1D, create_grid
from .multistep import mstvd_step
from .runner import SimulationResult, run_from_file, run_simulation
from .solver import MSTVDSolver, RKTVDSolver
from .state import HistoryBuffer, IntegrationState, Mode, Phase
from .timesteppers import rktvd_step

__version__ = "0.1.0"

__all__ = [
    "grid",
    "Grid1D",
    "create_grid",
    "GridConfigError",
    "InvalidRangeError",
    "InvalidCellCountError",
    "IntegratorStateError",
    "GridResolutionWarning",
    "Phase",
    "Mode",
    "HistoryBuffer",
    "IntegrationState",
    "rktvd_step",
    "mstvd_step",
    "RKTVDSolver",
    "MSTVDSolver",
    "SimulationConfig",
    "load_config",
    "SimulationResult",
    "run_simulation",
    "run_from_file",
]
