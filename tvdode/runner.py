"""
Main simulation runner.

Builds the grid, the problem and the solver from a SimulationConfig, then
advances the solution through the configured output times, handing each
snapshot to the output monitors.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .config import SimulationConfig, load_config
from .grid import Grid1D, create_grid
from .problems import Problem, create_problem
from .registry import get_integrator, get_monitor
from .state import IntegrationState

# Import submodules to trigger registration of integrators and monitors
from . import monitors  # noqa: F401
from . import solver as solver_module  # noqa: F401

if TYPE_CHECKING:
    from .monitors.base import Monitor

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """
    Outcome of a run.

    Attributes
    ----------
    grid : Grid1D
        The computational grid.
    state : IntegrationState
        Final integration state.
    times : list[float]
        Time actually reached at each output (may overshoot the requested
        output time by less than one step).
    """
    grid: Grid1D
    state: IntegrationState
    times: list[float]


def create_monitors(
    config: SimulationConfig,
    output_dir: Path,
    problem: Problem | None = None,
) -> list["Monitor"]:
    """
    Create monitor instances from configuration.

    Parameters
    ----------
    config : SimulationConfig
        Simulation configuration.
    output_dir : Path
        Base output directory.
    problem : Problem, optional
        Configured problem; supplies the output coordinate of the txt
        monitor. Cell centers are used when omitted.

    Returns
    -------
    list[Monitor]
        List of monitor instances.
    """
    monitor_list = []

    for mon_cfg in config.output.monitors:
        monitor_cls = get_monitor(mon_cfg.type)

        mon_output_dir = output_dir
        if mon_cfg.type == "txt":
            mon_output_dir = output_dir / "txt"
        kwargs = {
            "output_dir": mon_output_dir,
            "every_n_outputs": mon_cfg.every_n_outputs,
        }
        if mon_cfg.type == "txt" and problem is not None:
            kwargs["coord_name"] = problem.coord_name
            kwargs["coords"] = problem.coords
        if mon_cfg.type == "console":
            kwargs["total_outputs"] = config.time.n_outputs

        monitor_list.append(monitor_cls(**kwargs))

    return monitor_list


def check_cfl(config: SimulationConfig, grid: Grid1D) -> float | None:
    """
    Warn if the advection CFL number exceeds 1.

    Returns the CFL number, or None for problems without a velocity.
    """
    if config.problem.type != "advection":
        return None

    min_width = grid.min_width
    if min_width <= 0:
        cfl = float("inf")
    else:
        cfl = abs(config.problem.velocity) * config.integrator.dt / min_width

    if cfl > 1.0:
        warnings.warn(
            f"CFL = {cfl:.3f} > 1, the scheme is not TVD and may be unstable. "
            f"Consider reducing dt or using fewer/wider cells."
        )
    return cfl


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """
    Run a simulation.

    Parameters
    ----------
    config : SimulationConfig
        Complete simulation configuration.

    Returns
    -------
    SimulationResult
        Grid, final state and reached output times.
    """
    grid = create_grid(config.grid)
    problem = create_problem(config.problem, grid)
    check_cfl(config, grid)

    integrator_cfg = config.integrator
    solver_cls = get_integrator(integrator_cfg.method)
    if integrator_cfg.method == "rktvd":
        solver = solver_cls(problem.fu, order=integrator_cfg.order)
    else:
        solver = solver_cls(problem.fu)
    state = solver.init(problem.u0, t0=config.time.t_start)

    output_dir = Path(config.output.directory)
    monitor_list = create_monitors(config, output_dir, problem)

    logger.info(
        "Running %s on %r, dt=%g, %d output(s) up to t=%g",
        integrator_cfg.method, grid, integrator_cfg.dt,
        config.time.n_outputs, config.time.t_end,
    )

    for mon in monitor_list:
        mon.on_start(state, grid)

    times = []
    for index, tout in enumerate(config.time.output_times, start=1):
        state = solver.step(tout, integrator_cfg.dt)
        times.append(state.t)
        for mon in monitor_list:
            mon.on_output(index, state, grid)

    for mon in monitor_list:
        mon.on_end(state, grid)

    logger.info("Finished at t=%g after %d step(s)", state.t, state.n_steps)
    return SimulationResult(grid=grid, state=state, times=times)


def run_from_file(path: str | Path) -> SimulationResult:
    """
    Load configuration from YAML and run simulation.

    Parameters
    ----------
    path : str or Path
        Path to YAML configuration file.

    Returns
    -------
    SimulationResult
        Grid, final state and reached output times.
    """
    config = load_config(path)
    return run_simulation(config)
