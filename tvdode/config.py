"""
Configuration parsing and validation for the simulation driver.

Uses pydantic for strict schema validation with helpful error messages.
Only the structure of the file is checked here; admissible grid ranges are
checked by the grid constructors, which raise GridConfigError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------

class GridConfig(BaseModel):
    """1D grid configuration."""
    law: Literal["linear", "log", "geometric", "bilinear"] = Field(
        "linear", description="Spacing law"
    )
    xmin: float = Field(..., description="Left boundary of domain")
    xmax: float = Field(..., description="Right boundary of domain")
    ncells: Union[int, list[int]] = Field(
        ..., description="Number of cells, or [n_left, n_right] for the bilinear law"
    )
    ratio: Optional[float] = Field(
        None, description="Ratio of successive cell widths (geometric law)"
    )
    xcross: Optional[float] = Field(
        None, description="Junction of the two sub-grids (bilinear law)"
    )
    name: str = Field("x", description="Grid label")

    @model_validator(mode="after")
    def validate_law_params(self) -> "GridConfig":
        """Each law needs its own parameters."""
        if self.law == "bilinear":
            if self.xcross is None:
                raise ValueError("bilinear grid requires 'xcross'")
            if not isinstance(self.ncells, list) or len(self.ncells) != 2:
                raise ValueError("bilinear grid requires 'ncells' as [n_left, n_right]")
        elif isinstance(self.ncells, list):
            raise ValueError(f"{self.law} grid requires a single integer 'ncells'")
        if self.law == "geometric" and self.ratio is None:
            raise ValueError("geometric grid requires 'ratio'")
        return self


class IntegratorConfig(BaseModel):
    """Time integration method configuration."""
    method: Literal["rktvd", "mstvd3"] = Field(
        "rktvd", description="TVD Runge-Kutta or 5-step TVD multistep"
    )
    order: int = Field(3, ge=1, le=3, description="Runge-Kutta order (rktvd only)")
    dt: float = Field(..., gt=0, description="Time step size")


class TimeConfig(BaseModel):
    """Output schedule."""
    t_start: float = Field(0.0, description="Initial time")
    t_end: float = Field(..., description="Final output time")
    n_outputs: int = Field(1, gt=0, description="Number of equally spaced output times")

    @model_validator(mode="after")
    def validate_interval(self) -> "TimeConfig":
        if self.t_end <= self.t_start:
            raise ValueError("time.t_end must be > time.t_start")
        return self

    @property
    def output_times(self) -> list[float]:
        """Output times t_start + k (t_end - t_start) / n_outputs, k = 1..n_outputs."""
        span = self.t_end - self.t_start
        return [
            self.t_start + k * span / self.n_outputs
            for k in range(1, self.n_outputs + 1)
        ]


class ProblemConfig(BaseModel):
    """Right-hand side and initial condition."""
    type: Literal["advection", "linear_growth"] = Field(..., description="Problem type")
    # Advection
    velocity: float = Field(1.0, description="Advection velocity (advection)")
    boundary: Literal["periodic", "transmissive"] = Field(
        "periodic", description="Boundary treatment (advection)"
    )
    initial_condition: str = Field(
        "1.0",
        description="Expression in 'x'; x is the cell centers (advection) or the rates (linear_growth)",
    )
    # Linear growth
    rates: Optional[list[float]] = Field(
        None, description="Growth rates a_k of du_k/dt = a_k u_k (linear_growth)"
    )

    @model_validator(mode="after")
    def validate_problem_params(self) -> "ProblemConfig":
        if self.type == "linear_growth" and not self.rates:
            raise ValueError("linear_growth problem requires non-empty 'rates'")
        return self


class MonitorConfig(BaseModel):
    """Output monitor configuration."""
    type: Literal["console", "txt"] = Field(..., description="Monitor type")
    every_n_outputs: int = Field(1, gt=0, description="Write every N output times")


class OutputConfig(BaseModel):
    """Output configuration."""
    directory: str = Field("./results", description="Output directory")
    monitors: list[MonitorConfig] = Field(
        default_factory=list, description="List of output monitors"
    )


# ---------------------------------------------------------------------------
# Main configuration
# ---------------------------------------------------------------------------

class SimulationConfig(BaseModel):
    """Complete simulation configuration."""
    grid: GridConfig
    integrator: IntegratorConfig
    time: TimeConfig
    problem: ProblemConfig
    output: OutputConfig = Field(default_factory=OutputConfig)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_config(path: str | Path) -> SimulationConfig:
    """
    Load and validate a YAML configuration file.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    SimulationConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    pydantic.ValidationError
        If the configuration is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    return SimulationConfig.model_validate(raw)
