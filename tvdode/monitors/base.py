"""
Base class for output monitors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..grid import Grid1D
    from ..state import IntegrationState


class Monitor(ABC):
    """
    Abstract base class for output monitors.

    Monitors are called after each output time has been reached and decide
    whether to write based on their configuration (every_n_outputs).
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_outputs: int = 1,
    ):
        """
        Initialize monitor.

        Parameters
        ----------
        output_dir : Path
            Directory for output files.
        every_n_outputs : int
            Output every N output times.
        """
        self.output_dir = Path(output_dir)
        self.every_n_outputs = every_n_outputs

    def should_output(self, index: int) -> bool:
        """True if output number ``index`` (1-based) is due."""
        return index % self.every_n_outputs == 0

    @abstractmethod
    def on_output(
        self,
        index: int,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """
        Called once per output time; write if should_output() returns True.

        Parameters
        ----------
        index : int
            Output number, starting at 1.
        state : IntegrationState
            Integration state after reaching the output time.
        grid : Grid1D
            The computational grid.
        """
        pass

    def on_start(
        self,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Called before the first step. Override for setup."""
        pass

    def on_end(
        self,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Called after the last output. Override for finalization."""
        pass
