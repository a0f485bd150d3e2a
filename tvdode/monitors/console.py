"""
Console output monitor with progress bar.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from tqdm import tqdm

from ..registry import register_monitor
from .base import Monitor

if TYPE_CHECKING:
    from ..grid import Grid1D
    from ..state import IntegrationState


@register_monitor("console")
class ConsoleMonitor(Monitor):
    """
    Console output with tqdm progress bar.

    One bar tick per output time, with the current time and the number of
    steps taken so far as postfix.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_outputs: int = 1,
        total_outputs: int | None = None,
        **kwargs,
    ):
        super().__init__(output_dir, every_n_outputs)
        self.total_outputs = total_outputs
        self._pbar: tqdm | None = None

    def on_start(
        self,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Initialize progress bar."""
        self._pbar = tqdm(total=self.total_outputs, desc="Integrating", unit="output")

    def on_output(
        self,
        index: int,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Update progress bar."""
        if self._pbar is not None:
            self._pbar.update(1)
            self._pbar.set_postfix({"t": f"{state.t:.4f}", "steps": state.n_steps})

    def on_end(
        self,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Close progress bar."""
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None
