"""
Plain-text (.txt) output monitor.

Writes one .txt file per output time: a header line (# output=... t=...),
a column line, then tab-separated columns.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from ..registry import register_monitor
from .base import Monitor

if TYPE_CHECKING:
    from ..grid import Grid1D
    from ..state import IntegrationState


@register_monitor("txt")
class TxtMonitor(Monitor):
    """
    Plain-text columnar output.

    Columns are the output coordinate and the solution value. The
    coordinate is supplied by the problem (``coord_name``, ``coords``);
    without one the cell centers of the grid are written as ``x``.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_outputs: int = 1,
        coord_name: str = "x",
        coords: ArrayLike | None = None,
        **kwargs,
    ):
        super().__init__(output_dir, every_n_outputs)
        self.coord_name = coord_name
        self.coords = None if coords is None else np.asarray(coords)
        self._frame_count = 0

    def on_start(
        self,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Create output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def on_output(
        self,
        index: int,
        state: "IntegrationState",
        grid: "Grid1D",
    ) -> None:
        """Write .txt snapshot if output is due."""
        if not self.should_output(index):
            return

        coords = grid.center if self.coords is None else self.coords
        if coords.shape != state.u.shape:
            raise ValueError(
                f"Output coordinate '{self.coord_name}' has shape {coords.shape}, "
                f"solution has shape {state.u.shape}"
            )
        data = np.column_stack([coords, state.u])

        filepath = self.output_dir / f"snapshot_{self._frame_count:05d}.txt"
        with open(filepath, "w") as f:
            f.write(f"# output={index} t={state.t:.6e}\n")
            f.write(f"# {self.coord_name} u\n")
            np.savetxt(f, data, fmt="%.6e", delimiter="\t")

        self._frame_count += 1
