#!/usr/bin/env python3
"""
CLI entry point for running simulations.

Usage:
    python run.py config.yaml

Creates a new timestamped run folder, copies the YAML into it, and writes
all monitor output into that same folder. The original YAML remains in
place for easy re-running.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from datetime import datetime
from pathlib import Path


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Integrate a 1D method-of-lines problem with a TVD scheme from YAML config.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python run.py examples/advection_geometric.yaml
    python run.py examples/linear_growth_mstvd.yaml -v

Creates a new run folder in the same directory as the YAML, named
<yaml_stem>_YYYY-MM-DD_HH:MM:SS, copies the YAML into it, and writes all
outputs there.
        """,
    )
    parser.add_argument(
        "config",
        type=Path,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging and tracebacks",
    )

    args = parser.parse_args()
    config_path = args.config.resolve()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        from tvdode.config import load_config
        from tvdode.runner import run_simulation

        print(f"Loading configuration: {config_path}")
        config = load_config(config_path)

        # Create new run folder: yaml_name + YYYY-MM-DD_HH:MM:SS
        timestamp = datetime.now().strftime("%Y-%m-%d_%H:%M:%S")
        run_dir = config_path.parent / f"{config_path.stem}_{timestamp}"
        run_dir.mkdir(parents=True, exist_ok=True)

        # Copy the YAML into the run folder (keep original for re-running)
        dest_yaml = run_dir / config_path.name
        shutil.copy2(str(config_path), str(dest_yaml))
        print(f"Run folder: {run_dir} (copied config to {dest_yaml.name})")

        config.output.directory = str(run_dir)
        result = run_simulation(config)

        print(
            f"Simulation complete. Outputs in {run_dir}. "
            f"Reached t={result.state.t:.6g} in {result.state.n_steps} steps "
            f"on {result.grid.ncells} cells."
        )
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
