"""
Output monitors for simulation results.

Import all monitors here to register them automatically.
"""

from . import base, console, txt

__all__ = ["base", "console", "txt"]
