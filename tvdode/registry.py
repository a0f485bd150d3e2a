"""
Registry pattern for timesteppers, integrators, problems and monitors.

Usage:
    from tvdode.registry import register_problem, get_problem

    @register_problem("linear_growth")
    def build_linear_growth(config, grid):
        ...

    builder = get_problem("linear_growth")
"""

from typing import Any, Callable, TypeVar

# ---------------------------------------------------------------------------
# Generic registry
# ---------------------------------------------------------------------------

T = TypeVar("T", bound=Callable[..., Any])


class Registry:
    """Generic registry for named callables."""

    def __init__(self, name: str):
        self.name = name
        self._registry: dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[T], T]:
        """Decorator to register a callable under a name."""
        def decorator(fn: T) -> T:
            if name in self._registry:
                raise ValueError(
                    f"{self.name} '{name}' is already registered"
                )
            self._registry[name] = fn
            return fn
        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        """Get a registered callable by name."""
        if name not in self._registry:
            available = ", ".join(sorted(self._registry.keys()))
            raise KeyError(
                f"Unknown {self.name}: '{name}'. Available: {available}"
            )
        return self._registry[name]

    def list_available(self) -> list[str]:
        """List all registered names."""
        return sorted(self._registry.keys())


# ---------------------------------------------------------------------------
# Specific registries
# ---------------------------------------------------------------------------

TIMESTEPPERS = Registry("timestepper")
INTEGRATORS = Registry("integrator")
PROBLEMS = Registry("problem")
MONITORS = Registry("monitor")


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

def register_timestepper(name: str) -> Callable[[T], T]:
    """Decorator to register a single-step update scheme."""
    return TIMESTEPPERS.register(name)


def get_timestepper(name: str) -> Callable[..., Any]:
    """Get a registered timestepper by name."""
    return TIMESTEPPERS.get(name)


def register_integrator(name: str) -> Callable[[T], T]:
    """Decorator to register a solver class."""
    return INTEGRATORS.register(name)


def get_integrator(name: str) -> Callable[..., Any]:
    """Get a registered solver class by name."""
    return INTEGRATORS.get(name)


def register_problem(name: str) -> Callable[[T], T]:
    """Decorator to register a problem builder."""
    return PROBLEMS.register(name)


def get_problem(name: str) -> Callable[..., Any]:
    """Get a registered problem builder by name."""
    return PROBLEMS.get(name)


def register_monitor(name: str) -> Callable[[T], T]:
    """Decorator to register a monitor."""
    return MONITORS.register(name)


def get_monitor(name: str) -> Callable[..., Any]:
    """Get a registered monitor by name."""
    return MONITORS.get(name)
