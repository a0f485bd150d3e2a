"""Shared fixtures for tvdode tests."""

import numpy as np
import pytest

from tvdode.problems import linear_growth


@pytest.fixture
def rates() -> np.ndarray:
    """Growth rates a_k = k, k = 1..10."""
    return np.arange(1, 11, dtype=np.float64)


@pytest.fixture
def growth_rhs(rates):
    """Derivative of du_k/dt = a_k u_k."""
    return linear_growth(rates)
