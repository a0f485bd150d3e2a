"""
Unit test: TVD Runge-Kutta integrator.

Convergence on du_k/dt = k u_k, call-protocol checks (phase, mode, order)
and single-step / integrate-to-output equivalence.
Run: pytest tests/test_timesteppers.py -v
"""

import numpy as np
import pytest

from tvdode import grid
from tvdode.errors import IntegratorStateError
from tvdode.problems import total_variation, upwind_advection
from tvdode.registry import get_timestepper
from tvdode.state import IntegrationState, Mode, Phase
from tvdode.timesteppers import (
    rktvd_step,
    tvd_rk1_update,
    tvd_rk2_update,
    tvd_rk3_update,
)


@pytest.mark.parametrize("order, rtol", [(1, 2e-2), (2, 1e-3), (3, 1e-3)])
def test_rktvd_convergence(growth_rhs, rates, order, rtol):
    """Relative error against exp(a_k t) at t = 1."""
    tout = 1.0
    dt = (tout / 3000) * order
    state = IntegrationState(u=np.ones(rates.size), t=0.0)

    rktvd_step(growth_rhs, state, tout, dt, order)

    assert tout <= state.t < tout + dt
    uref = np.exp(rates * state.t)
    np.testing.assert_allclose(state.u, uref, rtol=rtol)


def test_rktvd_error_decreases_with_order(growth_rhs, rates):
    errors = []
    for order in (1, 2, 3):
        state = IntegrationState(u=np.ones(rates.size))
        rktvd_step(growth_rhs, state, 0.5, 1 / 256, order)
        uref = np.exp(rates * state.t)
        errors.append(np.max(np.abs(state.u - uref) / uref))
    assert errors[0] > errors[1] > errors[2]


@pytest.mark.parametrize("order", [1, 2, 3])
def test_single_step_matches_integrate(growth_rhs, rates, order):
    """n SINGLE_STEP calls reproduce one INTEGRATE call to t0 + n dt."""
    dt = 1 / 64
    n = 16
    t0 = 0.5

    single = IntegrationState(u=np.ones(rates.size), t=t0, mode=Mode.SINGLE_STEP)
    for _ in range(n):
        rktvd_step(growth_rhs, single, 10.0, dt, order)

    whole = IntegrationState(u=np.ones(rates.size), t=t0, mode=Mode.INTEGRATE)
    rktvd_step(growth_rhs, whole, t0 + n * dt, dt, order)

    assert single.t == whole.t == t0 + n * dt
    assert single.n_steps == whole.n_steps == n
    np.testing.assert_allclose(single.u, whole.u, rtol=1e-14)


def test_single_step_takes_one_step(growth_rhs, rates):
    state = IntegrationState(u=np.ones(rates.size), t=0.0, mode=Mode.SINGLE_STEP)
    rktvd_step(growth_rhs, state, 1.0, 0.01, 1)

    assert state.t == 0.01
    assert state.n_steps == 1
    np.testing.assert_allclose(state.u, 1 + 0.01 * rates, rtol=1e-15)


def test_first_call_promotes_phase(growth_rhs, rates):
    state = IntegrationState(u=np.ones(rates.size))
    assert state.phase is Phase.UNINITIALIZED

    rktvd_step(growth_rhs, state, 0.1, 0.01, 3)
    assert state.phase is Phase.CONTINUING

    rktvd_step(growth_rhs, state, 0.2, 0.01, 3)
    assert state.phase is Phase.CONTINUING


def test_continuing_call_skips_validation(growth_rhs, rates):
    """Once CONTINUING, mode is not checked again."""
    state = IntegrationState(u=np.ones(rates.size), phase=Phase.CONTINUING)
    state.mode = "not-a-mode"

    rktvd_step(growth_rhs, state, 0.5, 0.125, 2)

    assert state.t == 0.5
    assert state.n_steps == 4


def test_state_updated_in_place(growth_rhs, rates):
    u = np.ones(rates.size)
    state = IntegrationState(u=u)
    returned = rktvd_step(growth_rhs, state, 0.1, 0.01, 3)

    assert returned is state
    assert state.u is u
    assert np.all(u > 1.0)


def test_past_tout_is_noop(growth_rhs, rates):
    """t > tout returns before any validation."""
    state = IntegrationState(u=np.ones(rates.size), t=2.0)
    rktvd_step(growth_rhs, state, 1.0, 0.01, order=7)

    assert state.t == 2.0
    assert state.phase is Phase.UNINITIALIZED
    assert state.n_steps == 0
    np.testing.assert_array_equal(state.u, 1.0)


def test_overshoots_tout(growth_rhs, rates):
    """No step size correction: the last step goes past tout."""
    state = IntegrationState(u=np.ones(rates.size))
    rktvd_step(growth_rhs, state, 1.0, 0.3, 1)

    assert state.n_steps == 4
    np.testing.assert_allclose(state.t, 1.2)
    np.testing.assert_allclose(state.u, (1 + 0.3 * rates) ** 4, rtol=1e-14)


def test_at_tout_takes_one_step(growth_rhs, rates):
    state = IntegrationState(u=np.ones(rates.size), t=1.0)
    rktvd_step(growth_rhs, state, 1.0, 0.01, 3)
    assert state.n_steps == 1
    np.testing.assert_allclose(state.t, 1.01)


@pytest.mark.parametrize("order", [0, 4, -1, 2.5, None])
def test_invalid_order_is_fatal(growth_rhs, rates, order):
    state = IntegrationState(u=np.ones(rates.size))
    with pytest.raises(IntegratorStateError, match="order"):
        rktvd_step(growth_rhs, state, 1.0, 0.01, order)

    assert state.t == 0.0
    assert state.phase is Phase.UNINITIALIZED
    np.testing.assert_array_equal(state.u, 1.0)


def test_invalid_mode_is_fatal(growth_rhs, rates):
    state = IntegrationState(u=np.ones(rates.size))
    state.mode = 3
    with pytest.raises(IntegratorStateError, match="mode"):
        rktvd_step(growth_rhs, state, 1.0, 0.01, 3)


@pytest.mark.parametrize("phase", [0, 3, "continuing", None])
def test_invalid_phase_is_fatal(growth_rhs, rates, phase):
    state = IntegrationState(u=np.ones(rates.size))
    state.phase = phase
    with pytest.raises(IntegratorStateError, match="phase"):
        rktvd_step(growth_rhs, state, 1.0, 0.01, 3)


@pytest.mark.parametrize("dt", [0.0, -0.1])
def test_non_positive_dt_is_fatal(growth_rhs, rates, dt):
    state = IntegrationState(u=np.ones(rates.size))
    with pytest.raises(IntegratorStateError, match="Time step"):
        rktvd_step(growth_rhs, state, 1.0, dt, 3)


def test_fatal_errors_are_not_config_errors(growth_rhs, rates):
    state = IntegrationState(u=np.ones(rates.size))
    with pytest.raises(IntegratorStateError) as excinfo:
        rktvd_step(growth_rhs, state, 1.0, 0.01, 5)
    assert not isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    "name, fn",
    [("tvd_rk1", tvd_rk1_update), ("tvd_rk2", tvd_rk2_update), ("tvd_rk3", tvd_rk3_update)],
)
def test_schemes_registered(name, fn):
    assert get_timestepper(name) is fn


def test_rk3_uses_stage_times():
    """du/dt = t integrates exactly with the third-order scheme."""
    def fu(t, u):
        return np.full_like(u, t)

    u = np.zeros(1)
    tvd_rk3_update(fu, u, 0.0, 0.5, np.empty_like(u))
    np.testing.assert_allclose(u, 0.5**2 / 2, rtol=1e-15)


@pytest.mark.parametrize("order", [1, 2, 3])
def test_total_variation_does_not_increase(order):
    """Square pulse, upwind fluxes on a stretched periodic grid, CFL 0.5."""
    gx = grid.geometric(0.0, 1.0, 1.01, 120)
    fu = upwind_advection(gx, velocity=1.0, boundary="periodic")
    u0 = np.where(np.abs(gx.center - 0.4) < 0.15, 1.0, 0.0)
    dt = 0.5 * gx.min_width

    state = IntegrationState(u=u0.copy(), mode=Mode.SINGLE_STEP)
    tv = total_variation(np.append(state.u, state.u[0]))
    for _ in range(200):
        rktvd_step(fu, state, 10.0, dt, order)
        tv_new = total_variation(np.append(state.u, state.u[0]))
        assert tv_new <= tv + 1e-12
        tv = tv_new

    assert state.u.min() >= -1e-12
    assert state.u.max() <= 1.0 + 1e-12
