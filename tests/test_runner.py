"""
Unit test: YAML configuration and the simulation runner.

Run: pytest tests/test_runner.py -v
"""

from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from tvdode import grid
from tvdode.config import GridConfig, ProblemConfig, SimulationConfig, load_config
from tvdode.errors import InvalidRangeError
from tvdode.grid import create_grid
from tvdode.problems import cell_integral, create_problem
from tvdode.runner import run_from_file, run_simulation

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"


def _advection_config(tmp_path, **overrides) -> dict:
    raw = {
        "grid": {"law": "geometric", "xmin": 0.0, "xmax": 1.0, "ratio": 1.01, "ncells": 80},
        "integrator": {"method": "rktvd", "order": 3, "dt": 2e-3},
        "time": {"t_start": 0.0, "t_end": 0.2, "n_outputs": 4},
        "problem": {
            "type": "advection",
            "velocity": 1.0,
            "boundary": "periodic",
            "initial_condition": "exp(-((x - 0.5) / 0.1)**2)",
        },
        "output": {
            "directory": str(tmp_path),
            "monitors": [{"type": "txt", "every_n_outputs": 1}],
        },
    }
    for section, values in overrides.items():
        raw[section].update(values)
    return raw


def _growth_config(tmp_path, method="mstvd3") -> dict:
    return {
        "grid": {"law": "linear", "xmin": 0.0, "xmax": 1.0, "ncells": 4},
        "integrator": {"method": method, "dt": 1e-3},
        "time": {"t_end": 1.0, "n_outputs": 5},
        "problem": {
            "type": "linear_growth",
            "rates": [float(k) for k in range(1, 11)],
            "initial_condition": "1.0",
        },
        "output": {"directory": str(tmp_path)},
    }


def test_load_config(tmp_path):
    path = tmp_path / "case.yaml"
    path.write_text(yaml.safe_dump(_advection_config(tmp_path)))

    config = load_config(path)

    assert isinstance(config, SimulationConfig)
    assert config.grid.law == "geometric"
    assert config.grid.ratio == 1.01
    assert config.integrator.order == 3
    assert config.time.output_times == pytest.approx([0.05, 0.1, 0.15, 0.2])
    assert config.output.monitors[0].type == "txt"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "section, values",
    [
        ("grid", {"law": "geometric", "ratio": None}),
        ("grid", {"law": "bilinear", "xcross": 0.5, "ncells": 10}),
        ("grid", {"law": "bilinear", "ncells": [10, 10]}),
        ("grid", {"law": "linear", "ncells": [10, 10]}),
        ("grid", {"law": "cubic"}),
        ("integrator", {"order": 4}),
        ("integrator", {"dt": 0.0}),
        ("integrator", {"method": "rk4"}),
        ("time", {"t_end": 0.0}),
        ("time", {"n_outputs": 0}),
        ("problem", {"type": "linear_growth", "rates": []}),
        ("output", {"monitors": [{"type": "gif"}]}),
    ],
)
def test_invalid_config(tmp_path, section, values):
    raw = _advection_config(tmp_path, **{section: values})
    with pytest.raises(ValidationError):
        SimulationConfig.model_validate(raw)


def test_create_grid_from_config():
    cfg = GridConfig(law="bilinear", xmin=0.0, xcross=10.0, xmax=1000.0, ncells=[124, 365])
    gx = create_grid(cfg)
    ref = grid.bilinear(0.0, 10.0, 1000.0, [124, 365])

    assert gx.name == "x"
    np.testing.assert_array_equal(gx.edges, ref.edges)

    cfg = GridConfig(law="log", xmin=0.1, xmax=1000.0, ncells=50, name="T [K]")
    np.testing.assert_array_equal(create_grid(cfg).edges, grid.log(0.1, 1000.0, 50).edges)


def test_grid_range_errors_surface_from_config():
    """Ranges are checked by the grid, not by the schema."""
    cfg = GridConfig(law="log", xmin=0.0, xmax=1.0, ncells=10)
    with pytest.raises(InvalidRangeError):
        create_grid(cfg)


def test_run_advection_conserves_mass(tmp_path):
    config = SimulationConfig.model_validate(_advection_config(tmp_path))
    gx = create_grid(config.grid)
    u0 = np.exp(-((gx.center - 0.5) / 0.1) ** 2)

    result = run_simulation(config)

    assert result.grid.ncells == 80
    assert len(result.times) == 4
    for reached, requested in zip(result.times, config.time.output_times):
        assert requested <= reached < requested + config.integrator.dt + 1e-12
    np.testing.assert_allclose(
        cell_integral(result.grid, result.state.u), cell_integral(gx, u0), rtol=1e-12
    )
    # the pulse has moved right
    centroid = np.dot(result.grid.width * result.grid.center, result.state.u) / cell_integral(
        result.grid, result.state.u
    )
    assert centroid > 0.6


def test_run_writes_txt_snapshots(tmp_path):
    config = SimulationConfig.model_validate(_advection_config(tmp_path))
    run_simulation(config)

    files = sorted((tmp_path / "txt").glob("snapshot_*.txt"))
    assert [f.name for f in files] == [f"snapshot_{k:05d}.txt" for k in range(4)]

    with open(files[-1]) as f:
        header = f.readline()
        columns = f.readline()
    assert header.startswith("# output=4 t=")
    assert columns.strip() == "# x u"

    data = np.loadtxt(files[-1])
    assert data.shape == (80, 2)


def test_run_skips_outputs(tmp_path):
    raw = _advection_config(tmp_path)
    raw["output"]["monitors"] = [{"type": "txt", "every_n_outputs": 2}, {"type": "console"}]
    run_simulation(SimulationConfig.model_validate(raw))

    assert len(list((tmp_path / "txt").glob("snapshot_*.txt"))) == 2


@pytest.mark.parametrize("method", ["rktvd", "mstvd3"])
def test_run_linear_growth(tmp_path, method):
    config = SimulationConfig.model_validate(_growth_config(tmp_path, method))
    result = run_simulation(config)

    rates = np.arange(1, 11, dtype=np.float64)
    assert result.state.size == 10
    np.testing.assert_allclose(result.state.u, np.exp(rates * result.state.t), rtol=1e-3)


def test_cfl_warning(tmp_path):
    config = SimulationConfig.model_validate(
        _advection_config(tmp_path, integrator={"dt": 0.05})
    )
    with pytest.warns(UserWarning, match="CFL"):
        run_simulation(config)


def test_run_from_file(tmp_path):
    path = tmp_path / "growth.yaml"
    raw = _growth_config(tmp_path, "rktvd")
    raw["output"]["monitors"] = [{"type": "txt"}]
    path.write_text(yaml.safe_dump(raw))

    result = run_from_file(path)

    assert result.state.t >= 1.0
    with open(tmp_path / "txt" / "snapshot_00004.txt") as f:
        f.readline()
        assert f.readline().strip() == "# k u"


@pytest.mark.parametrize("name", ["advection_geometric.yaml", "linear_growth_mstvd.yaml"])
def test_example_configs_are_valid(name):
    config = load_config(EXAMPLES_DIR / name)
    assert create_grid(config.grid).ncells > 0


def test_linear_growth_snapshots_use_component_index(tmp_path):
    """As many rates as grid cells still writes k u columns."""
    raw = _growth_config(tmp_path, "mstvd3")
    raw["grid"]["ncells"] = 10
    raw["output"]["monitors"] = [{"type": "txt"}]
    run_simulation(SimulationConfig.model_validate(raw))

    snapshot = tmp_path / "txt" / "snapshot_00000.txt"
    with open(snapshot) as f:
        f.readline()
        assert f.readline().strip() == "# k u"
    data = np.loadtxt(snapshot)
    np.testing.assert_array_equal(data[:, 0], np.arange(10))


def test_example_linear_growth_snapshot_columns(tmp_path):
    config = load_config(EXAMPLES_DIR / "linear_growth_mstvd.yaml")
    config.output.directory = str(tmp_path)
    config.output.monitors = [m for m in config.output.monitors if m.type == "txt"]
    run_simulation(config)

    with open(tmp_path / "txt" / "snapshot_00000.txt") as f:
        f.readline()
        assert f.readline().strip() == "# k u"


def test_advection_snapshots_use_cell_centers(tmp_path):
    config = SimulationConfig.model_validate(_advection_config(tmp_path))
    result = run_simulation(config)

    data = np.loadtxt(tmp_path / "txt" / "snapshot_00000.txt")
    np.testing.assert_allclose(data[:, 0], result.grid.center, rtol=1e-6)


def test_create_problem_output_coordinate():
    gx = grid.linear(0.0, 1.0, 3)
    growth = create_problem(ProblemConfig(type="linear_growth", rates=[1.0, 2.0, 3.0]), gx)
    assert growth.coord_name == "k"
    np.testing.assert_array_equal(growth.coords, [0, 1, 2])

    advection = create_problem(ProblemConfig(type="advection"), gx)
    assert advection.coord_name == "x"
    np.testing.assert_array_equal(advection.coords, gx.center)
    np.testing.assert_array_equal(advection.u0, 1.0)
