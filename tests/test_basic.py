"""Basic tests for the chp_sim package: imports, config and logging utilities."""

import logging

import numpy as np
import pytest

import chp_sim


@pytest.fixture(autouse=True)
def restore_package_log_level():
    package_logger = logging.getLogger("chp_sim")
    previous = package_logger.level
    yield
    package_logger.setLevel(previous)


def test_imports():
    """Test that all main modules can be imported."""
    try:
        from chp_sim import Tableau, Circuit, FixedBits
        from chp_sim import ConfigManager, Logger, setup_logging
        from chp_sim.kernels import nb_rowsum
        assert True
    except ImportError as e:
        pytest.fail(f"Failed to import modules: {e}")


def test_package_version():
    """Test that package version is accessible."""
    assert chp_sim.__version__ == "0.1.0"


def test_backend_defaults_to_numpy():
    info = chp_sim.backend_info()
    assert info["backend"] == "numpy"
    assert info["bit_dtype"] == "uint8"
    with pytest.raises(ValueError):
        chp_sim.set_backend("torch")


def test_config_manager_init():
    config_manager = chp_sim.ConfigManager()
    assert config_manager.config_dir.name == "configs"


def test_load_config_resolves_relative_paths_in_config_dir(tmp_path):
    (tmp_path / "bench.yaml").write_text("engine: numba\nseed: 5\n")
    manager = chp_sim.ConfigManager(config_dir=str(tmp_path))
    assert manager.load_config("bench.yaml") == {"engine": "numba", "seed": 5}
    with pytest.raises(FileNotFoundError):
        manager.load_config("other.yaml")


def test_default_config_is_valid():
    manager = chp_sim.ConfigManager()
    config = manager.load_default_config()
    assert config["engine"] == "python"
    assert config["seed"] is None
    assert manager.validate_config(config)


def test_presets():
    manager = chp_sim.ConfigManager()
    assert manager.list_presets() == ["default", "reproducible", "fast"]
    assert manager.get_preset_config("fast")["engine"] == "numba"
    for name in manager.list_presets():
        assert manager.validate_config(manager.get_preset_config(name))
    with pytest.raises(ValueError):
        manager.get_preset_config("turbo")
    with pytest.raises(ValueError):
        manager.get_preset_config("default", "training")


@pytest.mark.parametrize(
    "config, valid",
    [
        ({"engine": "python"}, True),
        ({"engine": "numba", "seed": 7, "backend": "numpy"}, True),
        ({}, False),
        ({"engine": "fortran"}, False),
        ({"engine": "python", "seed": "7"}, False),
        ({"engine": "python", "seed": True}, False),
        ({"engine": "python", "backend": "jax"}, False),
    ],
)
def test_validate_config(config, valid):
    assert chp_sim.ConfigManager().validate_config(config) is valid


def test_save_load_merge_roundtrip(tmp_path):
    manager = chp_sim.ConfigManager()
    path = tmp_path / "sim.yaml"
    manager.save_config({"engine": "numba", "seed": 11, "qubits": [1, 2]}, path)
    loaded = manager.load_config(path)
    assert loaded == {"engine": "numba", "seed": 11, "qubits": [1, 2]}

    merged = manager.merge_configs(manager.get_preset_config("default"), {"seed": 3})
    assert merged["seed"] == 3
    assert merged["engine"] == "python"


def test_load_config_errors(tmp_path):
    manager = chp_sim.ConfigManager()
    with pytest.raises(FileNotFoundError):
        manager.load_config(tmp_path / "missing.yaml")
    bad = tmp_path / "sim.json"
    bad.write_text("{}")
    with pytest.raises(ValueError):
        manager.load_config(bad)


def test_create_run_config_rejects_invalid():
    manager = chp_sim.ConfigManager()
    with pytest.raises(ValueError):
        manager.create_run_config({"engine": "python"}, {"engine": "cobol"})


def test_tableau_from_config():
    manager = chp_sim.ConfigManager()
    cfg = manager.get_preset_config("reproducible")
    a = chp_sim.Tableau.from_config(3, cfg)
    b = chp_sim.Tableau.from_config(3, cfg)
    for tab in (a, b):
        for q in (1, 2, 3):
            tab.hadamard(q)
    assert list(a.measure_all()) == list(b.measure_all())
    assert chp_sim.Tableau.from_config(2, manager.get_preset_config("fast")).engine == "numba"
    with pytest.raises(ValueError):
        chp_sim.Tableau.from_config(2, {"engine": "gpu"})


def test_from_config_applies_backend():
    tab = chp_sim.Tableau.from_config(2, {"engine": "python", "backend": "numpy"})
    assert chp_sim.backend_info()["backend"] == "numpy"
    assert isinstance(tab.bits, np.ndarray)


def test_from_config_cupy_backend_requires_cupy():
    if chp_sim.backend._cp is not None:
        pytest.skip("CuPy is installed")
    with pytest.raises(ImportError):
        chp_sim.Tableau.from_config(2, {"engine": "python", "backend": "cupy"})
    assert chp_sim.backend_info()["backend"] == "numpy"


def test_from_config_applies_log_level():
    package_logger = logging.getLogger("chp_sim")
    chp_sim.Tableau.from_config(1, {"engine": "python", "log_level": "WARNING"})
    assert package_logger.level == logging.WARNING
    chp_sim.Tableau.from_config(1, {"engine": "python", "log_level": "DEBUG"})
    assert package_logger.level == logging.DEBUG


def test_logger_init():
    logger = chp_sim.Logger(__name__)
    assert logger.logger.name == __name__
    assert logger.logger.propagate is False


def test_logger_run_helpers(tmp_path, bell_circuit):
    log_file = tmp_path / "run.log"
    logger = chp_sim.get_logger("chp_sim.test_run", log_file=log_file, console_output=False)

    assert logger.log_run_end([]) == 0.0
    logger.log_circuit_start(bell_circuit, {"engine": "python"})
    logger.log_measurement(1, True, "rand")
    duration = logger.log_run_end([True, True])
    assert duration >= 0.0

    text = log_file.read_text()
    assert "Running circuit 'bell'" in text
    assert "Qubit 1 -> 1 (rand)" in text
    assert "outcomes: 11" in text
    assert "Run was not properly started" in text


def test_setup_logging_writes_file(tmp_path):
    chp_sim.setup_logging(log_level="DEBUG", log_dir=str(tmp_path), console_output=False)
    try:
        tab = chp_sim.Tableau(1, rng=chp_sim.FixedBits([1]))
        tab.hadamard(1)
        tab.measure(1)
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = (tmp_path / "chp_sim.log").read_text()
        assert "random outcome 1" in text
    finally:
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)
