"""Test package structure for pip installation."""
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))


def test_mock_server_module_is_importable():
    """Verify mock_server module can be imported."""
    import mock_server
    assert hasattr(mock_server, 'main')
    assert hasattr(mock_server, 'serve')


def test_supervisor_module_is_importable():
    """Verify supervisor module can be imported."""
    import supervisor
    assert hasattr(supervisor, 'main')
    assert hasattr(supervisor, 'Supervisor')


def test_components_package_is_importable():
    """Verify components package exports its public names."""
    import components
    for name in components.__all__:
        assert getattr(components, name) is not None


def test_example_config_is_valid():
    """The shipped example config must load cleanly."""
    from components import load_config
    root = Path(__file__).resolve().parents[1]
    config = load_config(root / "config.example.toml")
    assert config.server_command[-1] == "mock_server.py"


def test_entry_points_are_callable():
    """Verify the console script targets exist."""
    import mock_server
    import supervisor
    assert callable(mock_server.main), "mock_server.main is not callable"
    assert callable(supervisor.main), "supervisor.main is not callable"
