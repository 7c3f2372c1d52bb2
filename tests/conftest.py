import pytest

from htcc_installer.config import DEFAULT_CONFIG
from htcc_installer.registry import InMemoryApiLayerStore


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    """Keep Logger output out of %ProgramData% during tests."""
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("HTCC_INSTALLER_LOG_DIR", str(log_dir))
    return log_dir


@pytest.fixture
def layer_store():
    """Factory for an in-memory implicit layer key holding ``(name, flag)`` pairs."""
    def make(layers):
        return InMemoryApiLayerStore.with_layers(DEFAULT_CONFIG.api_layers_key, layers)
    return make
