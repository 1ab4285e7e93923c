"""
Unit tests for configuration loading and saving.
"""

import pytest
from pydantic import ValidationError

from ftd_host.config import Config, NetworkConfig, SessionConfig, get_config_path, load_config, save_config


class TestConfig:
    """Test configuration models and TOML persistence."""

    def test_defaults(self):
        """Defaults target the simulation with the documented timing."""
        config = Config()

        assert config.session.transport == "simulation"
        assert config.session.poll_interval_s == 0.05
        assert config.session.factory_reset_padding_lines == 1000
        assert config.simulation.node_id == 1
        assert config.serial.baud == 115200

    def test_padding_lower_bound(self):
        """Reset padding below 1000 lines is rejected."""
        with pytest.raises(ValidationError):
            SessionConfig(factory_reset_padding_lines=999)

    def test_transport_values(self):
        """Only known transports are accepted."""
        with pytest.raises(ValidationError):
            SessionConfig(transport="bluetooth")

    def test_network_to_dataset(self):
        """Network section builds a matching dataset."""
        network = NetworkConfig(network_name="lab", channel=20, mesh_local_prefix="fd00:abcd::/64")
        dataset = network.to_dataset()

        assert dataset.network_name == "lab"
        assert dataset.channel == 20
        assert str(dataset.mesh_local_prefix) == "fd00:abcd::/64"

    def test_missing_file_gives_defaults(self, tmp_path):
        """A missing config file is not an error."""
        assert load_config(tmp_path / "missing.toml") == Config()

    def test_save_and_load(self, tmp_path):
        """Saved configuration loads back."""
        path = tmp_path / "sub" / "config.toml"
        config = Config()
        config.session.transport = "serial"
        config.serial.port = "socket://localhost:7000"
        config.simulation.node_id = 4

        save_config(config, path)
        loaded = load_config(path)

        assert loaded.session.transport == "serial"
        assert loaded.serial.port == "socket://localhost:7000"
        assert loaded.simulation.node_id == 4

    def test_partial_file(self, tmp_path):
        """Sections left out keep their defaults."""
        path = tmp_path / "config.toml"
        path.write_text('[simulation]\nnode_id = 7\n\n[session]\nwait_timeout_s = 5.0\n')

        config = load_config(path)

        assert config.simulation.node_id == 7
        assert config.session.wait_timeout_s == 5.0
        assert config.network.channel == 15

    def test_config_path_honours_xdg(self, tmp_path, monkeypatch):
        """XDG_CONFIG_HOME selects the config directory."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_path() == tmp_path / "ftd_host" / "config.toml"
