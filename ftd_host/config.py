"""
Configuration management for FTD Host.

Loads/saves TOML configuration for the device link, session timing, the
default network to join, and logging.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ftd_host.dataset import ActiveOperationalDataset


class SimulationConfig(BaseModel):
    """Simulated device configuration."""

    binary: str = Field(default="ot-cli-ftd", description="Path of the ot-cli-ftd executable")
    node_id: int = Field(default=1, ge=1, description="Simulation node ID")


class SerialConfig(BaseModel):
    """Serial port configuration for a hardware board."""

    port: str = Field(default="/dev/ttyACM0", description="Serial port device or pyserial URL")
    baud: int = Field(default=115200, description="Baud rate")


class SessionConfig(BaseModel):
    """Command session configuration."""

    transport: Literal["simulation", "serial"] = Field(
        default="simulation", description="Which link to open"
    )
    poll_interval_s: float = Field(
        default=0.05, gt=0, description="Delay between checks while waiting for a state"
    )
    wait_timeout_s: float = Field(default=30.0, gt=0, description="Default state wait timeout")
    factory_reset_padding_lines: int = Field(
        default=1000, ge=1000, description="Blank lines written after factoryreset"
    )


class NetworkConfig(BaseModel):
    """Default Thread network used by the TUI and tools."""

    network_name: str = Field(default="ftd-host", description="Network name")
    channel: int = Field(default=15, ge=11, le=26, description="802.15.4 channel")
    pan_id: int = Field(default=0x1234, ge=0, le=0xFFFE, description="PAN ID")
    extended_pan_id: str = Field(default="dead00beef00cafe", description="Extended PAN ID (hex)")
    network_key: str = Field(
        default="00112233445566778899aabbccddeeff", description="Network key (hex)"
    )
    mesh_local_prefix: str = Field(default="fd00:1234::/64", description="Mesh-local prefix")

    def to_dataset(self) -> ActiveOperationalDataset:
        """Build the Active Operational Dataset for this network."""
        return ActiveOperationalDataset.create(
            network_name=self.network_name,
            channel=self.channel,
            pan_id=self.pan_id,
            extended_pan_id=bytes.fromhex(self.extended_pan_id),
            network_key=bytes.fromhex(self.network_key),
            mesh_local_prefix=self.mesh_local_prefix,
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_dir: str = Field(default="~/ftd_logs", description="Directory for log files")


class Config(BaseModel):
    """Complete FTD Host configuration."""

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    serial: SerialConfig = Field(default_factory=SerialConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_config_path() -> Path:
    """Get default configuration file path."""
    config_home = os.getenv("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "ftd_host" / "config.toml"


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from TOML file.

    Args:
        path: Configuration file path. If None, uses default location.

    Returns:
        Loaded configuration object.
    """
    if path is None:
        path = get_config_path()

    if not path.exists():
        # Return default config if file doesn't exist
        return Config()

    import tomli

    with open(path, "rb") as f:
        data = tomli.load(f)

    return Config(**data)


def save_config(config: Config, path: Optional[Path] = None) -> None:
    """
    Save configuration to TOML file.

    Args:
        config: Configuration object to save.
        path: Configuration file path. If None, uses default location.
    """
    if path is None:
        path = get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    import tomli_w

    with open(path, "wb") as f:
        tomli_w.dump(config.model_dump(), f)
