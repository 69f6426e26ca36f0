"""Configuration management for aaxconvert.

Supports loading configuration from:
1. Environment variables (AAXCONVERT_*, plus RCRACK_PATH)
2. Config file (~/.aaxconvert/config.yaml)
3. Default values

Command-line flags are applied on top by the CLI.

Example config file (~/.aaxconvert/config.yaml):
    activation:
      activation_bytes: "1CEB00DA"
    cracker:
      executable: "/opt/rcrack/linux/rcrack"
      tables_dir: "/opt/rcrack/tables"
    download:
      host: "cds.audible.com"
    output:
      directory: "~/Audiobooks"
      loop: false
    logging:
      level: "info"
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Config file search locations (in priority order)
CONFIG_LOCATIONS = [
    Path.home() / ".aaxconvert" / "config.yaml",
    Path.home() / ".config" / "aaxconvert" / "config.yaml",
    Path(".aaxconvert.yaml"),
]

PACKAGE_DIR = Path(__file__).resolve().parent


def default_rcrack_path() -> str:
    """Return the bundled rcrack location for this platform."""
    executable = "rcrack.exe" if sys.platform == "win32" else "rcrack"
    return str(PACKAGE_DIR / "tools" / "rcrack" / sys.platform / executable)


def default_tables_dir(executable: str) -> str:
    """Tables live next to the per-platform directories of the executable."""
    return str(Path(executable).resolve().parent.parent / "tables")


@dataclass
class ActivationConfig:
    """Activation bytes resolution inputs."""

    activation_bytes: str | None = None
    device: int | None = None
    crack: bool = False


@dataclass
class CrackerConfig:
    """Rainbow-table cracker configuration."""

    executable: str = field(default_factory=default_rcrack_path)
    tables_dir: str | None = None

    @property
    def resolved_tables_dir(self) -> str:
        return self.tables_dir or default_tables_dir(self.executable)


@dataclass
class DownloadConfig:
    """Download configuration."""

    host: str = "cds.audible.de"
    directory: str | None = None
    chunk_size: int = 64 * 1024
    # None disables the timeout, downloads may take long
    timeout_seconds: float | None = None


@dataclass
class OutputConfig:
    """Conversion output configuration."""

    directory: str | None = None
    filename: str | None = None
    loop: bool = False


@dataclass
class ToolsConfig:
    """External binaries."""

    ffmpeg: str = "ffmpeg"
    ffprobe: str = "ffprobe"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "error"


@dataclass
class AaxConvertConfig:
    """Main configuration for aaxconvert."""

    activation: ActivationConfig = field(default_factory=ActivationConfig)
    cracker: CrackerConfig = field(default_factory=CrackerConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_yaml_config() -> dict[str, Any]:
    """Load configuration from the first YAML file found."""
    for config_path in CONFIG_LOCATIONS:
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f)
                    return data if data else {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Ignoring config file %s: %s", config_path, e)
                continue
    return {}


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with AAXCONVERT_ prefix."""
    return os.environ.get(f"AAXCONVERT_{key}", default)


def _parse_bool(value: str | None) -> bool | None:
    """Parse boolean from string."""
    if value is None:
        return None
    return value.lower() in ("true", "1", "yes", "on")


def _parse_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _parse_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def load_config() -> AaxConvertConfig:
    """Load configuration from file and environment variables.

    Priority (highest first):
    1. Environment variables (AAXCONVERT_*, RCRACK_PATH)
    2. Config file (~/.aaxconvert/config.yaml)
    3. Default values
    """
    file_config = _load_yaml_config()

    # Activation bytes
    activation_config = file_config.get("activation", {})
    activation = ActivationConfig(
        activation_bytes=_get_env("ACTIVATION_BYTES") or activation_config.get("activation_bytes"),
        device=_parse_int(_get_env("DEVICE", activation_config.get("device"))),
        crack=_parse_bool(_get_env("CRACK")) or activation_config.get("crack", False),
    )

    # Cracker
    cracker_config = file_config.get("cracker", {})
    cracker = CrackerConfig(
        executable=os.environ.get("RCRACK_PATH")
        or cracker_config.get("executable")
        or default_rcrack_path(),
        tables_dir=_get_env("RCRACK_TABLES") or cracker_config.get("tables_dir"),
    )

    # Download
    download_config = file_config.get("download", {})
    download = DownloadConfig(
        host=_get_env("DOWNLOAD_HOST") or download_config.get("host", "cds.audible.de"),
        directory=_get_env("DOWNLOAD_DIR") or download_config.get("directory"),
        chunk_size=int(_get_env("DOWNLOAD_CHUNK_SIZE") or download_config.get("chunk_size", 64 * 1024)),
        timeout_seconds=_parse_float(
            _get_env("DOWNLOAD_TIMEOUT", download_config.get("timeout_seconds"))
        ),
    )

    # Output
    output_config = file_config.get("output", {})
    output = OutputConfig(
        directory=_get_env("OUTPUT_DIR") or output_config.get("directory"),
        filename=output_config.get("filename"),
        loop=_parse_bool(_get_env("LOOP")) or output_config.get("loop", False),
    )

    # External tools
    tools_config = file_config.get("tools", {})
    tools = ToolsConfig(
        ffmpeg=_get_env("FFMPEG") or tools_config.get("ffmpeg", "ffmpeg"),
        ffprobe=_get_env("FFPROBE") or tools_config.get("ffprobe", "ffprobe"),
    )

    # Logging
    logging_config = file_config.get("logging", {})
    log = LoggingConfig(
        level=_get_env("LOG_LEVEL") or logging_config.get("level", "error"),
    )

    return AaxConvertConfig(
        activation=activation,
        cracker=cracker,
        download=download,
        output=output,
        tools=tools,
        logging=log,
    )


# Global config instance (lazy loaded)
_config: AaxConvertConfig | None = None


def get_config() -> AaxConvertConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
