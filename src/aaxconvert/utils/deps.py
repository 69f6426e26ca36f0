"""Dependency and platform capability checks."""

import os
import shutil

from aaxconvert import registry
from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.cracker import RainbowCracker
from aaxconvert.models import Capabilities
from aaxconvert.probe import FFprobe


def check_system_dependencies(config: AaxConvertConfig | None = None) -> dict[str, bool]:
    """Check availability of external binaries.

    Returns:
        Dict mapping tool names to availability status.
    """
    config = config or get_config()
    return {
        "ffmpeg": shutil.which(config.tools.ffmpeg) is not None,
        "ffprobe": FFprobe.is_available(config.tools.ffprobe),
        "rcrack": os.access(config.cracker.executable, os.X_OK),
    }


def detect_capabilities(config: AaxConvertConfig | None = None) -> Capabilities:
    """Resolve the optional capabilities of this machine once."""
    config = config or get_config()
    tools = check_system_dependencies(config)
    return Capabilities(
        device_registry=registry.is_available(),
        cracker=RainbowCracker.from_config(config.cracker).is_available(),
        ffmpeg=tools["ffmpeg"],
        ffprobe=tools["ffprobe"],
    )


def format_dependency_status(config: AaxConvertConfig | None = None) -> str:
    """Return a printable capability report."""
    config = config or get_config()
    capabilities = detect_capabilities(config)

    lines = ["aaxconvert status:", "=" * 50]
    for name, available in [
        ("ffmpeg", capabilities.ffmpeg),
        ("ffprobe", capabilities.ffprobe),
        ("device registry (Windows)", capabilities.device_registry),
        ("rainbow tables (rcrack)", capabilities.cracker),
    ]:
        icon = "✓" if available else "✗"
        lines.append(f"  {icon} {name}")
    lines.append("-" * 50)
    lines.append(f"  RCRACK_PATH: {config.cracker.executable}")
    lines.append(f"  Tables:      {config.cracker.resolved_tables_dir}")

    if not capabilities.ffmpeg or not capabilities.ffprobe:
        lines.append("\n⚠️  ffmpeg and ffprobe are required. Install: https://ffmpeg.org/download.html")
    return "\n".join(lines)
