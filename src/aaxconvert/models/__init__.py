"""Pydantic models for aaxconvert."""

from .activation import (
    ACTIVATION_BYTES_PATTERN,
    SENTINEL,
    activation_bytes_to_raw,
    bytes_to_hex,
    extract_activation_bytes,
    is_sentinel,
    normalize_activation_bytes,
)
from .capabilities import Capabilities
from .container import EXPECTED_BRAND, ContainerMetadata, format_duration
from .device import DeviceActivationTable
from .license import LicenseDescriptor
from .progress import ProgressState
from .result import BatchResult, ConversionResult, OutputPaths

__all__ = [
    # Container
    "ContainerMetadata",
    "EXPECTED_BRAND",
    "format_duration",
    # Activation bytes
    "SENTINEL",
    "ACTIVATION_BYTES_PATTERN",
    "activation_bytes_to_raw",
    "bytes_to_hex",
    "extract_activation_bytes",
    "is_sentinel",
    "normalize_activation_bytes",
    "DeviceActivationTable",
    # License
    "LicenseDescriptor",
    # Progress
    "ProgressState",
    # Results
    "OutputPaths",
    "ConversionResult",
    "BatchResult",
    # Platform
    "Capabilities",
]
