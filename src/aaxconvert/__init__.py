"""aaxconvert - Audible AAX audiobook converter.

Decrypt AAX audiobooks with ffmpeg, finding the activation bytes from an
explicit value, the Windows device registry or a rainbow-table lookup.

Usage:
    from aaxconvert import Converter, fetch_metadata

    # Inspect a file
    metadata = fetch_metadata("book.aax")
    print(metadata.display_name, metadata.checksum)

    # Convert a batch
    batch = Converter().convert_files(["book.aax"])
    print(batch.summary())
"""

from aaxconvert._version import __version__
from aaxconvert.config import AaxConvertConfig, get_config, load_config
from aaxconvert.convert import Converter, convert_files, derive_outputs, expand_inputs
from aaxconvert.cracker import RainbowCracker
from aaxconvert.downloaders import download, download_from_license, parse_license, read_license
from aaxconvert.errors import (
    AaxConvertError,
    CrackError,
    OperationCancelled,
    ResolutionError,
    TranscodeError,
    TransferError,
    ValidationError,
)
from aaxconvert.models import (
    BatchResult,
    Capabilities,
    ContainerMetadata,
    ConversionResult,
    DeviceActivationTable,
    LicenseDescriptor,
    OutputPaths,
    ProgressState,
)
from aaxconvert.pipeline import Stage, TranscodePipeline
from aaxconvert.probe import fetch_metadata
from aaxconvert.process import CancelToken, ManagedProcess, ProcessState
from aaxconvert.resolvers import ActivationResolver, build_resolver
from aaxconvert.utils import checksum_hex, read_checksum
from aaxconvert.utils.deps import detect_capabilities

__all__ = [
    # Version
    "__version__",
    # Main functions
    "Converter",
    "convert_files",
    "derive_outputs",
    "expand_inputs",
    "fetch_metadata",
    "read_checksum",
    "checksum_hex",
    "detect_capabilities",
    # Activation bytes
    "ActivationResolver",
    "build_resolver",
    "RainbowCracker",
    # Download
    "download",
    "download_from_license",
    "parse_license",
    "read_license",
    # Pipeline
    "TranscodePipeline",
    "Stage",
    "ManagedProcess",
    "ProcessState",
    "CancelToken",
    # Models
    "ContainerMetadata",
    "DeviceActivationTable",
    "LicenseDescriptor",
    "ProgressState",
    "OutputPaths",
    "ConversionResult",
    "BatchResult",
    "Capabilities",
    # Config
    "AaxConvertConfig",
    "get_config",
    "load_config",
    # Errors
    "AaxConvertError",
    "ValidationError",
    "ResolutionError",
    "CrackError",
    "TransferError",
    "TranscodeError",
    "OperationCancelled",
]
