"""Conversion of AAX files, one at a time."""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Iterable

from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.errors import AaxConvertError, OperationCancelled
from aaxconvert.models import BatchResult, Capabilities, ContainerMetadata, ConversionResult, OutputPaths
from aaxconvert.pipeline import Stage, TranscodePipeline
from aaxconvert.probe import fetch_metadata
from aaxconvert.process import CancelToken
from aaxconvert.reporting import ProgressReporter
from aaxconvert.resolvers import ActivationResolver, build_resolver
from aaxconvert.utils.deps import detect_capabilities
from aaxconvert.utils.naming import build_output_path, build_output_stem

logger = logging.getLogger(__name__)


def expand_inputs(patterns: Iterable[str]) -> list[str]:
    """Expand glob patterns into file paths.

    Matches of each pattern are sorted; duplicates are dropped while the
    pattern order is kept. A pattern matching nothing is returned as is,
    so that the missing file is reported instead of silently skipped.
    """
    files: list[str] = []
    seen: set[str] = set()
    for pattern in patterns:
        matches = sorted(glob.glob(pattern)) or [pattern]
        for path in matches:
            if path not in seen:
                seen.add(path)
                files.append(path)
    return files


def derive_outputs(
    source: str,
    metadata: ContainerMetadata,
    directory: str | None = None,
    filename: str | None = None,
) -> OutputPaths:
    """Build the output paths for one input.

    Args:
        source: Input file path
        metadata: Metadata of the input
        directory: Output directory (default: the input's directory)
        filename: Explicit output name; only its stem is used

    Returns:
        OutputPaths for the audio, cover and looped video
    """
    directory = os.path.abspath(directory) if directory else os.path.dirname(os.path.abspath(source))
    stem = build_output_stem(metadata.display_name, filename)
    return OutputPaths(
        audio=build_output_path(directory, stem, ".m4a"),
        cover=build_output_path(directory, stem, ".png"),
        video=build_output_path(directory, stem, ".m4v"),
    )


class Converter:
    """Convert AAX files: probe, resolve activation bytes, transcode.

    One Converter handles a whole batch; its configuration and resolution
    chain are read-only once built.
    """

    def __init__(
        self,
        config: AaxConvertConfig | None = None,
        capabilities: Capabilities | None = None,
        resolver: ActivationResolver | None = None,
        pipeline: TranscodePipeline | None = None,
        reporter: ProgressReporter | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.config = config or get_config()
        self.cancel = cancel or CancelToken()
        self.reporter = reporter or ProgressReporter()
        self.capabilities = capabilities or detect_capabilities(self.config)
        self.resolver = resolver or build_resolver(self.config, self.capabilities, cancel=self.cancel)
        self.pipeline = pipeline or TranscodePipeline(self.config, self.reporter, self.cancel)

    def convert_file(self, source: str) -> ConversionResult:
        """Convert one file.

        Errors are caught here and recorded in the result, except
        cancellation which stops the caller's batch.

        Raises:
            OperationCancelled: If the cancel token fired
        """
        logger.debug("Converting %s", source)
        result = ConversionResult(source=source)
        completed: list[Stage] = []
        try:
            metadata = fetch_metadata(source, self.config, cancel=self.cancel)
            self.reporter.message(f"{metadata.display_name} (Duration: {metadata.duration_formatted})")

            outputs = derive_outputs(
                source,
                metadata,
                directory=self.config.output.directory,
                filename=self.config.output.filename,
            )
            result.outputs = outputs
            logger.debug("Outputs: %s", outputs)

            activation_bytes = self.resolver.require(metadata)
            result.activation_bytes = activation_bytes

            self.pipeline.run(
                source,
                outputs,
                activation_bytes,
                metadata.duration_seconds,
                loop=self.config.output.loop,
                completed=completed,
            )
        except OperationCancelled:
            raise
        except (AaxConvertError, OSError) as e:
            logger.error("%s: %s", source, e)
            logger.debug("Conversion failure", exc_info=True)
            result.error = str(e)
            result.error_type = type(e).__name__
        finally:
            result.stages_completed = [stage.value for stage in completed]
        return result

    def convert_files(self, sources: Iterable[str]) -> BatchResult:
        """Convert files in order; one failure does not stop the batch."""
        batch = BatchResult()
        for source in sources:
            batch.results.append(self.convert_file(source))
            self.reporter.message("")
        return batch


def convert_files(patterns: Iterable[str], config: AaxConvertConfig | None = None) -> BatchResult:
    """Expand patterns and convert every matching file.

    Args:
        patterns: File paths or glob patterns
        config: Configuration (default: global config)

    Returns:
        BatchResult with one ConversionResult per file
    """
    converter = Converter(config)
    return converter.convert_files(expand_inputs(patterns))
