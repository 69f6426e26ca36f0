"""FFmpeg transcode pipeline.

Stages run strictly in order, each as one ffmpeg process:

1. DECODE: decrypt and stream-copy the audio track to ``.m4a``
2. EXTRACT_COVER: write the embedded cover to ``.png``
3. LOOP (optional): mux the audio with a 1 fps looped cover into ``.m4v``

A failing stage stops the pipeline. Files written by earlier stages are
kept.
"""

from __future__ import annotations

import logging
from enum import Enum

from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.models import OutputPaths, ProgressState
from aaxconvert.process import CancelToken, ManagedProcess
from aaxconvert.reporting import ProgressReporter
from aaxconvert.utils.timecode import parse_progress_line, timemark_to_seconds

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Pipeline stages in execution order."""

    DECODE = "decode"
    EXTRACT_COVER = "extract_cover"
    LOOP = "loop"


class TranscodePipeline:
    """Run the ffmpeg stages for one decrypted audiobook."""

    def __init__(
        self,
        config: AaxConvertConfig | None = None,
        reporter: ProgressReporter | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self.config = config or get_config()
        self.reporter = reporter or ProgressReporter()
        self.cancel = cancel or CancelToken()

    @property
    def ffmpeg(self) -> str:
        return self.config.tools.ffmpeg

    def decode_command(self, source: str, output: str, activation_bytes: str) -> list[str]:
        return [
            self.ffmpeg,
            "-y",
            "-activation_bytes",
            activation_bytes,
            "-i",
            source,
            "-c:a",
            "copy",
            "-vn",
            output,
        ]

    def cover_command(self, source: str, output: str, activation_bytes: str) -> list[str]:
        return [
            self.ffmpeg,
            "-y",
            "-activation_bytes",
            activation_bytes,
            "-i",
            source,
            "-an",
            "-frames:v",
            "1",
            output,
        ]

    def loop_command(self, audio: str, cover: str, output: str) -> list[str]:
        return [
            self.ffmpeg,
            "-y",
            "-i",
            audio,
            "-r",
            "1",
            "-loop",
            "1",
            "-i",
            cover,
            "-c:a",
            "copy",
            "-shortest",
            output,
        ]

    def _run_stage(self, stage: Stage, label: str, cmd: list[str], duration: int, track_progress: bool) -> None:
        """Run one ffmpeg stage, translating its timemarks into percent."""

        def on_line(line: str) -> None:
            timemark = parse_progress_line(line)
            if timemark is None:
                logger.debug("ffmpeg: %s", line)
                return
            if track_progress:
                try:
                    seconds = timemark_to_seconds(timemark)
                except ValueError:
                    return
                self.reporter.update(ProgressState(current=seconds, total=duration))

        process = ManagedProcess(cmd, name=f"ffmpeg ({stage.value})", cancel=self.cancel)
        self.reporter.start(label)
        try:
            process.check(process.stream(on_line))
        except BaseException:
            self.reporter.finish(complete=False)
            raise
        self.reporter.finish()

    def run(
        self,
        source: str,
        outputs: OutputPaths,
        activation_bytes: str,
        duration: int,
        loop: bool = False,
        completed: list[Stage] | None = None,
    ) -> list[Stage]:
        """Run all stages for one input file.

        Args:
            source: AAX input path
            outputs: Destination paths
            activation_bytes: Resolved activation bytes
            duration: Total duration in seconds, for progress
            loop: Also build the looped-cover video
            completed: List to append finished stages to, so callers see
                partial progress when a later stage raises

        Returns:
            The completed stages

        Raises:
            TranscodeError: If a stage fails
            OperationCancelled: If cancelled while running
        """
        completed = completed if completed is not None else []

        self._run_stage(
            Stage.DECODE,
            f"Converting Audiobook (using {activation_bytes} for decryption)",
            self.decode_command(source, outputs.audio, activation_bytes),
            duration,
            track_progress=True,
        )
        completed.append(Stage.DECODE)

        self._run_stage(
            Stage.EXTRACT_COVER,
            "Extracting Cover Image",
            self.cover_command(source, outputs.cover, activation_bytes),
            duration,
            track_progress=False,
        )
        completed.append(Stage.EXTRACT_COVER)

        if loop:
            self._run_stage(
                Stage.LOOP,
                "Adding looped cover image to Audiobook",
                self.loop_command(outputs.audio, outputs.cover, outputs.video),
                duration,
                track_progress=True,
            )
            completed.append(Stage.LOOP)

        return completed
