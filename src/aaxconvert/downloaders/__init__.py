"""Audiobook download from license files.

A license file (``.adh``) carries the customer id, product id, codec and
title needed to request the AAX file from Audible's content server.
"""

from __future__ import annotations

import logging
import os

import httpx

from aaxconvert.config import AaxConvertConfig, get_config
from aaxconvert.models import LicenseDescriptor
from aaxconvert.process import CancelToken
from aaxconvert.reporting import ProgressReporter, format_size

from .license import parse_license, read_license
from .transfer import download

logger = logging.getLogger(__name__)


def download_from_license(
    license_path: str,
    output_dir: str | None = None,
    config: AaxConvertConfig | None = None,
    reporter: ProgressReporter | None = None,
    cancel: CancelToken | None = None,
    client: httpx.Client | None = None,
) -> str:
    """Download the AAX file described by a license file.

    Args:
        license_path: Path to the ``.adh`` file
        output_dir: Destination directory (default: config, then cwd)
        config: Configuration (default: global config)
        reporter: Progress line writer
        cancel: Optional token to abort the transfer
        client: httpx client to use

    Returns:
        Path of the downloaded file

    Raises:
        ValidationError: If the license file is incomplete
        TransferError: If the download fails
    """
    config = config or get_config()
    reporter = reporter or ProgressReporter()

    descriptor: LicenseDescriptor = read_license(license_path)
    url = descriptor.download_url(config.download.host)
    directory = output_dir or config.download.directory or os.getcwd()
    output = os.path.join(directory, descriptor.output_filename)
    logger.info("Downloading %s from %s", descriptor.title, url)

    def on_progress(state):
        detail = format_size(state.current)
        if state.total:
            detail += f" / {format_size(state.total)}"
        reporter.update(state, detail)

    reporter.start(f"Downloading '{output}'")
    try:
        download(
            url,
            output,
            chunk_size=config.download.chunk_size,
            timeout=config.download.timeout_seconds,
            on_progress=on_progress,
            cancel=cancel,
            client=client,
        )
    except BaseException:
        reporter.finish(complete=False)
        raise
    reporter.finish()
    return output


__all__ = [
    "download",
    "download_from_license",
    "parse_license",
    "read_license",
]
