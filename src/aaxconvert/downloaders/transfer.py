"""Streaming HTTP download."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx

from aaxconvert.errors import OperationCancelled, TransferError
from aaxconvert.models import ProgressState
from aaxconvert.process import CancelToken

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressState], None]


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def download(
    url: str,
    output: str,
    chunk_size: int = 64 * 1024,
    timeout: float | None = None,
    on_progress: ProgressCallback | None = None,
    cancel: CancelToken | None = None,
    client: httpx.Client | None = None,
) -> int:
    """Stream a URL to a file.

    Progress is reported per chunk. ``total`` is None when the server
    sends no content-length. A partially written file is left in place
    on failure or cancellation.

    Args:
        url: Source URL
        output: Destination path
        chunk_size: Read size in bytes
        timeout: Seconds, None for no timeout
        on_progress: Called with a ProgressState after every chunk
        cancel: Optional token checked between chunks
        client: httpx client to use (default: a new one)

    Returns:
        Number of bytes received

    Raises:
        TransferError: On a non-200 status, network or write error
        OperationCancelled: If cancelled while transferring
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    logger.debug("GET %s -> %s", url, output)
    try:
        with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise TransferError(f"Download error! (HTTP {response.status_code})")

            total = _content_length(response)
            with open(output, "wb") as f:
                for chunk in response.iter_bytes(chunk_size):
                    if cancel is not None and cancel.cancelled:
                        raise OperationCancelled(f"Download of {output} cancelled")
                    f.write(chunk)
                    if on_progress is not None:
                        on_progress(ProgressState(current=response.num_bytes_downloaded, total=total))

            received = response.num_bytes_downloaded
            if total is not None and received < total:
                raise TransferError(f"Download error! Received {received} of {total} bytes")
            return received
    except httpx.HTTPError as e:
        raise TransferError(f"Download error! {e}") from e
    except OSError as e:
        raise TransferError(f"Cannot write {output}: {e}") from e
    finally:
        if owns_client:
            client.close()
