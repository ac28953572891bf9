"""Download a zip archive over HTTP and unpack it with the system ``unzip``."""

from __future__ import annotations

import asyncio
import contextlib
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from github_ci_mcp.config import BASE_LOGGER
from github_ci_mcp.exceptions import ArchiveExtractionError, DownloadError
from github_ci_mcp.http_clients import _external_client_instance

DEFAULT_OUTPUT_DIR = "/tmp"
DEFAULT_ARCHIVE_NAME = "github-logs.zip"
UNZIP_EXECUTABLE = "unzip"

LOGGER = BASE_LOGGER.getChild("downloader")


@dataclass(frozen=True)
class DownloadResult:
    success: bool
    message: str
    extracted_directory: str
    files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "extractedDirectory": self.extracted_directory,
            "files": list(self.files),
        }


def validate_url(url: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Please provide a valid URL")
    return url


def _remove_if_present(path: str) -> None:
    with contextlib.suppress(FileNotFoundError):
        os.remove(path)


async def _download_to_file(client: httpx.AsyncClient, url: str, destination: str) -> int:
    written = 0
    async with client.stream("GET", url) as resp:
        if resp.status_code >= 400:
            body = (await resp.aread()).decode("utf-8", errors="replace")
            raise DownloadError(
                f"HTTP error! Status: {resp.status_code}, Message: {body}",
                status_code=resp.status_code,
            )
        with open(destination, "wb") as handle:
            async for chunk in resp.aiter_bytes():
                handle.write(chunk)
                written += len(chunk)
    return written


async def _run_unzip(archive_path: str, extract_dir: str) -> None:
    """Extract ``archive_path`` into ``extract_dir``, overwriting existing files."""

    try:
        proc = await asyncio.create_subprocess_exec(
            UNZIP_EXECUTABLE,
            "-o",
            archive_path,
            "-d",
            extract_dir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ArchiveExtractionError(f"Error unzipping file: {exc}") from exc

    _, stderr_bytes = await proc.communicate()
    stderr = stderr_bytes.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise ArchiveExtractionError(
            f"Unzip process exited with code {proc.returncode}: {stderr}",
            returncode=proc.returncode,
            stderr=stderr,
        )


async def download_and_unzip(
    url: str,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    filename: Optional[str] = None,
    *,
    client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> DownloadResult:
    """Download ``url`` into ``output_dir`` and unzip it in place.

    The temporary archive is removed on success and on every failure path
    before the error propagates.
    """

    validate_url(url)
    os.makedirs(output_dir, exist_ok=True)

    temp_path = os.path.join(output_dir, filename or DEFAULT_ARCHIVE_NAME)
    client = (client_factory or _external_client_instance)()

    try:
        size = await _download_to_file(client, url, temp_path)
        LOGGER.chat("Downloaded %d bytes to %s", size, temp_path)
        await _run_unzip(temp_path, output_dir)
        os.remove(temp_path)
    except Exception:
        _remove_if_present(temp_path)
        raise

    return DownloadResult(
        success=True,
        message=f"File downloaded and unzipped successfully to {output_dir}",
        extracted_directory=output_dir,
        files=sorted(os.listdir(output_dir)),
    )


__all__ = [
    "DEFAULT_ARCHIVE_NAME",
    "DEFAULT_OUTPUT_DIR",
    "DownloadResult",
    "download_and_unzip",
    "validate_url",
]
