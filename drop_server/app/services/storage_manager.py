import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterable

import aiofiles
import aiofiles.os

from drop_server.logger_config import setup_logger

logger = setup_logger()

STAGING_PREFIX = "."
STAGING_SUFFIX = ".part~"  # "~" never appears in a valid filename


class PayloadTooLargeError(Exception):
    """Raised when an upload stream exceeds the configured ceiling."""

    def __init__(self, received: int, max_bytes: int):
        super().__init__(f"Upload exceeded {max_bytes} bytes (received at least {received})")
        self.received = received
        self.max_bytes = max_bytes


class BodyReadError(Exception):
    """Raised when the request body could not be read to the end."""


@dataclass(frozen=True)
class StagedUpload:
    path: Path
    size: int


class StorageManager:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    async def initialize(self, max_bytes: int = 0):
        """Create the data directory and report on leftovers from earlier runs."""
        logger.info("Initializing storage manager...")

        self.data_dir.mkdir(exist_ok=True, parents=True)
        logger.debug(f"Data directory created/verified: {self.data_dir}")

        # Staging files from interrupted uploads are kept for inspection, not swept
        leftovers = [p.name for p in self.data_dir.iterdir() if p.is_file() and is_staging_name(p.name)]
        if leftovers:
            logger.warning(f"Found {len(leftovers)} leftover staging file(s) in {self.data_dir}: {leftovers}")

        _, _, free = shutil.disk_usage(str(self.data_dir))
        logger.info(f"Free disk space: {free / (1024*1024):.2f} MB")
        if free < max_bytes:
            logger.warning(
                f"Free disk space ({free} bytes) is below the upload ceiling ({max_bytes} bytes)"
            )

    def staging_path(self, filename: str) -> Path:
        """Private location for the in-progress bytes of an upload."""
        return self.data_dir / f"{STAGING_PREFIX}{filename}{STAGING_SUFFIX}"

    def published_path(self, filename: str) -> Path:
        return self.data_dir / filename

    async def write_stream(
        self,
        filename: str,
        chunks: AsyncIterable[bytes],
        max_bytes: int,
    ) -> StagedUpload:
        """Stream chunks into the staging file for ``filename``.

        The running total is checked before each chunk is written; once it
        exceeds ``max_bytes`` no further chunks are pulled. On any failure the
        staging file is removed and the error is re-raised.

        Raises:
            PayloadTooLargeError: the stream is larger than ``max_bytes``
            BodyReadError: the chunk source failed
            OSError: the staging file could not be created, written or flushed
        """
        staging_path = self.staging_path(filename)
        written = 0

        try:
            async with aiofiles.open(staging_path, 'wb') as f:
                iterator = chunks.__aiter__()
                while True:
                    try:
                        chunk = await iterator.__anext__()
                    except StopAsyncIteration:
                        break
                    except Exception as e:
                        raise BodyReadError(str(e)) from e

                    written += len(chunk)
                    if written > max_bytes:
                        raise PayloadTooLargeError(written, max_bytes)
                    await f.write(chunk)

                await f.flush()
        except Exception:
            await self.discard(staging_path)
            raise

        logger.debug(f"Staged {written} bytes for {filename} at {staging_path}")
        return StagedUpload(path=staging_path, size=written)

    async def publish(self, staged: StagedUpload, filename: str) -> Path:
        """Atomically move a staged upload to its public name, replacing any previous file.

        If the rename fails the staging file is left where it is.
        """
        dest_path = self.published_path(filename)
        await aiofiles.os.replace(str(staged.path), str(dest_path))
        logger.debug(f"Published {staged.path.name} as {dest_path}")
        return dest_path

    async def discard(self, path: Path) -> None:
        """Best-effort removal of a staging file."""
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.unlink(path)
        except OSError as e:
            logger.warning(f"Could not remove staging file {path}: {e}")


def is_staging_name(name: str) -> bool:
    return (
        name.startswith(STAGING_PREFIX)
        and name.endswith(STAGING_SUFFIX)
        and len(name) > len(STAGING_PREFIX) + len(STAGING_SUFFIX)
    )
