"""File writing utilities."""

import asyncio
import os
import uuid
from pathlib import Path
from typing import Union

import aiofiles


def temp_path_for(path: Union[str, Path]) -> Path:
    """
    Get a unique temporary path next to the destination.

    The temporary file must live in the destination directory so the final
    os.replace() is a same-filesystem rename.
    """
    path = Path(path)
    return path.with_name(f"{path.name}.tmp.{os.getpid()}.{uuid.uuid4().hex}")


async def atomic_write_text(
    path: Union[str, Path],
    content: str,
    encoding: str = "utf-8"
) -> None:
    """
    Atomically replace a file's contents.

    Writes to a uniquely named temporary file, fsyncs it in a worker thread
    and renames it over the destination. Readers see either the old or the
    new file, never a partial one.

    Args:
        path: Destination file path
        content: Text to write
        encoding: Text encoding

    Raises:
        OSError: If the write or rename fails. The destination is untouched
            and the temporary file is removed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = temp_path_for(path)
    try:
        async with aiofiles.open(tmp_path, mode="w", encoding=encoding) as f:
            await f.write(content)
            await f.flush()
            await asyncio.to_thread(os.fsync, f.fileno())

        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass
