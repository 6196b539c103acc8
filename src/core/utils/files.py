import random
import re
import time
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from core.services.exceptions import FileTooLargeError

_CHUNK_SIZE = 1024 * 64


def filename_split(orig_filename: str) -> tuple[str, list[str]]:
    """Splits filename to name and extensions"""
    filename_splitted = orig_filename.split(".")
    filename_i = 1 if orig_filename.startswith(".") else 0
    filename = filename_splitted[filename_i]
    if orig_filename.startswith("."):
        filename = "." + filename
    extensions = filename_splitted[filename_i + 1 :]
    return filename, extensions


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "-", name)


def _get_unique_filename(upload_file: UploadFile) -> str:
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    if not upload_file.filename:
        return unique_suffix
    name, extensions = filename_split(upload_file.filename)
    unique_filename = f"{sanitize_filename(name)}-{unique_suffix}"
    if extensions:
        unique_filename += "." + extensions[-1]
    return unique_filename


async def save_upload_file(
    upload_file: UploadFile, dest_dir: Path, max_size: int | None = None
) -> tuple[str, int]:
    """Streams upload to dest_dir under a unique name.
    Returns saved filename and written size in bytes"""
    await aiofiles.os.makedirs(dest_dir, exist_ok=True)
    unique_filename = _get_unique_filename(upload_file)
    dest_path = dest_dir / unique_filename
    size = 0
    try:
        async with aiofiles.open(dest_path, "wb") as dst:
            while content := await upload_file.read(_CHUNK_SIZE):
                size += len(content)
                if max_size is not None and size > max_size:
                    raise FileTooLargeError(max_size)
                await dst.write(content)
    except FileTooLargeError:
        await aiofiles.os.remove(dest_path)
        raise
    finally:
        await upload_file.close()
    return unique_filename, size
