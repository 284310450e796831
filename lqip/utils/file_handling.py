"""
Utilities for file handling and temporary file management.
"""
import os
import logging
import contextlib
import uuid
from typing import Iterator, Optional

from lqip import TEMP_DIR

# Set up logging
logger = logging.getLogger(__name__)


def get_temp_filepath(file_id: Optional[str] = None, suffix: str = "", prefix: str = "") -> str:
    """
    Generate a path for a temporary file.

    Args:
        file_id: Optional file ID to use (generates a new UUID if not provided)
        suffix: Optional file suffix/extension
        prefix: Optional file name prefix

    Returns:
        Absolute path to a temporary file
    """
    if file_id is None:
        file_id = uuid.uuid4().hex

    return os.path.join(TEMP_DIR, f"{prefix}{file_id}{suffix}")


@contextlib.contextmanager
def temp_file_context(suffix: str = "", prefix: str = "temp_") -> Iterator[str]:
    """
    Context manager that reserves a unique temporary file path and always
    removes the file when the context exits, whether or not it raised.

    Args:
        suffix: File extension to use (including the dot)
        prefix: File name prefix

    Yields:
        Path to the temporary file
    """
    os.makedirs(TEMP_DIR, exist_ok=True)
    temp_path = get_temp_filepath(suffix=suffix, prefix=prefix)
    try:
        yield temp_path
    finally:
        try:
            os.remove(temp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to clean up temporary file {temp_path}: {e}")


def write_and_read_back(data: bytes, suffix: str = "") -> bytes:
    """
    Write data to a scoped temporary file and read it back in full.

    The file never outlives the call. I/O errors are logged and re-raised.

    Args:
        data: Bytes to write
        suffix: File extension for the temporary file

    Returns:
        The bytes read back from disk
    """
    with temp_file_context(suffix=suffix) as temp_path:
        try:
            with open(temp_path, "wb") as f:
                f.write(data)
            with open(temp_path, "rb") as f:
                return f.read()
        except OSError as e:
            logger.error(f"Error round-tripping placeholder through {temp_path}: {e}")
            raise
