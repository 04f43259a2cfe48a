"""File utility for critical-css."""

import os
import aiofiles
import chardet
from .error import FileOperationError

def decode_bytes(raw: bytes) -> str:
    """Decode stylesheet bytes, falling back to detected encoding.

    Args:
        raw: File content

    Returns:
        Decoded text
    """
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        encoding = chardet.detect(raw)['encoding'] or 'latin-1'
        return raw.decode(encoding, errors='replace')

async def read_text_file(file_path: str) -> str:
    """Read a text file without blocking the event loop.

    Args:
        file_path: Path to the file

    Returns:
        File content

    Raises:
        FileNotFoundError: If the file does not exist
        FileOperationError: If file read fails or the path is invalid
    """
    try:
        async with aiofiles.open(file_path, 'rb') as f:
            raw = await f.read()
    except FileNotFoundError:
        raise
    except (OSError, ValueError) as e:
        raise FileOperationError(f"Failed to read file {file_path}: {e}")
    return decode_bytes(raw)

async def write_text_file(file_path: str, content: str, encoding: str = 'utf-8') -> None:
    """Write content to a file without blocking the event loop.

    Args:
        file_path: Path to the file
        content: Content to write
        encoding: File encoding

    Raises:
        FileOperationError: If file write fails
    """
    try:
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        async with aiofiles.open(file_path, 'w', encoding=encoding) as f:
            await f.write(content)
    except (OSError, ValueError) as e:
        raise FileOperationError(f"Failed to write file {file_path}: {e}")

# Exported functions
__all__ = ['decode_bytes', 'read_text_file', 'write_text_file']
