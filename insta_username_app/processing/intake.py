"""
Input Filter

Decides which selected files make it into a batch.
"""

import mimetypes
from pathlib import Path
from typing import Iterable, List, Optional

from .config import DEFAULT_MAX_FILES
from .logger import get_logger
from .models import InputFile

logger = get_logger(__name__)

IMAGE_MIME_PREFIX = "image/"


def is_image_type(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.lower().startswith(IMAGE_MIME_PREFIX)


def select_input_files(files: Iterable[InputFile], max_files: int = DEFAULT_MAX_FILES) -> List[InputFile]:
    """Keep non-empty images, in selection order, up to max_files. Extra files are dropped silently."""
    accepted = []
    skipped = 0
    for file in files:
        if not is_image_type(file.mime_type) or file.size == 0:
            skipped += 1
            continue
        accepted.append(file)

    if skipped:
        logger.info(f"Skipped {skipped} non-image or empty file(s)")
    if len(accepted) > max_files:
        logger.info(f"Selection truncated from {len(accepted)} to {max_files} images")
    return accepted[:max_files]


def load_input_file(path: Path) -> InputFile:
    """Read a file from disk, guessing its MIME type from the name."""
    mime_type, _ = mimetypes.guess_type(path.name)
    with open(path, "rb") as f:
        data = f.read()
    return InputFile(name=path.name, mime_type=mime_type or "application/octet-stream", data=data)
