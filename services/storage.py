"""Storage service for submitted work files (local disk)."""

import time
from pathlib import Path

from fastapi import UploadFile

import config


def _safe_name(filename: str | None) -> str:
    return Path(filename or "upload.bin").name.replace(" ", "_")


async def save_work_file(file: UploadFile, *, project_id: int) -> str:
    """
    Save an uploaded work file to local disk.

    Args:
        file: FastAPI UploadFile object
        project_id: Project the file belongs to

    Returns:
        Stable reference to the stored file (relative path)

    Raises:
        OSError: If directory creation or file write fails
    """
    storage_dir = Path(config.settings.WORK_STORAGE_DIR) / str(project_id)

    # Create parent directories if they don't exist
    storage_dir.mkdir(parents=True, exist_ok=True)

    stored_name = f"{int(time.time() * 1000)}-{_safe_name(file.filename)}"
    full_path = storage_dir / stored_name

    content = await file.read()
    with open(full_path, "wb") as f:
        f.write(content)

    return full_path.as_posix()


async def delete_work_file(file_ref: str) -> None:
    """
    Delete a stored work file.

    Args:
        file_ref: Reference returned by save_work_file

    Raises:
        OSError: If file deletion fails
    """
    full_path = Path(file_ref)

    if full_path.exists():
        full_path.unlink()


def work_file_path(file_ref: str) -> Path | None:
    """Local path of a stored work file, or None if it is gone."""
    full_path = Path(file_ref)
    return full_path if full_path.is_file() else None
