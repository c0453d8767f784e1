"""
On-disk image storage for the upload routes: UPLOAD_DIR/<type>/<filename>,
served statically under /uploads.
"""
import logging
import os
import re
import secrets
import time
from io import BytesIO
from pathlib import Path
from typing import List

from fastapi import HTTPException, status
from PIL import Image, UnidentifiedImageError

from ..config import settings

logger = logging.getLogger(__name__)

CONTENT_TYPE_PATTERN = re.compile(r"^[a-z0-9_-]+$")
FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def upload_root() -> Path:
    root = Path(settings.UPLOAD_DIR)
    root.mkdir(parents=True, exist_ok=True)
    return root


def validate_content_type(content_type: str) -> str:
    content_type = (content_type or "misc").strip().lower()
    if not CONTENT_TYPE_PATTERN.match(content_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Invalid upload type")
    return content_type


def validate_filename(filename: str) -> str:
    if not FILENAME_PATTERN.match(filename) or filename.startswith("."):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Invalid filename")
    return filename


def type_dir(content_type: str, create: bool = False) -> Path:
    directory = upload_root() / validate_content_type(content_type)
    if create:
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def check_extension(original_name: str) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    if ext not in settings.ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Only image files are allowed!")
    return ext


def check_size(content: bytes) -> None:
    if len(content) > settings.MAX_UPLOAD_SIZE:
        max_mb = settings.MAX_UPLOAD_SIZE / (1024 * 1024)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"File size too large. Maximum size is {max_mb:g}MB.")


def unique_filename(field_name: str, ext: str) -> str:
    return f"{field_name}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def resize_image(content: bytes) -> bytes:
    """Fit inside IMAGE_MAX_DIMENSION square, never enlarge, re-encode as JPEG."""
    try:
        image = Image.open(BytesIO(content))
        image.load()
    except (UnidentifiedImageError, OSError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Uploaded file is not a valid image")

    # JPEG has no alpha channel
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        image = background
    elif image.mode != "RGB":
        image = image.convert("RGB")

    max_side = settings.IMAGE_MAX_DIMENSION
    original_size = image.size
    # thumbnail() keeps the aspect ratio and only ever shrinks
    image.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    if image.size != original_size:
        logger.info(f"Image resized: {original_size[0]}x{original_size[1]} -> "
                    f"{image.size[0]}x{image.size[1]}")

    output = BytesIO()
    image.save(output, format="JPEG", quality=settings.IMAGE_JPEG_QUALITY, optimize=True)
    return output.getvalue()


def save_file(content_type: str, filename: str, content: bytes) -> Path:
    path = type_dir(content_type, create=True) / filename
    path.write_bytes(content)
    return path


def file_url(content_type: str, filename: str) -> str:
    return f"/uploads/{content_type}/{filename}"


def list_files(content_type: str) -> List[dict]:
    directory = type_dir(content_type)
    if not directory.is_dir():
        return []
    return [
        {"filename": path.name, "url": file_url(directory.name, path.name)}
        for path in sorted(directory.iterdir())
        if path.is_file()
    ]


def delete_file(content_type: str, filename: str) -> None:
    path = type_dir(content_type) / validate_filename(filename)
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    path.unlink()
