"""
Image upload routes. Files land under UPLOAD_DIR/<type>/ and are served at /uploads.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..auth_utils import admin_required, get_current_user
from ..config import settings
from ..models.user import User
from ..utils import file_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/upload",
    tags=["uploads"]
)


def _read_checked(upload: UploadFile):
    ext = file_storage.check_extension(upload.filename)
    content = upload.file.read()
    file_storage.check_size(content)
    return ext, content


def _store(content_type: str, field_name: str, ext: str, content: bytes) -> dict:
    filename = file_storage.unique_filename(field_name, ext)
    file_storage.save_file(content_type, filename, content)
    return {
        "filename": filename,
        "url": file_storage.file_url(content_type, filename),
        "size": len(content),
    }


@router.post("/single", status_code=status.HTTP_201_CREATED)
def upload_single(
    image: UploadFile = File(...),
    type: str = Form("misc"),
    current_user: User = Depends(get_current_user)
):
    content_type = file_storage.validate_content_type(type)
    _, content = _read_checked(image)
    stored = _store(content_type, "image", ".jpg", file_storage.resize_image(content))
    logger.info(f"User {current_user.id} uploaded {stored['url']}")
    return {"message": "File uploaded successfully", **stored}


@router.post("/multiple", status_code=status.HTTP_201_CREATED)
def upload_multiple(
    images: List[UploadFile] = File(...),
    type: str = Form("misc"),
    current_user: User = Depends(get_current_user)
):
    if len(images) > settings.MAX_FILES_PER_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files. Maximum is {settings.MAX_FILES_PER_UPLOAD}."
        )
    content_type = file_storage.validate_content_type(type)

    # Every file is read and checked before the first one is written
    checked = [_read_checked(image) for image in images]
    files = [_store(content_type, "images", ext, content) for ext, content in checked]
    logger.info(f"User {current_user.id} uploaded {len(files)} files to {content_type}")
    return {"message": "Files uploaded successfully", "files": files}


@router.delete("/{type}/{filename}")
def delete_upload(
    type: str,
    filename: str,
    current_user: User = Depends(admin_required)
):
    file_storage.delete_file(type, filename)
    logger.info(f"Admin {current_user.id} deleted upload {type}/{filename}")
    return {"message": "File deleted successfully"}


@router.get("/list/{type}")
def list_uploads(
    type: str,
    current_user: User = Depends(get_current_user)
):
    return {"files": file_storage.list_files(type)}
