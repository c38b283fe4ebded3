import logging
import random
import shutil
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .. import schemas, models
from ..config import Settings, get_settings
from ..deps import admin_only

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

UPLOADS_URL_PREFIX = "/uploads"


def get_upload_dir(settings: Settings = Depends(get_settings)) -> Path:
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def stored_filename(original_name: str) -> str:
    """Unique name for an upload, keeping only the original extension."""
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return unique_suffix + Path(original_name or "").suffix.lower()


@router.post("/upload", response_model=schemas.UploadOut)
def upload_file(
    file: Optional[UploadFile] = File(None),
    upload_dir: Path = Depends(get_upload_dir),
    _: models.User | None = Depends(admin_only),
):
    """
    Store a room image or ad media file.

    Returns the URL the file is served from under ``/uploads``.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    filename = stored_filename(file.filename)
    with (upload_dir / filename).open("wb") as out:
        shutil.copyfileobj(file.file, out)

    logger.info("Stored upload %s (%s)", filename, file.content_type)
    return {"url": f"{UPLOADS_URL_PREFIX}/{filename}"}
