# /blog_auto/routers/system_router.py

"""Operational endpoints: integration settings, health and stored image files."""

import re
import shutil
from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse, JSONResponse

from .. import config
from ..db.database import check_database
from ..services import kling_service

router = APIRouter()

# <uuid>.<ext>, the only names the upload directory ever holds.
SAFE_IMAGE_NAME = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\.(jpg|jpeg|png|webp)$"
)


@router.get("/settings", summary="Integration settings visible to the client")
def get_settings():
    return {
        "kling": {
            "configured": kling_service.is_kling_configured(),
            "model": config.KLING_MODEL,
        }
    }


@router.get("/health", summary="Readiness check")
def health_check():
    checks = {
        "database": check_database(),
        "claudeCli": shutil.which(config.CLAUDE_BIN) is not None,
    }
    if all(checks.values()):
        return {"status": "ok", "checks": checks}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "degraded", "checks": checks},
    )


@router.get("/images/{filename}", summary="Serve an attached image")
def get_image(filename: str):
    if not SAFE_IMAGE_NAME.match(filename):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid image filename.")
    path = Path(config.UPLOAD_DIR) / filename
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found.")
    return FileResponse(path)
