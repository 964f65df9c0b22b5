"""
Image Upload Route for Tablewise
================================

- POST /upload: Store an image (multipart field "image") and return its URL

Used by the dashboard for menu item photos, banners and logos. Files are
written to UPLOAD_DIR as <timestamp>-<uuid><ext> and served back from
/uploads by the app's static files mount.

Limits:
-------
- Content types: jpeg, png, gif, webp (config.ALLOWED_IMAGE_TYPES)
- Size: MAX_UPLOAD_BYTES (default 5 MB); at most one byte past the limit is read
"""

import logging
import os
import time
import uuid
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .. import config
from ..auth import AdminPrincipal, get_current_principal


logger = logging.getLogger(__name__)

upload_router = APIRouter(prefix="/upload", tags=["Upload"])


@upload_router.post("")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> Dict[str, str]:
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Please upload a file")

    extension = config.ALLOWED_IMAGE_TYPES.get(image.content_type)
    if extension is None:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(sorted(config.ALLOWED_IMAGE_TYPES))}",
        )

    # One byte past the limit is enough to know the file is too large
    contents = await image.read(config.MAX_UPLOAD_BYTES + 1)
    if len(contents) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {config.MAX_UPLOAD_BYTES // (1024 * 1024)}MB",
        )

    filename = f"{int(time.time() * 1000)}-{uuid.uuid4()}{extension}"
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(config.UPLOAD_DIR, filename), "wb") as f:
        f.write(contents)

    logger.info("Stored upload %s (%d bytes) for %s", filename, len(contents), principal.username)
    return {"image_url": f"/uploads/{filename}"}
