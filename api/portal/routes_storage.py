from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from .db import get_db
from .deps import get_object_storage
from .errors import StorageError
from .models import Submission
from .storage import PUBLIC_PREFIX, ObjectStorage

router = APIRouter(prefix=PUBLIC_PREFIX, tags=["storage"])


@router.get("/{bucket}/{key:path}")
def get_public_object(
    bucket: str,
    key: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
):
    if bucket != storage.bucket:
        raise HTTPException(404, detail="Bucket not found")
    try:
        path = storage.open_path(key)
    except StorageError as e:
        raise HTTPException(404, detail=e.message)
    row = db.query(Submission).filter(Submission.path == key).first()
    if row is None:
        return FileResponse(path, media_type="application/octet-stream")
    return FileResponse(path, filename=row.name, media_type=row.mime_type, content_disposition_type="inline")
