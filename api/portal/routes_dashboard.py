from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Optional

from .db import get_db
from .deps import get_object_storage, require_session
from .models import User
from .storage import ObjectStorage
from .submissions import MAX_SUBMISSION_BYTES, FileCandidate, SubmissionManager
from .templating import templates

router = APIRouter(tags=["dashboard"])


async def read_candidate(file: Optional[UploadFile]) -> Optional[FileCandidate]:
    """Turn a multipart file field into a candidate; an empty field means none."""
    if file is None or not file.filename:
        return None
    # never buffer more than one byte past the limit
    data = await file.read(MAX_SUBMISSION_BYTES + 1)
    size = file.size if file.size is not None else len(data)
    return FileCandidate(
        name=file.filename,
        size=size,
        mime_type=file.content_type or "",
        data=data,
    )


def _render(request: Request, user: User, manager: SubmissionManager, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"user": user, "manager": manager},
        status_code=status_code,
    )


@router.get("/")
def index():
    return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/dashboard")
def dashboard(
    request: Request,
    user: User = Depends(require_session),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
):
    manager = SubmissionManager(db, storage, user)
    manager.refresh()
    return _render(request, user, manager)


@router.post("/dashboard/upload")
async def upload_submission(
    request: Request,
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_session),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
):
    manager = SubmissionManager(db, storage, user)
    if manager.select(await read_candidate(file)) and manager.upload() is not None:
        return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    manager.refresh()
    return _render(request, user, manager, status_code=400 if manager.error else 200)


@router.post("/dashboard/submissions/{submission_id}/delete")
def delete_submission(
    request: Request,
    submission_id: int,
    path: Optional[str] = Form(None),
    user: User = Depends(require_session),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
):
    manager = SubmissionManager(db, storage, user)
    if manager.delete(submission_id, path):
        return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    manager.refresh()
    return _render(request, user, manager, status_code=400)
