from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from .db import get_db
from .deps import get_current_user, get_object_storage
from .models import Submission, User
from .routes_dashboard import read_candidate
from .schemas import SubmissionList, SubmissionOut
from .storage import ObjectStorage
from .submissions import SubmissionManager, format_date, format_file_size

router = APIRouter(prefix="/api/submissions", tags=["submissions"])


def _out(row: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=row.id,
        name=row.name,
        size=row.size,
        mime_type=row.mime_type,
        url=row.url,
        path=row.path,
        created_at=row.created_at,
        size_display=format_file_size(row.size),
        created_display=format_date(row.created_at),
    )


@router.get("", response_model=SubmissionList)
def list_submissions(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
    current: User = Depends(get_current_user),
):
    rows = SubmissionManager(db, storage, current).refresh()
    return SubmissionList(items=[_out(r) for r in rows], total=len(rows))


@router.post("", response_model=SubmissionOut, status_code=201)
async def create_submission(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
    current: User = Depends(get_current_user),
):
    manager = SubmissionManager(db, storage, current)
    if not manager.select(await read_candidate(file)):
        raise HTTPException(400, detail=manager.error or "No file selected")
    row = manager.upload()
    if row is None:
        raise HTTPException(502, detail=manager.error)
    return _out(row)


@router.get("/{submission_id}", response_model=SubmissionOut)
def get_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
    current: User = Depends(get_current_user),
):
    row = SubmissionManager(db, storage, current).get(submission_id)
    if not row:
        raise HTTPException(404, detail="Submission not found")
    return _out(row)


@router.delete("/{submission_id}")
def delete_submission(
    submission_id: int,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
    current: User = Depends(get_current_user),
):
    manager = SubmissionManager(db, storage, current)
    if manager.get(submission_id) is None:
        raise HTTPException(404, detail="Submission not found")
    if not manager.delete(submission_id):
        raise HTTPException(502, detail=manager.error)
    return {"deleted": submission_id}
