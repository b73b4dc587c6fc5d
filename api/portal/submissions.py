"""
Submission lifecycle: selecting a candidate file, storing it, listing and
deleting an owner's submissions.

A ``SubmissionManager`` is built per request for one owner. Its attributes
(``pending``, ``uploading``, ``error``, ``files``) are what the dashboard
renders.

Create and delete are two separate steps (object storage, then the metadata
row) with no transaction spanning both:

- upload stores the object first; if the row insert then fails the object is
  left behind and logged as orphaned,
- delete removes the object first; if that fails the row is kept.
"""

import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import config
from .errors import DatabaseError, PortalError, StorageError, ValidationError, error_message
from .logging_config import get_logger
from .models import Submission, User
from .storage import ObjectStorage

log = get_logger("submissions")

MIME_PDF = "application/pdf"
MIME_PPT = "application/vnd.ms-powerpoint"
MIME_PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
ALLOWED_MIME_TYPES = (MIME_PDF, MIME_PPT, MIME_PPTX)
_DEFAULT_EXT = {MIME_PDF: "pdf", MIME_PPT: "ppt", MIME_PPTX: "pptx"}

MAX_SUBMISSION_BYTES = config.SUBMISSION_MAX_MB * 1024 * 1024

INVALID_TYPE_MESSAGE = "Please select a PDF or PowerPoint file"
TOO_LARGE_MESSAGE = f"File size must be less than {config.SUBMISSION_MAX_MB}MB"
UPLOAD_FAILED_MESSAGE = "Upload failed"
DELETE_FAILED_MESSAGE = "Failed to delete file"

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass
class FileCandidate:
    name: str
    size: int
    mime_type: str
    data: bytes = b""


def validate_candidate(candidate: FileCandidate) -> None:
    if candidate.mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(INVALID_TYPE_MESSAGE)
    if candidate.size > MAX_SUBMISSION_BYTES:
        raise ValidationError(TOO_LARGE_MESSAGE)


def _extension(filename: str, mime_type: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if not ext or not ext.isalnum() or len(ext) > 8:
        ext = _DEFAULT_EXT.get(mime_type, "bin")
    return ext


def make_storage_key(owner_id: int, filename: str, mime_type: str = "", now_ms: Optional[int] = None) -> str:
    """``{owner}/{millis}-{random}.{ext}``; the random part keeps two uploads
    in the same millisecond apart."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{owner_id}/{ms}-{secrets.token_hex(4)}.{_extension(filename, mime_type)}"


def format_file_size(size: int) -> str:
    if not size or size <= 0:
        return "0 Bytes"
    i = 0
    while i < len(_SIZE_UNITS) - 1 and size >= 1024 ** (i + 1):
        i += 1
    # half-up rounding to 2 decimals, then drop trailing zeros
    value = int(size * 100 / 1024 ** i + 0.5) / 100
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"


def format_date(value: Union[datetime, str, None]) -> str:
    """e.g. ``Oct 19, 2026, 04:10 PM``"""
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{value:%b} {value.day}, {value.year}, {value:%I:%M %p}"


class SubmissionManager:
    def __init__(self, db: Session, storage: ObjectStorage, owner: Optional[User]):
        self.db = db
        self.storage = storage
        self.owner = owner
        self.pending: Optional[FileCandidate] = None
        self.uploading = False
        self.error: Optional[str] = None
        self.files: List[Submission] = []

    def select(self, candidate: Optional[FileCandidate]) -> bool:
        """Validate ``candidate`` and make it the pending selection."""
        self.error = None
        if candidate is None:
            self.pending = None
            return False
        try:
            validate_candidate(candidate)
        except ValidationError as e:
            self.error = e.message
            self.pending = None
            return False
        self.pending = candidate
        return True

    def upload(self) -> Optional[Submission]:
        if self.pending is None or self.owner is None:
            return None
        cand = self.pending
        self.uploading = True
        self.error = None
        try:
            key = make_storage_key(self.owner.id, cand.name, cand.mime_type)
            self.storage.upload(key, cand.data, content_type=cand.mime_type)
            url = self.storage.get_public_url(key)
            row = Submission(
                name=cand.name,
                size=cand.size,
                mime_type=cand.mime_type,
                url=url,
                path=key,
                user_id=self.owner.id,
            )
            try:
                self.db.add(row)
                self.db.commit()
                self.db.refresh(row)
            except SQLAlchemyError as e:
                self.db.rollback()
                log.error("metadata insert failed; orphaned object %s/%s: %s", self.storage.bucket, key, e)
                raise DatabaseError("Failed to save file metadata") from e
            log.info("submission %s stored at %s (owner=%s, %d bytes)", row.id, key, self.owner.id, cand.size)
            self.pending = None
            self.refresh()
            return row
        except PortalError as e:
            self.error = error_message(e, UPLOAD_FAILED_MESSAGE)
            return None
        finally:
            self.uploading = False

    def refresh(self) -> List[Submission]:
        if self.owner is None:
            return self.files
        try:
            self.files = (
                self.db.query(Submission)
                .filter(Submission.user_id == self.owner.id)
                .order_by(Submission.created_at.desc(), Submission.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            log.error("failed to fetch submissions for owner=%s: %s", self.owner.id, e)
        return self.files

    def get(self, submission_id: int) -> Optional[Submission]:
        if self.owner is None:
            return None
        return (
            self.db.query(Submission)
            .filter(Submission.id == submission_id, Submission.user_id == self.owner.id)
            .first()
        )

    def delete(self, submission_id: int, path: Optional[str] = None) -> bool:
        self.error = None
        try:
            row = self.get(submission_id)
            if row is None or (path is not None and path != row.path):
                raise StorageError("Object not found", code="not_found")
            self.storage.remove([row.path])
            try:
                self.db.delete(row)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                raise DatabaseError("Failed to delete file metadata") from e
        except PortalError as e:
            log.error("error deleting submission %s: %s", submission_id, e.message)
            self.error = DELETE_FAILED_MESSAGE
            return False
        log.info("submission %s deleted (owner=%s)", submission_id, self.owner.id)
        self.refresh()
        return True
