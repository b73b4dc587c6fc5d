from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SubmissionOut(BaseModel):
    id: int
    name: str
    size: int
    mime_type: str
    url: str
    path: str
    created_at: Optional[datetime] = None
    size_display: str
    created_display: str


class SubmissionList(BaseModel):
    items: List[SubmissionOut]
    total: int
