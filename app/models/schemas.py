from datetime import datetime, timezone
from typing import List, Union

from pydantic import BaseModel, Field

from app.models.models import Candidate, DocumentType, ParsedDocument, ParsedResume, ReportEntry


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------- Parsing --------
class BatchParseResponse(BaseModel):
    document_type: DocumentType
    attempted: int
    succeeded: int
    failed: int
    message: str
    documents: List[Union[ParsedResume, ParsedDocument]] = []


# -------- Matching --------
class MatchRequest(BaseModel):
    job_descriptions: List[ParsedDocument] = []
    resumes: List[ParsedResume] = []


class MatchResponse(BaseModel):
    candidates: List[Candidate] = []


# -------- Reports --------
class ReportRequest(BaseModel):
    job_descriptions: List[ParsedDocument] = []
    candidates: List[Candidate] = []


class ReportResponse(BaseModel):
    rows: List[ReportEntry] = []
    generated_at: datetime = Field(default_factory=_utcnow)
