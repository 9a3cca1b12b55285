from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DocumentType(str, Enum):
    """Kinds of document the parser understands"""
    RESUME = "resume"
    JD = "jd"


class UploadedDocument(BaseModel):
    """One uploaded file held in memory"""
    model_config = ConfigDict(frozen=True)

    file_name: str
    content_type: str = ""
    data: bytes = b""


class ContactInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""


class ParsedDocument(BaseModel):
    """A parsed job description"""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: Optional[str] = None
    responsibilities: List[str] = Field(default_factory=list)
    file_name: str = ""


class ParsedResume(ParsedDocument):
    name: str = ""
    email: str = ""
    phone: str = ""
    education: str = ""


class PositionMatch(BaseModel):
    """One job description's requirements scored against one candidate"""
    model_config = ConfigDict(frozen=True)

    title: str
    match_percentage: int = Field(ge=0, le=100)
    experience: Optional[str] = None
    skills: List[str] = Field(default_factory=list)


class Candidate(BaseModel):
    """A parsed resume with its scores against every known job description"""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    skills: List[str] = Field(default_factory=list)
    experience: str = ""
    education: str = ""
    match_percentage: int = Field(default=0, ge=0, le=100)
    file_name: str = ""
    position_matches: List[PositionMatch] = Field(default_factory=list)
    best_matching_position: Optional[str] = None

    @model_validator(mode="after")
    def check_best_match(self):
        if self.best_matching_position is None:
            return self
        titled = [m for m in self.position_matches if m.title == self.best_matching_position]
        if not titled:
            raise ValueError("best_matching_position must name one of position_matches")
        top = max(m.match_percentage for m in self.position_matches)
        if max(m.match_percentage for m in titled) < top:
            raise ValueError("best_matching_position must have the highest match percentage")
        return self


class ReportEntry(BaseModel):
    """One row of the tabulated match report"""
    model_config = ConfigDict(frozen=True)

    sl_no: int
    jd_name: str
    resume_name: str
    candidate_name: str
    email: str
    phone_number: str
    candidate_experience: str
    jd_experience: str
    candidate_skills: str
    jd_skills: str
    skills_match_percentage: int
    skills_match_result: str
    experience_match_result: str
