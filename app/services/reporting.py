from typing import List, Sequence

import pandas as pd

from app.models.models import Candidate, ParsedDocument, ReportEntry
from app.models.settings import ScoringThresholds
from app.services.matching import experience_status, skill_status

NOT_SPECIFIED = "Not specified"

REPORT_COLUMNS = {
    "sl_no": "Sl No",
    "jd_name": "JD Name",
    "resume_name": "Resume Name",
    "candidate_name": "Candidate Name",
    "email": "Email",
    "phone_number": "Phone Number",
    "candidate_experience": "Candidate Experience",
    "jd_experience": "JD Experience",
    "candidate_skills": "Candidate Skills",
    "jd_skills": "JD Skills",
    "skills_match_percentage": "Skills Match %",
    "skills_match_result": "Result Based on Skill",
    "experience_match_result": "Result Based on Experience",
}


def build_report(
    jds: Sequence[ParsedDocument],
    candidates: Sequence[Candidate],
    thresholds: ScoringThresholds = None,
) -> List[ReportEntry]:
    """
    One row per (job description, candidate) pair, grouped by job description.

    Job descriptions keep upload order and candidates keep theirs within each
    group. A candidate with no score for a job description is left out of
    that group.
    """
    thresholds = thresholds or ScoringThresholds()
    rows: List[ReportEntry] = []
    for jd in jds:
        for candidate in candidates:
            match = next((m for m in candidate.position_matches if m.title == jd.title), None)
            if match is None:
                continue
            rows.append(ReportEntry(
                sl_no=len(rows) + 1,
                jd_name=jd.title,
                resume_name=candidate.file_name,
                candidate_name=candidate.name,
                email=candidate.email,
                phone_number=candidate.phone,
                candidate_experience=candidate.experience,
                jd_experience=match.experience or NOT_SPECIFIED,
                candidate_skills=", ".join(candidate.skills),
                jd_skills=", ".join(match.skills) or NOT_SPECIFIED,
                skills_match_percentage=match.match_percentage,
                skills_match_result=skill_status(match.match_percentage, thresholds),
                experience_match_result=experience_status(
                    candidate.experience, match.experience or "0", thresholds
                ),
            ))
    return rows


def report_to_frame(rows: Sequence[ReportEntry]) -> pd.DataFrame:
    df = pd.DataFrame([r.model_dump() for r in rows], columns=list(REPORT_COLUMNS))
    df["skills_match_percentage"] = df["skills_match_percentage"].map(lambda p: f"{p}%")
    return df.rename(columns=REPORT_COLUMNS)


def report_to_csv(rows: Sequence[ReportEntry]) -> str:
    """Tabulate rows with the report's display headings; headers only when empty."""
    return report_to_frame(rows).to_csv(index=False)
