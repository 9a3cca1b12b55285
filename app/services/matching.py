import math
import re
from typing import List, Optional, Sequence

from app.models.models import Candidate, ParsedDocument, ParsedResume, PositionMatch
from app.models.settings import ScoringThresholds

SKILL_SELECT = "Select"
SKILL_HOLD = "Hold"
SKILL_REJECT = "Reject"

EXPERIENCE_QUALIFIED = "Qualified"
EXPERIENCE_CONSIDER = "Consider"
EXPERIENCE_NOT_QUALIFIED = "Not Qualified"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

NO_MATCH = PositionMatch(title="", match_percentage=0, experience="", skills=[])


def skills_overlap(candidate_skill: str, required_skill: str) -> bool:
    # Bidirectional containment: "React" matches "React.js", but a one-letter
    # skill such as "C" matches nearly anything.
    a, b = candidate_skill.lower(), required_skill.lower()
    return a in b or b in a


def calculate_match_percentage(candidate_skills: Sequence[str], required_skills: Sequence[str]) -> int:
    """
    Share of the required skills covered by the candidate, as a whole percentage.

    Counts candidate skills that overlap any required skill. No required
    skills scores 0, and the result never exceeds 100.
    """
    if not required_skills:
        return 0
    matching = [
        skill for skill in candidate_skills
        if skill.strip() and any(skills_overlap(skill, required) for required in required_skills)
    ]
    # half-up rounding, not banker's rounding
    percentage = int(math.floor(len(matching) / len(required_skills) * 100 + 0.5))
    return max(0, min(100, percentage))


def find_position_matches(candidate_skills: Sequence[str], jds: Sequence[ParsedDocument]) -> List[PositionMatch]:
    return [
        PositionMatch(
            title=jd.title,
            match_percentage=calculate_match_percentage(candidate_skills, jd.skills),
            experience=jd.experience,
            skills=list(jd.skills),
        )
        for jd in jds
    ]


def find_best_match(position_matches: Sequence[PositionMatch]) -> PositionMatch:
    """Highest percentage wins; the earliest job description wins a tie."""
    if not position_matches:
        return NO_MATCH
    best = position_matches[0]
    for current in position_matches[1:]:
        if current.match_percentage > best.match_percentage:
            best = current
    return best


def build_candidate(resume: ParsedResume, jds: Sequence[ParsedDocument], file_name: Optional[str] = None) -> Candidate:
    position_matches = find_position_matches(resume.skills, jds)
    best = find_best_match(position_matches)
    return Candidate(
        name=resume.name,
        email=resume.email,
        phone=resume.phone,
        skills=list(resume.skills),
        experience=resume.experience or "",
        education=resume.education,
        match_percentage=best.match_percentage,
        file_name=file_name if file_name is not None else resume.file_name,
        position_matches=position_matches,
        best_matching_position=best.title if position_matches else None,
    )


def skill_status(match_percentage: int, thresholds: ScoringThresholds = None) -> str:
    thresholds = thresholds or ScoringThresholds()
    if match_percentage <= thresholds.reject_max:
        return SKILL_REJECT
    if match_percentage <= thresholds.hold_max:
        return SKILL_HOLD
    return SKILL_SELECT


def parse_years(value: Optional[str]) -> int:
    """Leading integer of a free-form experience string; 0 when there is none."""
    m = _LEADING_INT_RE.match(value or "")
    return int(m.group(1)) if m else 0


def experience_status(candidate_experience: Optional[str], jd_experience: Optional[str],
                      thresholds: ScoringThresholds = None) -> str:
    thresholds = thresholds or ScoringThresholds()
    candidate_years = parse_years(candidate_experience)
    jd_years = parse_years(jd_experience)

    if candidate_years >= jd_years:
        return EXPERIENCE_QUALIFIED
    if candidate_years >= jd_years - thresholds.experience_grace_years:
        return EXPERIENCE_CONSIDER
    return EXPERIENCE_NOT_QUALIFIED
