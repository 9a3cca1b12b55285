import pytest
from pydantic import ValidationError as PydanticValidationError

from app.models.models import Candidate, ParsedDocument, ParsedResume, PositionMatch
from app.models.settings import ScoringThresholds
from app.services.matching import (
    NO_MATCH,
    build_candidate,
    calculate_match_percentage,
    experience_status,
    find_best_match,
    parse_years,
    skill_status,
    skills_overlap,
)


def position(title, pct):
    return PositionMatch(title=title, match_percentage=pct, experience="", skills=[])


class TestSkillMatching:
    """Test cases for skill overlap and percentages"""

    def test_overlap_is_bidirectional_and_case_insensitive(self):
        assert skills_overlap("React", "react.js")
        assert skills_overlap("React.js", "REACT")
        assert not skills_overlap("Go", "Python")

    def test_two_of_three(self):
        pct = calculate_match_percentage(["python", "docker", "Go"], ["Python", "AWS", "Docker"])
        assert pct == 67
        assert skill_status(pct) == "Select"

    def test_no_required_skills(self):
        assert calculate_match_percentage(["Python"], []) == 0

    def test_no_candidate_skills(self):
        assert calculate_match_percentage([], ["Python"]) == 0

    def test_blank_candidate_skills_ignored(self):
        assert calculate_match_percentage(["", "  "], ["Python"]) == 0

    def test_clamped_to_100(self):
        assert calculate_match_percentage(["Java", "JavaScript"], ["JavaScript"]) == 100

    def test_half_rounds_up(self):
        required = ["Python", "Go", "Rust", "Java", "Kotlin", "Scala", "Ruby", "Perl"]
        assert calculate_match_percentage(["Python"], required) == 13


class TestBestMatch:
    def test_highest_wins(self):
        assert find_best_match([position("A", 10), position("B", 70), position("C", 20)]).title == "B"

    def test_tie_goes_to_earliest(self):
        assert find_best_match([position("A", 50), position("B", 50), position("C", 40)]).title == "A"
        assert find_best_match([position("A", 10), position("B", 70), position("C", 70)]).title == "B"

    def test_empty(self):
        best = find_best_match([])
        assert best is NO_MATCH
        assert best.title == ""
        assert best.match_percentage == 0


class TestBuildCandidate:
    """Test cases for scoring a resume against job descriptions"""

    def setup_method(self):
        self.resume = ParsedResume(name="Jane Doe", email="jane@x.com", skills=["Python", "Docker"],
                                   experience="4", file_name="jane.pdf")
        self.jds = [
            ParsedDocument(title="Data Engineer", skills=["Python", "Spark"], experience="3"),
            ParsedDocument(title="Platform Engineer", skills=["Docker", "Python"], experience="5"),
        ]

    def test_best_position(self):
        candidate = build_candidate(self.resume, self.jds)

        assert [m.match_percentage for m in candidate.position_matches] == [50, 100]
        assert candidate.best_matching_position == "Platform Engineer"
        assert candidate.match_percentage == 100
        assert candidate.file_name == "jane.pdf"
        assert candidate.position_matches[1].experience == "5"

    def test_file_name_override(self):
        assert build_candidate(self.resume, self.jds, file_name="other.docx").file_name == "other.docx"

    def test_no_job_descriptions(self):
        candidate = build_candidate(self.resume, [])

        assert candidate.position_matches == []
        assert candidate.best_matching_position is None
        assert candidate.match_percentage == 0

    def test_best_position_must_be_highest(self):
        with pytest.raises(PydanticValidationError):
            Candidate(position_matches=[position("A", 20), position("B", 80)],
                      best_matching_position="A", match_percentage=20)

    def test_best_position_must_exist(self):
        with pytest.raises(PydanticValidationError):
            Candidate(position_matches=[position("A", 20)], best_matching_position="Z")


class TestStatus:
    """Test cases for status classification"""

    @pytest.mark.parametrize("pct,status", [
        (0, "Reject"), (40, "Reject"), (41, "Hold"), (60, "Hold"), (61, "Select"), (100, "Select"),
    ])
    def test_skill_status(self, pct, status):
        assert skill_status(pct) == status

    def test_custom_thresholds(self):
        thresholds = ScoringThresholds(reject_max=20, hold_max=50)
        assert skill_status(30, thresholds) == "Hold"
        assert skill_status(51, thresholds) == "Select"

    def test_invalid_thresholds(self):
        with pytest.raises(PydanticValidationError):
            ScoringThresholds(reject_max=60, hold_max=40)

    @pytest.mark.parametrize("candidate,jd,status", [
        ("5", "5", "Qualified"),
        ("5+ years", "3", "Qualified"),
        ("3", "5", "Consider"),
        ("abc", "2", "Consider"),
        ("1", "5", "Not Qualified"),
        ("", "", "Qualified"),
        (None, None, "Qualified"),
    ])
    def test_experience_status(self, candidate, jd, status):
        assert experience_status(candidate, jd) == status

    def test_parse_years(self):
        assert parse_years("3.5 years") == 3
        assert parse_years(" 7") == 7
        assert parse_years("seven") == 0
        assert parse_years(None) == 0
