from fastapi import APIRouter, Depends

from app.models.schemas import MatchRequest, MatchResponse
from app.models.settings import Settings
from app.services.matching import build_candidate
from app.utils.exceptions import ExceptionContext, ValidationError
from app.utils.logging_config import PerformanceMonitor, get_logger, log_api_call
from app.utils.utils import get_settings

router = APIRouter(prefix="/match", tags=["matching"])
logger = get_logger(__name__)


def check_limits(jd_count: int, resume_count: int, settings: Settings) -> None:
    processing = settings.processing_settings
    if jd_count > processing.max_jd_count:
        raise ValidationError(
            f"You can only upload a maximum of {processing.max_jd_count} job descriptions.",
            field="job_descriptions", value=jd_count
        )
    if resume_count > processing.max_resume_count:
        raise ValidationError(
            f"You can only upload a maximum of {processing.max_resume_count} resumes.",
            field="resumes", value=resume_count
        )


@router.post("", response_model=MatchResponse)
@log_api_call("match_candidates")
async def match_candidates(payload: MatchRequest, settings: Settings = Depends(get_settings)):
    """Score every resume against every job description"""
    check_limits(len(payload.job_descriptions), len(payload.resumes), settings)

    with PerformanceMonitor("match_candidates", logger):
        with ExceptionContext("match_candidates", logger,
                              jd_count=len(payload.job_descriptions), resume_count=len(payload.resumes)):
            candidates = [build_candidate(resume, payload.job_descriptions) for resume in payload.resumes]

    logger.info(f"Matched {len(candidates)} candidate(s) against {len(payload.job_descriptions)} job description(s)")
    return MatchResponse(candidates=candidates)
