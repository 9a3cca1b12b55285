from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.models.schemas import ReportRequest, ReportResponse
from app.models.settings import Settings
from app.routers.match import check_limits
from app.services.reporting import build_report, report_to_csv
from app.utils.exceptions import ExceptionContext
from app.utils.logging_config import get_logger, log_api_call
from app.utils.utils import get_settings

router = APIRouter(prefix="/reports", tags=["reports"])
logger = get_logger(__name__)


def _rows(payload: ReportRequest, settings: Settings):
    check_limits(len(payload.job_descriptions), len(payload.candidates), settings)
    with ExceptionContext("build_report", logger, jd_count=len(payload.job_descriptions)):
        return build_report(payload.job_descriptions, payload.candidates, settings.scoring_thresholds)


@router.post("", response_model=ReportResponse)
@log_api_call("build_report")
async def create_report(payload: ReportRequest, settings: Settings = Depends(get_settings)):
    """Final report grouped by job description"""
    rows = _rows(payload, settings)
    logger.info(f"Report generated with {len(rows)} row(s)")
    return ReportResponse(rows=rows)


@router.post("/csv")
@log_api_call("export_report")
async def export_report(payload: ReportRequest, settings: Settings = Depends(get_settings)):
    """Same report as a CSV download"""
    rows = _rows(payload, settings)
    filename = f"parsed_report_{datetime.now().strftime('%Y-%m-%d_%H-%M')}.csv"
    return Response(
        content=report_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
