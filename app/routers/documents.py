from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from app.models.models import DocumentType, UploadedDocument
from app.models.schemas import BatchParseResponse
from app.models.settings import Settings
from app.services.batch import process_batch
from app.services.document_parser import is_valid_job_description
from app.services.field_guesser import FieldGuesser, OllamaFieldGuesser
from app.utils.exceptions import ValidationError
from app.utils.logging_config import get_logger, log_api_call
from app.utils.utils import get_settings

router = APIRouter(prefix="/documents", tags=["documents"])
logger = get_logger(__name__)


def get_field_guesser(settings: Settings = Depends(get_settings)) -> FieldGuesser:
    return OllamaFieldGuesser(settings.llm_settings)


async def read_uploads(files: List[UploadFile]) -> List[UploadedDocument]:
    return [
        UploadedDocument(
            file_name=f.filename or "upload",
            content_type=f.content_type or "",
            data=await f.read(),
        )
        for f in files
    ]


@router.post("/{document_type}", response_model=BatchParseResponse)
@log_api_call("parse_documents")
async def parse_documents(
    document_type: DocumentType,
    files: List[UploadFile] = File(...),
    guesser: FieldGuesser = Depends(get_field_guesser),
    settings: Settings = Depends(get_settings),
):
    """Parse a batch of resumes or job descriptions"""
    limit = settings.processing_settings.max_upload_files
    if len(files) > limit:
        raise ValidationError(
            f"Maximum {limit} files can be processed at once. Please upload fewer files.",
            field="files", value=len(files)
        )

    uploads = await read_uploads(files)
    documents = await process_batch(
        uploads,
        document_type,
        guesser,
        on_progress=lambda p: logger.debug(f"{document_type.value} batch progress: {p:.0f}%"),
        processing=settings.processing_settings,
    )

    if document_type == DocumentType.JD:
        documents = [d for d in documents if is_valid_job_description(d)]

    attempted = len(uploads)
    succeeded = len(documents)
    failed = attempted - succeeded
    message = f"{succeeded} of {attempted} {document_type.value} file(s) parsed successfully"
    if failed:
        message += f". {failed} file(s) failed."
        logger.warning(message)

    return BatchParseResponse(
        document_type=document_type,
        attempted=attempted,
        succeeded=succeeded,
        failed=failed,
        message=message,
        documents=documents,
    )
