"""
Turns one uploaded file into a ParsedResume or ParsedDocument.

The LLM field guess is merged with locally extracted contact details; the
local heuristics win for name, email and phone whenever they found anything.
"""
import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Union

from app.helpers.parsing import SUPPORTED_TYPES, extract_text, media_type_of
from app.models.models import DocumentType, ParsedDocument, ParsedResume, UploadedDocument
from app.models.settings import ProcessingSettings
from app.services.contact_extractor import extract_contact_info
from app.services.field_guesser import FieldGuess, FieldGuesser
from app.utils.exceptions import ExternalCallError, ExtractionError, retry_with_backoff
from app.utils.logging_config import get_logger
from app.utils.utils import get_settings

logger = get_logger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]


def as_list(value: Any) -> List[str]:
    """Lists pass through, a lone scalar becomes a one-element list, nothing becomes []."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return [str(value)] if value else []


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def merge_fields(
    text: str,
    guess: FieldGuess,
    document_type: DocumentType,
    file_name: str = "",
) -> Union[ParsedResume, ParsedDocument]:
    """Build the typed record from the LLM guess and the raw document text."""
    if not isinstance(guess, Mapping):
        guess = {}
    title = as_text(guess.get("title"))
    skills = as_list(guess.get("skills"))
    experience = as_text(guess.get("experience"))

    if document_type == DocumentType.RESUME:
        contact = extract_contact_info(text)
        return ParsedResume(
            title=title,
            name=contact.name or as_text(guess.get("name")),
            email=contact.email or as_text(guess.get("email")),
            phone=contact.phone or as_text(guess.get("phone")),
            skills=skills,
            experience=experience,
            education=as_text(guess.get("education")),
            responsibilities=[],
            file_name=file_name,
        )

    return ParsedDocument(
        title=title,
        skills=skills,
        experience=experience,
        responsibilities=as_list(guess.get("responsibilities")),
        file_name=file_name,
    )


async def parse_document(
    doc: UploadedDocument,
    document_type: DocumentType,
    guesser: FieldGuesser,
    processing: Optional[ProcessingSettings] = None,
    sleep: Optional[Sleeper] = None,
) -> Union[ParsedResume, ParsedDocument]:
    """
    Parse a single file.

    Raises ExtractionError for unsupported or undecodable files. The field
    guess is retried with exponential backoff; once the attempts are spent
    its last error propagates to the caller.
    """
    processing = processing or get_settings().processing_settings

    media_type = media_type_of(doc)
    if media_type not in SUPPORTED_TYPES:
        raise ExtractionError(
            f"Unsupported file type for {doc.file_name}",
            file_name=doc.file_name,
            content_type=media_type or "unknown",
        )

    loop = asyncio.get_running_loop()
    text = await loop.run_in_executor(None, extract_text, doc)
    if not text.strip():
        logger.warning(f"No text extracted from {doc.file_name}")

    async def guess_once() -> FieldGuess:
        guess = await guesser.guess_fields(text, document_type)
        if not isinstance(guess, Mapping):
            raise ExternalCallError(
                f"Field guess for {doc.file_name} is not an object",
                details={"type": type(guess).__name__},
            )
        return guess

    guess = await retry_with_backoff(
        guess_once,
        max_attempts=processing.retry_attempts,
        base_delay=processing.retry_base_delay,
        logger=logger,
        sleep=sleep,
    )

    record = merge_fields(text, guess, document_type, doc.file_name)
    logger.info(f"Parsed {document_type.value} {doc.file_name}")
    return record


def is_valid_job_description(doc: ParsedDocument) -> bool:
    """A usable job description has a title and at least one skill."""
    return bool(doc.title.strip()) and len(doc.skills) > 0
