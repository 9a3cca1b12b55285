import io
import mimetypes
import re

from pdfminer.high_level import extract_text as pdf_extract
from docx import Document

from app.models.models import UploadedDocument
from app.utils.exceptions import ExtractionError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_TYPES = (PDF_TYPE, DOCX_TYPE)

# pdfminer separates pages with form feeds
_PAGE_BREAK_RE = re.compile(r"\f+")


def media_type_of(doc: UploadedDocument) -> str:
    """Declared media type, or a guess from the file extension when none was sent."""
    content_type = (doc.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type != "application/octet-stream":
        return content_type
    guessed, _ = mimetypes.guess_type(doc.file_name)
    if guessed:
        return guessed
    if doc.file_name.lower().endswith(".docx"):
        return DOCX_TYPE
    return content_type


def read_pdf(data: bytes) -> str:
    try:
        text = pdf_extract(io.BytesIO(data))
    except Exception as e:
        logger.warning(f"pdfminer failed ({e}); falling back to unstructured")
        # fallback to unstructured
        from unstructured.partition.auto import partition
        elems = partition(file=io.BytesIO(data), content_type=PDF_TYPE)
        return "\n".join([e.text for e in elems if hasattr(e, "text") and e.text])
    pages = [p.strip("\n") for p in _PAGE_BREAK_RE.split(text)]
    return "\n".join(p for p in pages if p.strip())


def read_docx(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    return "\n".join([p.text for p in doc.paragraphs])


def extract_text(doc: UploadedDocument) -> str:
    """
    Turn one uploaded file into plain text.

    PDF pages are joined in order, DOCX paragraphs are returned raw. Any other
    media type yields an empty string. Decoding failures of a supported type
    raise ExtractionError carrying the file name.
    """
    media_type = media_type_of(doc)
    if media_type not in SUPPORTED_TYPES:
        logger.info(f"Unsupported media type '{media_type}' for {doc.file_name}; no text extracted")
        return ""

    try:
        if media_type == PDF_TYPE:
            return read_pdf(doc.data)
        return read_docx(doc.data)
    except Exception as e:
        raise ExtractionError(
            f"Failed to extract text from {doc.file_name}",
            file_name=doc.file_name,
            content_type=media_type,
            cause=e,
        ) from e
