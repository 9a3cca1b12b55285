"""
Parses many files in fixed-size chunks, isolating per-file failures.
"""
import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from app.models.models import DocumentType, ParsedDocument, ParsedResume, UploadedDocument
from app.models.settings import ProcessingSettings
from app.services.document_parser import parse_document
from app.services.field_guesser import FieldGuesser
from app.utils.exceptions import ValidationError
from app.utils.logging_config import PerformanceMonitor, get_logger
from app.utils.utils import get_settings

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]
Sleeper = Callable[[float], Awaitable[Any]]


def chunked(items: Sequence, size: int) -> List[Sequence]:
    return [items[i:i + size] for i in range(0, len(items), size)]


async def _settle_chunk(
    chunk: Sequence[UploadedDocument],
    document_type: DocumentType,
    guesser: FieldGuesser,
    processing: ProcessingSettings,
    sleep: Optional[Sleeper],
) -> List[Union[ParsedResume, ParsedDocument]]:
    outcomes = await asyncio.gather(
        *[parse_document(doc, document_type, guesser, processing, sleep=sleep) for doc in chunk],
        return_exceptions=True,
    )
    parsed = []
    for doc, outcome in zip(chunk, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Failed to parse {doc.file_name}: {outcome}")
        else:
            parsed.append(outcome)
    return parsed


async def process_batch(
    files: Sequence[UploadedDocument],
    document_type: DocumentType,
    guesser: FieldGuesser,
    on_progress: Optional[ProgressCallback] = None,
    processing: Optional[ProcessingSettings] = None,
    sleep: Optional[Sleeper] = None,
) -> List[Union[ParsedResume, ParsedDocument]]:
    """
    Parse ``files`` chunk by chunk and return only the successful records.

    All parses in a chunk run concurrently and the chunk waits for every one
    to settle; a failing file is logged and left out. Chunks run in input
    order with a pause between them. ``on_progress`` receives a percentage
    after each chunk, ending at 100.
    """
    if not files:
        raise ValidationError("No files to parse", field="files")

    processing = processing or get_settings().processing_settings
    sleep = sleep or asyncio.sleep
    total = len(files)
    chunks = chunked(list(files), processing.batch_size)
    results: List[Union[ParsedResume, ParsedDocument]] = []
    done = 0

    with PerformanceMonitor(f"process_batch[{document_type.value} x{total}]", logger, threshold_ms=60000):
        for index, chunk in enumerate(chunks):
            try:
                results.extend(await _settle_chunk(chunk, document_type, guesser, processing, sleep))
            except Exception as e:
                logger.error(f"Batch processing error in chunk {index + 1}/{len(chunks)}: {e}", exc_info=True)

            done += len(chunk)
            if on_progress:
                on_progress(min(done / total * 100, 100.0))
            logger.info(f"Chunk {index + 1}/{len(chunks)} settled; {len(results)}/{done} files parsed so far")

            if index < len(chunks) - 1:
                await sleep(processing.batch_delay)

    logger.info(f"{len(results)} of {total} {document_type.value} file(s) parsed successfully")
    return results
