"""
First-pass structured extraction of resume / job description fields by an LLM.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict

from app.helpers.prompts import JD_PROMPT, RESUME_PROMPT
from app.models.models import DocumentType
from app.models.settings import LLMSettings
from app.utils.exceptions import ExternalCallError, RateLimitError, retry_with_logging
from app.utils.logging_config import get_logger
from app.utils.utils import get_settings, ollama_generate, safe_json

logger = get_logger(__name__)

FieldGuess = Dict[str, Any]


class FieldGuesser(ABC):
    """Anything that can guess structured fields from document text."""

    @abstractmethod
    async def guess_fields(self, text: str, document_type: DocumentType) -> FieldGuess:
        ...


def build_prompt(text: str, document_type: DocumentType) -> str:
    template = RESUME_PROMPT if document_type == DocumentType.RESUME else JD_PROMPT
    return template.format(doc=text)


def validate_guess(data: Any, document_type: DocumentType) -> FieldGuess:
    """Reject replies that lack the fields every document of this type must have."""
    if not isinstance(data, dict):
        raise ExternalCallError("LLM reply did not contain a JSON object", service_name="ollama")
    key = "name" if document_type == DocumentType.RESUME else "title"
    if not data.get(key) or not isinstance(data.get("skills"), list):
        label = "resume" if document_type == DocumentType.RESUME else "job description"
        raise ExternalCallError(f"Invalid {label} data structure", service_name="ollama",
                                details={"keys": sorted(data.keys())})
    return data


class OllamaFieldGuesser(FieldGuesser):
    """Field guesser backed by an Ollama completion endpoint."""

    def __init__(self, llm: LLMSettings = None):
        self.llm = llm or get_settings().llm_settings
        self._generate_with_retry = retry_with_logging(
            max_attempts=self.llm.rate_limit_attempts,
            backoff_factor=self.llm.rate_limit_base_delay,
            exceptions=(RateLimitError,),
            logger=logger,
        )(self._generate)

    def _generate(self, prompt: str) -> str:
        return ollama_generate(prompt, self.llm)

    def guess_fields_sync(self, text: str, document_type: DocumentType) -> FieldGuess:
        logger.info(f"Processing {document_type.value} document ({len(text)} chars)")
        reply = self._generate_with_retry(build_prompt(text, document_type))
        logger.debug(f"Raw LLM response: {reply[:500]}")
        data = validate_guess(safe_json(reply), document_type)
        logger.debug(f"Parsed {document_type.value} fields: {sorted(data.keys())}")
        return data

    async def guess_fields(self, text: str, document_type: DocumentType) -> FieldGuess:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.guess_fields_sync, text, document_type)
