from unittest.mock import MagicMock, patch

import pytest
import requests

from app.models.models import DocumentType
from app.models.settings import LLMSettings
from app.services.field_guesser import OllamaFieldGuesser, build_prompt, validate_guess
from app.utils.exceptions import ExternalCallError, RateLimitError
from app.utils.utils import ollama_generate, safe_json

LLM = LLMSettings(rate_limit_attempts=3, rate_limit_base_delay=0.0)


@pytest.fixture
def guesser():
    return OllamaFieldGuesser(LLM)


class TestSafeJson:
    def test_fenced_reply(self):
        assert safe_json('```json\n{"title": "Dev"}\n```') == {"title": "Dev"}

    def test_chatter_around_object(self):
        assert safe_json('Here you go: {"skills": ["Go"]} Thanks!') == {"skills": ["Go"]}

    def test_not_json(self):
        assert safe_json("no json here") is None
        assert safe_json("{broken", fallback={}) == {}
        assert safe_json("") is None


class TestPrompt:
    def test_resume_prompt(self):
        prompt = build_prompt("Jane Doe, Python developer", DocumentType.RESUME)
        assert "Jane Doe, Python developer" in prompt
        assert '"education"' in prompt

    def test_jd_prompt(self):
        prompt = build_prompt("Hiring a Go engineer", DocumentType.JD)
        assert "Hiring a Go engineer" in prompt
        assert '"responsibilities"' in prompt


class TestValidateGuess:
    def test_valid(self):
        data = {"name": "Jane", "skills": []}
        assert validate_guess(data, DocumentType.RESUME) is data

    @pytest.mark.parametrize("data,document_type", [
        (None, DocumentType.RESUME),
        ({"skills": ["Go"]}, DocumentType.RESUME),
        ({"name": "Jane", "skills": "Go"}, DocumentType.RESUME),
        ({"name": "Jane", "skills": ["Go"]}, DocumentType.JD),
    ])
    def test_invalid(self, data, document_type):
        with pytest.raises(ExternalCallError):
            validate_guess(data, document_type)


class TestOllamaFieldGuesser:
    """Test cases for the LLM-backed field guesser"""

    @patch("app.services.field_guesser.ollama_generate")
    def test_guess_resume(self, mock_generate, guesser):
        mock_generate.return_value = '```json\n{"name": "Jane Doe", "skills": ["Python"]}\n```'

        data = guesser.guess_fields_sync("resume text", DocumentType.RESUME)

        assert data == {"name": "Jane Doe", "skills": ["Python"]}
        assert "resume text" in mock_generate.call_args[0][0]

    @patch("app.services.field_guesser.ollama_generate")
    def test_invalid_structure(self, mock_generate, guesser):
        mock_generate.return_value = '{"skills": ["Python"]}'

        with pytest.raises(ExternalCallError, match="Invalid job description data structure"):
            guesser.guess_fields_sync("jd text", DocumentType.JD)

    @patch("app.services.field_guesser.ollama_generate")
    def test_unparseable_reply(self, mock_generate, guesser):
        mock_generate.return_value = "I could not read this document."

        with pytest.raises(ExternalCallError):
            guesser.guess_fields_sync("jd text", DocumentType.JD)

    @patch("app.utils.exceptions.time.sleep")
    @patch("app.services.field_guesser.ollama_generate")
    def test_rate_limit_retried(self, mock_generate, mock_sleep, guesser):
        mock_generate.side_effect = [RateLimitError("quota exceeded"), '{"title": "Dev", "skills": ["Go"]}']

        data = guesser.guess_fields_sync("jd text", DocumentType.JD)

        assert data["title"] == "Dev"
        assert mock_generate.call_count == 2
        assert mock_sleep.call_count == 1

    @patch("app.utils.exceptions.time.sleep")
    @patch("app.services.field_guesser.ollama_generate")
    def test_rate_limit_exhausted(self, mock_generate, mock_sleep, guesser):
        mock_generate.side_effect = RateLimitError("429")

        with pytest.raises(RateLimitError):
            guesser.guess_fields_sync("jd text", DocumentType.JD)

        assert mock_generate.call_count == 3

    @patch("app.services.field_guesser.ollama_generate")
    def test_other_errors_not_retried(self, mock_generate, guesser):
        mock_generate.side_effect = ExternalCallError("server error")

        with pytest.raises(ExternalCallError):
            guesser.guess_fields_sync("jd text", DocumentType.JD)

        assert mock_generate.call_count == 1

    @pytest.mark.asyncio
    @patch("app.services.field_guesser.ollama_generate")
    async def test_async_guess(self, mock_generate, guesser):
        mock_generate.return_value = '{"title": "Dev", "skills": ["Go"]}'

        data = await guesser.guess_fields("jd text", DocumentType.JD)

        assert data == {"title": "Dev", "skills": ["Go"]}


class TestOllamaGenerate:
    """Test cases for the raw Ollama call"""

    @patch("app.utils.utils.requests.post")
    def test_success(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        mock_post.return_value.json.return_value = {"response": '{"title": "Dev"}'}

        assert ollama_generate("prompt", LLM) == '{"title": "Dev"}'
        body = mock_post.call_args.kwargs["json"]
        assert body["model"] == "llama3"
        assert body["stream"] is False
        assert mock_post.call_args[0][0] == "http://localhost:11434/api/generate"

    @patch("app.utils.utils.requests.post")
    def test_status_429(self, mock_post):
        mock_post.return_value = MagicMock(status_code=429)

        with pytest.raises(RateLimitError):
            ollama_generate("prompt", LLM)

    @patch("app.utils.utils.requests.post")
    def test_quota_message(self, mock_post):
        resp = MagicMock(status_code=503, text="model quota exceeded")
        resp.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        mock_post.return_value = resp

        with pytest.raises(RateLimitError):
            ollama_generate("prompt", LLM)

    @patch("app.utils.utils.requests.post")
    def test_server_error(self, mock_post):
        resp = MagicMock(status_code=500, text="internal error")
        resp.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        mock_post.return_value = resp

        with pytest.raises(ExternalCallError) as exc_info:
            ollama_generate("prompt", LLM)

        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.status_code == 500

    @patch("app.utils.utils.requests.post")
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ExternalCallError):
            ollama_generate("prompt", LLM)
