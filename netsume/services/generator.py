import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.api_core import retry as google_retry
from pydantic import ValidationError

from netsume.models.skills import Skill, SupportLevel
from netsume.services.errors import (
    FAILED_PRECONDITION,
    INTERNAL,
    INVALID_ARGUMENT,
    FunctionsError,
    RepairError,
)
from netsume.services.prompts import (
    EDUCATION_PROMPT,
    EMPLOYMENT_HISTORY_PROMPT,
    SKILLS_PROMPT,
    SUMMARY_PROMPT,
    VALIDATION_PROMPT,
    employment_structure,
)
from netsume.services.repair import extract_json_array, strip_code_fences

logger = logging.getLogger("uvicorn.error")

SUPPORTED_MIME_TYPES = frozenset({
    "application/pdf",
    "text/plain",
    "image/png",
    "image/jpeg",
    "image/webp",
})

EXTRACTION_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]

# Checked in this order: "Not Supported" also contains "Supported".
VERDICTS = (
    SupportLevel.STRONGLY_SUPPORTED,
    SupportLevel.NOT_SUPPORTED,
    SupportLevel.SUPPORTED,
)

ERROR_BODY_LIMIT = 500


def _preview(text: str, limit: int = 200) -> str:
    return text[:limit].replace("\n", " ")


def render_prompt(template: str, **values: Any) -> str:
    prompt = template
    for key, value in values.items():
        prompt = prompt.replace("${" + key + "}", str(value))
    return prompt


def decode_document(file_data: Optional[str], mime_type: Optional[str], max_bytes: int) -> bytes:
    """Validate a base64 document payload from a callable request."""
    if not file_data or not mime_type:
        raise FunctionsError(
            INVALID_ARGUMENT,
            'The function must be called with "fileData" and "mimeType".',
        )
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise FunctionsError(INVALID_ARGUMENT, f"Unsupported mimeType: {mime_type}")
    try:
        document = base64.b64decode(file_data, validate=True)
    except (binascii.Error, ValueError):
        raise FunctionsError(INVALID_ARGUMENT, '"fileData" must be base64 encoded.')
    check_document(document, mime_type, max_bytes)
    return document


def check_document(document: bytes, mime_type: Optional[str], max_bytes: int) -> None:
    if not document:
        raise FunctionsError(INVALID_ARGUMENT, "The document is empty.")
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise FunctionsError(INVALID_ARGUMENT, f"Unsupported mimeType: {mime_type}")
    if len(document) > max_bytes:
        raise FunctionsError(INVALID_ARGUMENT, f"The document exceeds {max_bytes} bytes.")


def parse_array(json_string: str, label: str) -> list:
    """Parse repaired model output; failure here is final."""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError:
        logger.error("Repaired %s response is not valid JSON: %s", label, _preview(json_string))
        raise FunctionsError(INTERNAL, f"AI returned {label} data that is not valid JSON.")
    if not isinstance(data, list):
        raise FunctionsError(INTERNAL, f"AI returned {label} data in an invalid format. Expecting an array.")
    return data


def normalize_verdict(text: str) -> SupportLevel:
    cleaned = text.strip().lower()
    for level in VERDICTS:
        if level.value.lower() in cleaned:
            return level
    raise FunctionsError(INTERNAL, f"Unexpected validation verdict: {_preview(text, 100)}")


@dataclass
class GeminiResult:
    text: str
    finish_reason: str


class SkillsAIGenerator:

    def __init__(self, settings):
        self.settings = settings

    def _get_llm(self):
        if not self.settings.GEMINI_API_KEY:
            raise FunctionsError(FAILED_PRECONDITION, "The Gemini API key is not configured.")
        genai.configure(api_key=self.settings.GEMINI_API_KEY)
        return genai

    def _generation_config(self, response_mime_type: str) -> dict:
        return {
            "max_output_tokens": self.settings.GEMINI_MAX_OUTPUT_TOKENS,
            "temperature": self.settings.GEMINI_TEMPERATURE,
            "top_p": self.settings.GEMINI_TOP_P,
            "top_k": self.settings.GEMINI_TOP_K,
            "response_mime_type": response_mime_type,
        }

    def _request_options(self) -> dict:
        # Only transient failures (429, 500, 503) are retried, within the call timeout.
        return {
            "timeout": self.settings.GEMINI_TIMEOUT,
            "retry": google_retry.Retry(
                predicate=google_retry.if_transient_error,
                initial=self.settings.GEMINI_RETRY_INITIAL,
                maximum=self.settings.GEMINI_RETRY_MAXIMUM,
                multiplier=2.0,
                timeout=self.settings.GEMINI_TIMEOUT,
            ),
        }

    def call_gemini(
        self,
        prompt: str,
        document: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        safety_settings: Sequence[dict] = (),
        response_mime_type: str = "text/plain",
    ) -> GeminiResult:
        client = self._get_llm()
        model = client.GenerativeModel(self.settings.GEMINI_MODEL)

        contents = [prompt]
        if document and mime_type:
            contents.append({"mime_type": mime_type, "data": document})

        try:
            response = model.generate_content(
                contents,
                generation_config=self._generation_config(response_mime_type),
                safety_settings=list(safety_settings),
                request_options=self._request_options(),
            )
        except google_exceptions.GoogleAPICallError as e:
            logger.exception("Gemini API call failed")
            raise FunctionsError(
                INTERNAL,
                f"API call failed with status: {e.code}. Body: {str(e.message)[:ERROR_BODY_LIMIT]}",
            )
        except google_exceptions.RetryError as e:
            logger.exception("Gemini API call failed after retries")
            raise FunctionsError(INTERNAL, f"API call failed after retries: {e.cause}")
        except Exception as e:
            logger.exception("Error calling Gemini model")
            raise FunctionsError(INTERNAL, f"LLM generation failed: {e}")

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise FunctionsError(INTERNAL, "The model returned no candidates.")

        candidate = candidates[0]
        finish_reason = getattr(candidate.finish_reason, "name", str(candidate.finish_reason))
        parts = getattr(candidate.content, "parts", None) or []
        text = "".join(getattr(part, "text", "") for part in parts)
        if not text:
            raise FunctionsError(INTERNAL, f"The model returned an empty response (finish reason: {finish_reason}).")

        logger.info("Received LLM response (finish reason %s, first 200 chars): %s", finish_reason, _preview(text))
        return GeminiResult(text=text, finish_reason=finish_reason)

    def _repair(self, result: GeminiResult) -> str:
        try:
            return extract_json_array(result.text)
        except RepairError as e:
            logger.error("Could not repair model output (finish reason %s): %s", result.finish_reason, _preview(result.text))
            raise FunctionsError(INTERNAL, str(e))

    def extract_employment_history(self, document: bytes, mime_type: str) -> str:
        prompt = render_prompt(EMPLOYMENT_HISTORY_PROMPT, EmploymentFormat=employment_structure)
        result = self.call_gemini(prompt, document, mime_type, EXTRACTION_SAFETY_SETTINGS, "application/json")
        return self._repair(result)

    def extract_education(self, document: bytes, mime_type: str) -> str:
        result = self.call_gemini(EDUCATION_PROMPT, document, mime_type, EXTRACTION_SAFETY_SETTINGS, "application/json")
        return self._repair(result)

    def generate_skills(self, job_title: Optional[str]) -> str:
        if not job_title or not job_title.strip():
            raise FunctionsError(INVALID_ARGUMENT, "Missing jobTitle.")
        prompt = render_prompt(SKILLS_PROMPT, jobTitle=job_title.strip())
        result = self.call_gemini(prompt, response_mime_type="application/json")
        return self._repair(result)

    def validate_skill(self, skill: Any) -> SupportLevel:
        if not skill:
            raise FunctionsError(INVALID_ARGUMENT, "Missing skill.")
        try:
            checked = skill if isinstance(skill, Skill) else Skill.model_validate(skill)
        except ValidationError as e:
            raise FunctionsError(INVALID_ARGUMENT, f"Invalid skill: {e.errors()[0]['msg']}")

        prompt = render_prompt(
            VALIDATION_PROMPT,
            skillName=checked.name,
            rating=checked.rating,
            proof=checked.proof or "None",
            certifications=json.dumps([c.model_dump() for c in checked.certifications]),
        )
        result = self.call_gemini(prompt)
        return normalize_verdict(strip_code_fences(result.text))

    def generate_summary(self, all_proof_points: Any) -> str:
        if not isinstance(all_proof_points, str):
            raise FunctionsError(INVALID_ARGUMENT, "Missing proof points.")
        prompt = render_prompt(SUMMARY_PROMPT, allProofPoints=all_proof_points)
        result = self.call_gemini(prompt)
        return result.text.strip()
