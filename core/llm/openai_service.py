"""
OpenAI Scoring Oracle - resume scoring through an OpenAI-compatible API.

The model returns a structured analysis via JSON Schema mode. Transient API
errors are retried with tenacity; anything else propagates so the engine can
record the resume as skipped.
"""
from typing import Dict, Any, Optional
import json
import logging
import re

import openai
from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity import RetryCallState
from core.llm.interfaces import ScoringOracle
from core.llm.schema_models import SCREENING_ANALYSIS_SCHEMA
from core.llm.system_prompts import SCREENING_SYSTEM_PROMPT, build_screening_user_message
from core.screening.errors import ScoringError
from core.screening.models import JobRequirements, OracleAnalysis

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
)

# Resumes longer than this are truncated before being sent to the model
MAX_RESUME_CHARS = 20000


# ---------------------------------------------------------------------------
# Retry helpers
# ---------------------------------------------------------------------------

def _log_retry(retry_state: RetryCallState) -> None:
    """Log a warning before each retry sleep."""
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    if isinstance(exc, openai.RateLimitError):
        logger.warning(
            "Rate limit hit (attempt %s). Waiting %.1fs before retry. Details: %s",
            retry_state.attempt_number, wait, exc,
        )
    else:
        logger.warning(
            "Transient API error (attempt %s). Waiting %.1fs before retry. Details: %s",
            retry_state.attempt_number, wait, exc,
        )


def _parse_reset_duration(value: str) -> float:
    """Parse a reset-timer header value like '1s', '500ms', '1m30s' into seconds."""
    total = 0.0
    for amount, unit in re.findall(r"([\d.]+)(ms|s|m|h)", value):
        a = float(amount)
        if unit == "ms":
            total += a / 1000
        elif unit == "s":
            total += a
        elif unit == "m":
            total += a * 60
        else:
            total += a * 3600
    return total


def _wait_from_rate_limit_headers(exc: openai.RateLimitError) -> float:
    """Longest wait declared by retry-after or the x-ratelimit-reset-* headers, else 0."""
    try:
        headers = exc.response.headers
    except AttributeError:
        return 0.0

    candidates = []
    retry_after = headers.get("retry-after", "")
    if retry_after:
        try:
            candidates.append(float(retry_after))
        except ValueError:
            pass

    for header in ("x-ratelimit-reset-requests", "x-ratelimit-reset-tokens"):
        parsed = _parse_reset_duration(headers.get(header, ""))
        if parsed > 0:
            candidates.append(parsed)

    return max(candidates) if candidates else 0.0


def _wait_respecting_retry_after(retry_state: RetryCallState) -> float:
    exc = retry_state.outcome.exception()
    if isinstance(exc, openai.RateLimitError):
        wait = _wait_from_rate_limit_headers(exc)
        if wait > 0:
            return min(wait, 120)

    exp = wait_exponential(multiplier=1, min=2, max=60)
    return exp(retry_state)


def _llm_retry(attempts: int = 5, **kwargs):
    """Return a tenacity @retry decorator for LLM API calls."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        wait=_wait_respecting_retry_after,
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )


def _string_list(value: Any) -> list:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v is not None and str(v).strip()]


def parse_analysis(data: Dict[str, Any]) -> OracleAnalysis:
    """Turn the model's JSON object into a validated OracleAnalysis."""
    if "match_percentage" not in data:
        raise ScoringError("Model response is missing match_percentage")
    try:
        return OracleAnalysis(
            match_percentage=data["match_percentage"],
            matched_skills=_string_list(data.get("matched_skills")),
            missing_skills=_string_list(data.get("missing_skills")),
            strengths=_string_list(data.get("strengths")),
            gaps=_string_list(data.get("gaps")),
            recommendations=_string_list(data.get("recommendations")),
        ).validate()
    except ValueError as e:
        raise ScoringError(f"Invalid model analysis: {e}") from e


class OpenAIScoringOracle(ScoringOracle):
    """
    LLM-backed scoring oracle.

    Works against OpenAI or any compatible endpoint (Ollama, vLLM) via base_url.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.0,
        timeout_seconds: float = 60.0,
        client: Optional[OpenAI] = None,
    ):
        if client is None:
            client_kwargs = {"timeout": timeout_seconds}
            if api_key:
                client_kwargs['api_key'] = api_key
            if base_url:
                client_kwargs['base_url'] = base_url
            client = OpenAI(**client_kwargs)

        self.client = client
        self.model = model
        self.temperature = temperature

    def score(self, resume_text: str, requirements: JobRequirements) -> OracleAnalysis:
        if not resume_text or not resume_text.strip():
            raise ScoringError("Resume text is empty")

        data = self._request_analysis(resume_text[:MAX_RESUME_CHARS], requirements)
        analysis = parse_analysis(data)
        logger.debug(
            f"Model {self.model} scored resume {analysis.match_percentage} for job {requirements.job_post_id}"
        )
        return analysis

    @_llm_retry()
    def _request_analysis(self, resume_text: str, requirements: JobRequirements) -> Dict[str, Any]:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SCREENING_SYSTEM_PROMPT},
                {"role": "user", "content": build_screening_user_message(resume_text, requirements)},
            ],
            temperature=self.temperature,
            response_format={
                "type": "json_schema",
                "json_schema": SCREENING_ANALYSIS_SCHEMA,
            },
        )

        try:
            content = response.choices[0].message.content
            return json.loads(content)
        except (json.JSONDecodeError, IndexError, AttributeError, TypeError) as e:
            logger.error(f"Failed to parse screening response: {e}")
            raise ScoringError(f"Unparseable model response: {e}") from e
