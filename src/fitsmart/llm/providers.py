"""
Reasoning engine providers.

This module wraps the external generative engine behind one
request/response contract:

- EngineRequest: system instruction, text and inline-media parts,
  response format and output budget
- EngineResponse: the textual payload, which may be absent

Adapters:
- OpenAIEngine: AsyncOpenAI chat completions in JSON mode (text, image, pdf)
- GeminiEngine: google-genai async client (text, image, pdf, video)

Both share optional retry with exponential backoff, per-call timeouts,
SDK error translation into the application's LLMError hierarchy, and
request metrics.
"""

import asyncio
import base64
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..config import Settings, get_settings
from ..exceptions import (
    LLMError,
    LLMRateLimitError,
    LLMServiceUnavailableError,
    LLMTimeoutError,
    UnsupportedMediaError,
)


logger = logging.getLogger(__name__)


class ResponseFormat(str, Enum):
    """Response format requested from the engine."""
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class TextPart:
    """Plain text content."""
    text: str


@dataclass(frozen=True)
class MediaPart:
    """Inline binary content, base64 encoded."""
    media_type: str
    data: str


ContentPart = Union[TextPart, MediaPart]


@dataclass(frozen=True)
class EngineRequest:
    """A single stage request to the reasoning engine."""
    system_instruction: str
    content: Tuple[ContentPart, ...]
    response_format: ResponseFormat = ResponseFormat.JSON
    max_output_size: int = 4096


@dataclass(frozen=True)
class EngineResponse:
    """The engine's reply. ``text`` is None when no payload came back."""
    text: Optional[str]
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class StageConfig:
    """Opaque per-stage engine configuration."""
    model: str
    max_output_tokens: int
    timeout: Optional[float] = 60.0
    thinking_budget: Optional[int] = None


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = 0,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)


class EngineMetrics:
    """Track engine usage metrics."""

    def __init__(self) -> None:
        self.total_requests = 0
        self.successful_requests = 0
        self.failed_requests = 0
        self.retried_requests = 0
        self.total_tokens_input = 0
        self.total_tokens_output = 0
        self._request_times: list[float] = []

    def record_request(
        self,
        success: bool,
        retried: bool = False,
        input_tokens: int = 0,
        output_tokens: int = 0,
        duration_ms: Optional[float] = None,
    ) -> None:
        """Record a request."""
        self.total_requests += 1
        if success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1
        if retried:
            self.retried_requests += 1
        self.total_tokens_input += input_tokens
        self.total_tokens_output += output_tokens
        if duration_ms is not None:
            self._request_times.append(duration_ms)
            # Keep only last 100 request times
            if len(self._request_times) > 100:
                self._request_times = self._request_times[-100:]

    @property
    def avg_request_time_ms(self) -> float:
        """Average request time in milliseconds."""
        if not self._request_times:
            return 0.0
        return sum(self._request_times) / len(self._request_times)

    def to_dict(self) -> Dict[str, Any]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "retried_requests": self.retried_requests,
            "total_tokens_input": self.total_tokens_input,
            "total_tokens_output": self.total_tokens_output,
            "avg_request_time_ms": round(self.avg_request_time_ms, 2),
        }


@dataclass
class TranslatedError:
    """An SDK exception mapped onto the application hierarchy."""
    error: LLMError
    retryable: bool = False
    retry_after: Optional[float] = None


class ReasoningEngine(ABC):
    """
    Base class for reasoning engine adapters.

    Subclasses implement ``_send`` for a single attempt and
    ``_translate_error`` for their SDK's exceptions.
    """

    provider: str = "engine"

    def __init__(self, retry_config: Optional[RetryConfig] = None) -> None:
        self.retry_config = retry_config or RetryConfig()
        self.metrics = EngineMetrics()
        self._logger = logger

    @abstractmethod
    async def _send(self, request: EngineRequest, config: StageConfig) -> EngineResponse:
        """Perform one request attempt."""

    def _translate_error(self, exc: Exception) -> TranslatedError:
        """Map an SDK exception. Unknown exceptions are not retried."""
        return TranslatedError(error=LLMError(message=f"Unexpected LLM error: {exc}"))

    async def generate(self, request: EngineRequest, config: StageConfig) -> EngineResponse:
        """
        Run a request with the stage's timeout and the retry policy.

        Raises:
            LLMError: On unrecoverable failure (timeouts included)
        """
        retried = False

        for attempt in range(self.retry_config.max_retries + 1):
            start_time = time.time()
            try:
                response = await asyncio.wait_for(
                    self._send(request, config),
                    timeout=config.timeout,
                )
            except asyncio.TimeoutError:
                self.metrics.record_request(success=False, retried=retried)
                raise LLMTimeoutError(timeout=config.timeout)
            except LLMError:
                self.metrics.record_request(success=False, retried=retried)
                raise
            except Exception as e:
                translated = self._translate_error(e)
                if translated.retryable and attempt < self.retry_config.max_retries:
                    retried = True
                    delay = translated.retry_after or self.retry_config.get_delay(attempt)
                    self._logger.warning(
                        f"{self.provider} request failed ({translated.error.code.value}). "
                        f"Retry {attempt + 1}/{self.retry_config.max_retries} in {delay:.1f}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                self.metrics.record_request(success=False, retried=retried)
                self._logger.error(f"{self.provider} request failed: {e}")
                raise translated.error from e

            self.metrics.record_request(
                success=True,
                retried=retried,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
                duration_ms=(time.time() - start_time) * 1000,
            )
            return response

        # Loop always returns or raises
        raise LLMError(message="Operation failed after all retries")

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics."""
        return self.metrics.to_dict()


# ============================================================================
# OpenAI
# ============================================================================

class OpenAIEngine(ReasoningEngine):
    """Chat-completions adapter. Accepts text, images and PDFs."""

    provider = "openai"
    retryable_status_codes = {429, 500, 502, 503, 504}

    def __init__(self, api_key: str, retry_config: Optional[RetryConfig] = None, client: Any = None) -> None:
        super().__init__(retry_config)
        if client is None:
            from openai import AsyncOpenAI
            client = AsyncOpenAI(api_key=api_key)
        self.client = client

    def _to_content_part(self, part: ContentPart) -> Dict[str, Any]:
        if isinstance(part, TextPart):
            return {"type": "text", "text": part.text}
        data_url = f"data:{part.media_type};base64,{part.data}"
        if part.media_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}
        if part.media_type == "application/pdf":
            return {"type": "file", "file": {"filename": "routine.pdf", "file_data": data_url}}
        raise UnsupportedMediaError(media_type=part.media_type, provider=self.provider)

    async def _send(self, request: EngineRequest, config: StageConfig) -> EngineResponse:
        user_content = [self._to_content_part(part) for part in request.content]
        kwargs: Dict[str, Any] = {
            "model": config.model,
            "messages": [
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": user_content},
            ],
            "max_tokens": request.max_output_size,
        }
        if request.response_format == ResponseFormat.JSON:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**kwargs)
        text = response.choices[0].message.content if response.choices else None
        usage = getattr(response, "usage", None)
        return EngineResponse(
            text=text,
            model=config.model,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )

    def _translate_error(self, exc: Exception) -> TranslatedError:
        from openai import APIConnectionError, APIError, APITimeoutError, RateLimitError

        if isinstance(exc, RateLimitError):
            retry_after = getattr(exc, "retry_after", None)
            return TranslatedError(
                error=LLMRateLimitError(retry_after=int(retry_after) if retry_after else None),
                retryable=True,
                retry_after=retry_after,
            )
        if isinstance(exc, APITimeoutError):
            return TranslatedError(error=LLMTimeoutError(), retryable=True)
        if isinstance(exc, APIConnectionError):
            return TranslatedError(
                error=LLMServiceUnavailableError(message=f"Connection to LLM service failed: {exc}"),
                retryable=True,
            )
        if isinstance(exc, APIError):
            status = getattr(exc, "status_code", 500)
            if status in self.retryable_status_codes:
                return TranslatedError(
                    error=LLMServiceUnavailableError(
                        message=f"LLM API error: {exc}",
                        details={"status_code": status},
                    ),
                    retryable=True,
                )
            return TranslatedError(
                error=LLMError(message=f"LLM API error: {exc}", details={"status_code": status}),
            )
        return super()._translate_error(exc)


# ============================================================================
# Gemini
# ============================================================================

class GeminiEngine(ReasoningEngine):
    """google-genai adapter. Accepts text, images, PDFs and video."""

    provider = "gemini"
    retryable_status_codes = {429, 500, 502, 503, 504}

    def __init__(self, api_key: str, retry_config: Optional[RetryConfig] = None, client: Any = None) -> None:
        super().__init__(retry_config)
        if client is None:
            from google import genai
            client = genai.Client(api_key=api_key)
        self.client = client

    async def _send(self, request: EngineRequest, config: StageConfig) -> EngineResponse:
        from google.genai import types as genai_types

        parts = []
        for part in request.content:
            if isinstance(part, TextPart):
                parts.append(genai_types.Part.from_text(text=part.text))
            else:
                parts.append(
                    genai_types.Part.from_bytes(
                        data=base64.b64decode(part.data),
                        mime_type=part.media_type,
                    )
                )

        config_kwargs: Dict[str, Any] = {
            "system_instruction": request.system_instruction,
            "max_output_tokens": request.max_output_size,
        }
        if request.response_format == ResponseFormat.JSON:
            config_kwargs["response_mime_type"] = "application/json"
        if config.thinking_budget:
            config_kwargs["thinking_config"] = genai_types.ThinkingConfig(
                thinking_budget=config.thinking_budget,
            )

        response = await self.client.aio.models.generate_content(
            model=config.model,
            contents=parts,
            config=genai_types.GenerateContentConfig(**config_kwargs),
        )
        usage = getattr(response, "usage_metadata", None)
        return EngineResponse(
            text=response.text,
            model=config.model,
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )

    def _translate_error(self, exc: Exception) -> TranslatedError:
        from google.genai import errors as genai_errors

        if isinstance(exc, genai_errors.APIError):
            status = getattr(exc, "code", 500)
            if status == 429:
                return TranslatedError(error=LLMRateLimitError(), retryable=True)
            if status in self.retryable_status_codes:
                return TranslatedError(
                    error=LLMServiceUnavailableError(
                        message=f"LLM API error: {exc}",
                        details={"status_code": status},
                    ),
                    retryable=True,
                )
            return TranslatedError(
                error=LLMError(message=f"LLM API error: {exc}", details={"status_code": status}),
            )
        return super()._translate_error(exc)


# ============================================================================
# Factory
# ============================================================================

def create_engine(settings: Optional[Settings] = None) -> ReasoningEngine:
    """
    Build the engine selected by ``llm_provider``.

    Raises:
        LLMServiceUnavailableError: If the provider's API key is missing.
    """
    settings = settings or get_settings()
    if not settings.active_api_key:
        raise LLMServiceUnavailableError(
            message=f"{settings.llm_provider.upper()}_API_KEY not configured",
            details={"configuration_missing": f"{settings.llm_provider}_api_key"},
        )

    retry_config = RetryConfig(max_retries=settings.llm_max_retries)
    if settings.llm_provider == "gemini":
        return GeminiEngine(api_key=settings.gemini_api_key, retry_config=retry_config)
    return OpenAIEngine(api_key=settings.openai_api_key, retry_config=retry_config)


# Singleton instance with thread-safe locking
_engine: Optional[ReasoningEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> ReasoningEngine:
    """Get the reasoning engine singleton (thread-safe)."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = create_engine()
    return _engine


def reset_engine() -> None:
    """Reset the engine singleton (for testing)."""
    global _engine
    with _engine_lock:
        _engine = None
