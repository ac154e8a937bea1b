"""
Vision-model recognizer: sends one image plus a prompt and returns parsed JSON.

Uses Groq (OpenAI-compatible chat API with image input) when GROQ_API_KEY is
set, otherwise OpenAI when OPENAI_API_KEY is set. Every failure is returned as
a RecognitionResult with ok=False; nothing raised by the SDK escapes recognize().
"""

import base64
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from docscan.prompts import get_prompt
from docscan.schema import PromptKind

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "groq": "meta-llama/llama-4-scout-17b-16e-instruct",
    "openai": "gpt-4o-mini",
}
DEFAULT_TIMEOUT_SECONDS = 60.0
MAX_TOKENS = 8192

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class ResponseParseError(ValueError):
    """The model answered with text that does not contain a JSON object."""


class RecognitionFailed(RuntimeError):
    """A single-document scan could not be recognized; carries the transport status if any."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RecognitionResult:
    """Tagged result of one recognizer call."""

    ok: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    model: Optional[str] = None

    def raise_for_failure(self) -> Dict[str, Any]:
        """Return data, or raise RecognitionFailed for a failed call."""
        if not self.ok or self.data is None:
            raise RecognitionFailed(self.error or "Recognition failed", self.status_code)
        return self.data


def _as_object(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ResponseParseError("Could not parse AI response as JSON")
    return value


def parse_json_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Decode a model answer that should be a JSON object.

    Tries, in order: the whole text, the first fenced ``` block, and the span
    from the first "{" to the last "}".

    Raises:
        ResponseParseError: if none of the strategies yields a JSON object
    """
    text = text or ""
    candidates = [text]
    match = _FENCED_BLOCK.search(text)
    if match:
        candidates.append(match.group(1).strip())
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    last_error: Optional[ValueError] = None
    for candidate in candidates:
        try:
            return _as_object(json.loads(candidate))
        except ValueError as e:
            last_error = e

    if isinstance(last_error, json.JSONDecodeError):
        raise ResponseParseError(f"Could not parse AI response as JSON: {last_error}") from last_error
    raise ResponseParseError("Could not parse AI response as JSON")


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    return any(cls.__name__ == "APITimeoutError" for cls in type(exc).__mro__)


def error_status(exc: BaseException) -> Optional[int]:
    """HTTP status carried by an SDK exception, if any."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    return status if isinstance(status, int) else None


def describe_error(exc: BaseException, timeout: Optional[float] = None) -> str:
    """Map a recognizer exception to a user-facing message per status class."""
    status = error_status(exc)
    if status == 429:
        return "Rate limited. Wait 1 minute and try again (max 30 req/min)."
    if status == 401:
        return "Invalid API key. Check your .env file."
    if _is_timeout(exc):
        if timeout:
            return f"Recognition timed out after {timeout:g}s"
        return "Recognition timed out"
    return str(exc) or type(exc).__name__


def get_provider() -> Optional[str]:
    """Provider selected by the environment, or None when no key is set."""
    if os.environ.get("GROQ_API_KEY"):
        return "groq"
    if os.environ.get("OPENAI_API_KEY"):
        return "openai"
    return None


def _timeout_from_env() -> float:
    raw = os.environ.get("RECOGNIZER_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid RECOGNIZER_TIMEOUT_SECONDS={raw!r}")
        return DEFAULT_TIMEOUT_SECONDS


class Recognizer(Protocol):
    """Protocol for recognizers."""

    def recognize(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt_kind: PromptKind,
    ) -> RecognitionResult:
        """Transcribe an image and return a tagged result."""
        ...


class VisionRecognizer:
    """
    Recognizer backed by a hosted vision-language model.

    The SDK client is created on first use so that constructing the recognizer
    never fails; a missing key surfaces as a failed RecognitionResult.
    Automatic SDK retries are disabled: callers decide whether to retry.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.provider = provider or get_provider()
        self.model = model or os.environ.get("VISION_MODEL") or DEFAULT_MODELS.get(self.provider or "", "")
        self.timeout = timeout if timeout is not None else _timeout_from_env()
        self._client = None

    def _get_client(self):
        if self._client is not None:
            return self._client
        if self.provider == "groq":
            from groq import Groq
            self._client = Groq(
                api_key=os.environ.get("GROQ_API_KEY"),
                timeout=self.timeout,
                max_retries=0,
            )
        elif self.provider == "openai":
            from openai import OpenAI
            self._client = OpenAI(
                api_key=os.environ.get("OPENAI_API_KEY"),
                timeout=self.timeout,
                max_retries=0,
            )
        else:
            raise RuntimeError("No vision API key set (GROQ_API_KEY or OPENAI_API_KEY)")
        return self._client

    def _complete(self, image_bytes: bytes, mime_type: str, prompt: str) -> str:
        client = self._get_client()
        image_b64 = base64.b64encode(image_bytes).decode("ascii")
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{image_b64}"},
                        },
                    ],
                }
            ],
            temperature=0,
            max_tokens=MAX_TOKENS,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    def recognize(
        self,
        image_bytes: bytes,
        mime_type: str,
        prompt_kind: PromptKind,
    ) -> RecognitionResult:
        """
        Transcribe one image into the JSON shape requested by the prompt.

        Args:
            image_bytes: Image content (already preprocessed, if at all)
            mime_type: MIME type used in the data URL
            prompt_kind: Which document prompt to send

        Returns:
            RecognitionResult; ok=False carries a user-facing error message
        """
        try:
            text = self._complete(image_bytes, mime_type, get_prompt(prompt_kind))
            data = parse_json_response(text)
        except ResponseParseError as e:
            logger.warning(f"{self.provider} returned unparseable {PromptKind(prompt_kind).value} response: {e}")
            return RecognitionResult(ok=False, error=str(e), model=self.model)
        except Exception as e:
            message = describe_error(e, self.timeout)
            logger.error(f"Vision recognition failed ({self.provider}/{self.model}): {message}")
            return RecognitionResult(
                ok=False,
                error=message,
                status_code=error_status(e),
                model=self.model,
            )

        return RecognitionResult(ok=True, data=data, model=self.model)
