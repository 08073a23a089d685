"""
LLM translation backend for OpenAI-compatible chat-completions endpoints.

This module provides:
- LLMConfig: explicit client configuration (no hidden globals)
- LLMTranslator: requests-based client with linear-backoff retries and
  the reasoning_content fallback

The client talks to the endpoint with plain ``requests`` rather than an SDK
so the non-standard ``reasoning_content`` field stays reachable.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from doctrans_llms.config import DEFAULT_API_ENDPOINT, DEFAULT_MODEL, language_name
from doctrans_llms.errors import ExtractionFailure, TranslationError
from doctrans_llms.keys import KeyManager
from doctrans_llms.translate.base import Translator
from doctrans_llms.translate.fallback import (
    TroubleshootRequest,
    TroubleshootResult,
    format_simplified_content,
    parse_simplified_result,
)
from doctrans_llms.translate.prompts import (
    PromptKind,
    build_messages,
    max_tokens_for,
    troubleshooting_system_prompt,
)
from doctrans_llms.translate.reasoning import extract_translation_from_reasoning

logger = logging.getLogger(__name__)

# HTTP, transport, decoding and response-shape failures are all retried
RETRYABLE_ERRORS = (requests.exceptions.RequestException, ValueError, TranslationError)

# Characters of each message / response shown in verbose logs
PREVIEW_CHARS = 200


def _preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    if text and len(text) > limit:
        return text[:limit] + "..."
    return text


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    logger.warning("LLM API attempt %d failed: %s", retry_state.attempt_number, retry_state.outcome.exception())


@dataclass
class LLMConfig:
    """Configuration for the chat-completions client."""
    api_key: Optional[str] = None
    api_endpoint: str = DEFAULT_API_ENDPOINT
    model: str = DEFAULT_MODEL
    max_retries: int = 3
    retry_delay_ms: int = 1000
    verbose: bool = False
    temperature: float = 0.3
    timeout: float = 120.0

    @classmethod
    def from_env(cls) -> LLMConfig:
        """Build a config from LLM_* environment variables and stored keys."""
        return cls(
            api_key=KeyManager().get_key("llm"),
            api_endpoint=os.getenv("LLM_API_ENDPOINT") or DEFAULT_API_ENDPOINT,
            model=os.getenv("LLM_MODEL") or DEFAULT_MODEL,
            verbose=os.getenv("TRANSLATION_DEBUG", "").lower() == "true",
        )


class LLMTranslator(Translator):
    """Translator backed by an OpenAI-compatible chat-completions API.

    Each call is retried up to ``max_retries`` times with a linear backoff
    of ``retry_delay_ms * attempt`` milliseconds. HTTP errors, network
    errors, malformed bodies and empty content are all retryable.

    Usage:
        translator = LLMTranslator(LLMConfig(api_key="..."))
        translator.translate(PromptKind.HEADING, "## Overview", "fr")
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or LLMConfig.from_env()
        if not self.config.api_key:
            raise ValueError(
                "LLM API key required. Set LLM_API_KEY environment variable "
                "or run: doctrans keys set llm"
            )
        self.session = session or requests.Session()
        self.verbose = self.config.verbose
        self._sleep = sleep

    @property
    def name(self) -> str:
        return f"llm-{self.config.model}"

    def translate(self, kind: PromptKind, content: str, target_language: str) -> str:
        messages = build_messages(kind, content, language_name(target_language))
        return self.call_llm(messages, max_tokens_for(kind, content))

    def translate_with_troubleshooting(self, request: TroubleshootRequest) -> TroubleshootResult:
        """Final attempt: simplified payload with the previous error in the system prompt."""
        language = language_name(request.target_language)
        payload = format_simplified_content(request, language)
        messages = [
            {"role": "system", "content": troubleshooting_system_prompt(language, request.previous_error)},
            {"role": "user", "content": payload},
        ]
        reply = self.call_llm(messages, max_tokens_for(PromptKind.TROUBLESHOOT, payload))
        return parse_simplified_result(reply, request)

    def call_llm(self, messages: list[dict], max_tokens: int) -> str:
        """POST one chat-completions request, retrying on any failure.

        Returns:
            The stripped response text

        Raises:
            TranslationError: every attempt failed
        """
        body = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.config.temperature,
        }
        if self.verbose:
            self._log_request(body)

        attempts = max(1, self.config.max_retries)
        delay = self.config.retry_delay_ms / 1000
        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_incrementing(start=delay, increment=delay),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            after=_log_failed_attempt,
            before_sleep=self._log_retry_wait,
            sleep=self._sleep,
        )
        try:
            return retrying(self._post, body)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            raise TranslationError(f"LLM API failed after {attempts} attempts: {last_error}") from last_error

    def _log_retry_wait(self, retry_state: RetryCallState) -> None:
        if self.verbose:
            logger.info("Retrying in %dms...", retry_state.next_action.sleep * 1000)

    def _post(self, body: dict) -> str:
        start = time.monotonic()
        response = self.session.post(
            self.config.api_endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.config.api_key}",
            },
            json=body,
            timeout=self.config.timeout,
        )
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not response.ok:
            if self.verbose:
                logger.info("LLM API error response (%dms): %s %s", elapsed_ms, response.status_code, response.text)
            raise TranslationError(f"HTTP {response.status_code}: {response.reason} - {response.text}")

        data = response.json()
        if self.verbose:
            self._log_response(data, elapsed_ms)

        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError):
            raise TranslationError("Invalid response format from LLM API - no content in response")

        if not isinstance(message, dict):
            raise TranslationError("Invalid response format from LLM API - message is not an object")

        content = message.get("content")
        if not content and message.get("reasoning_content"):
            try:
                content = extract_translation_from_reasoning(message["reasoning_content"])
            except ExtractionFailure as e:
                raise TranslationError(f"Invalid response format from LLM API - {e}") from e

        if not content or not isinstance(content, str):
            raise TranslationError("Invalid response format from LLM API - no content in response")
        return content.strip()

    def _log_request(self, body: dict) -> None:
        logger.info(
            "LLM API request: endpoint=%s model=%s max_tokens=%d temperature=%s",
            self.config.api_endpoint, body["model"], body["max_tokens"], body["temperature"],
        )
        for index, message in enumerate(body["messages"]):
            logger.info("  [%d] %s: %s", index, message["role"], _preview(message["content"]))

    def _log_response(self, data: dict, elapsed_ms: int) -> None:
        usage = data.get("usage") if isinstance(data, dict) else None
        if usage:
            logger.info(
                "LLM API response (%dms): tokens prompt=%s completion=%s total=%s",
                elapsed_ms, usage.get("prompt_tokens"), usage.get("completion_tokens"), usage.get("total_tokens"),
            )
        else:
            logger.info("LLM API response (%dms)", elapsed_ms)
        try:
            content = data["choices"][0]["message"].get("content") or ""
        except (KeyError, IndexError, TypeError, AttributeError):
            return
        logger.info("Response preview: %s (%d characters)", _preview(content, 300), len(content))
