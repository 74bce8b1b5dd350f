"""Summarizer backed by the DeepSeek chat completion API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import ValidationError

from postscribe.adapters.http_client import ThrottledClient
from postscribe.config.summarizer import SummarizerConfig, get_summarizer_config
from postscribe.domain.errors import SummarizationError
from postscribe.domain.ports.summarizing import Summarizer

from .schema import ChatCompletionRequest, ChatCompletionResponse, ChatMessage, ErrorResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from postscribe.config.summarizer import HttpClientConfig

log = getLogger(__name__)

COMPLETIONS_ENDPOINT = "/chat/completions"


class DeepSeekAPIError(SummarizationError):
    """Raised when the API answers with an application-level error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _default_client_factory(config: HttpClientConfig) -> ThrottledClient:
    return ThrottledClient(config)


@dataclass(slots=True)
class DeepSeekSummarizer:
    """Callable summarizer keeping one event loop and HTTP client for its lifetime.

    Use it as a context manager, or call :meth:`close` once the pass is over.
    """

    config: SummarizerConfig = field(default_factory=get_summarizer_config)
    client_factory: Callable[[HttpClientConfig], ThrottledClient] = field(
        default=_default_client_factory
    )
    _runner: asyncio.Runner | None = field(default=None, init=False, repr=False)
    _client: ThrottledClient | None = field(default=None, init=False, repr=False)

    def __call__(self, text: str) -> str:
        if not text or not text.strip():
            raise SummarizationError("No text to summarize")
        if self._runner is None:
            self._runner = asyncio.Runner()
        return self._runner.run(self._summarize_async(text))

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._runner is None:
            return
        try:
            if self._client is not None:
                self._runner.run(self._client.aclose())
        finally:
            self._client = None
            self._runner.close()
            self._runner = None

    async def _summarize_async(self, text: str) -> str:
        if self._client is None:
            self._client = self.client_factory(self.config.http)

        request = ChatCompletionRequest(
            model=self.config.model,
            messages=[
                ChatMessage(role="system", content=self.config.system_prompt),
                ChatMessage(role="user", content=text),
            ],
        )
        log.debug("Requesting summary for %d characters of text", len(text))
        try:
            response = await self._client.post(
                COMPLETIONS_ENDPOINT,
                json=request.model_dump(mode="json"),
                headers={"Authorization": f"Bearer {self.config.api_key}"},
            )
        except httpx.HTTPError as exc:
            raise SummarizationError(f"DeepSeek request failed: {exc}") from exc

        return self._parse_response(response)

    def _parse_response(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError as exc:
            raise DeepSeekAPIError(
                f"DeepSeek returned a non-JSON body (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from exc

        if isinstance(payload, dict) and "error" in payload:
            try:
                error_payload = ErrorResponse.model_validate(payload)
                message = error_payload.error.message
            except ValidationError:
                message = str(payload["error"])
            log.error("DeepSeek API error (HTTP %s): %s", response.status_code, message)
            raise DeepSeekAPIError(message, status_code=response.status_code) from None

        if response.is_error:
            raise DeepSeekAPIError(
                f"DeepSeek answered HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            completion = ChatCompletionResponse.model_validate(payload)
        except ValidationError as exc:
            raise DeepSeekAPIError("Unexpected DeepSeek response payload") from exc

        if not completion.choices:
            raise DeepSeekAPIError("DeepSeek response contained no choices")
        content = (completion.choices[0].message.content or "").strip()
        if not content:
            raise DeepSeekAPIError("DeepSeek returned an empty summary")
        return content


if TYPE_CHECKING:
    _summarizer_check: Summarizer = DeepSeekSummarizer()
