"""Public interface for the DeepSeek summarizer adapter."""

from __future__ import annotations

from .client import DeepSeekAPIError, DeepSeekSummarizer
from .schema import ChatCompletionRequest, ChatCompletionResponse, ErrorResponse

__all__ = [
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "DeepSeekAPIError",
    "DeepSeekSummarizer",
    "ErrorResponse",
]
