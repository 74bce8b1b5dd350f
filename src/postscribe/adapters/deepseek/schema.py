"""Pydantic models describing the chat completion API payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class DeepSeekBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ChatMessage(DeepSeekBaseModel):
    role: Role
    content: str | None = None


class ChatCompletionRequest(DeepSeekBaseModel):
    model: str
    messages: list[ChatMessage]
    stream: bool = False


class ChatChoice(DeepSeekBaseModel):
    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class Usage(DeepSeekBaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(DeepSeekBaseModel):
    id: str | None = None
    model: str | None = None
    choices: list[ChatChoice] = Field(default_factory=list[ChatChoice])
    usage: Usage | None = None


class ErrorDetail(DeepSeekBaseModel):
    message: str
    type: str | None = None
    code: str | int | None = None


class ErrorResponse(DeepSeekBaseModel):
    error: ErrorDetail
