"""Summarizer (chat completion API) configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_env_var, require_env_vars

DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
DEEPSEEK_MODEL = "deepseek-chat"
DEEPSEEK_TIMEOUT_SECONDS = 60.0
DEFAULT_SYSTEM_PROMPT = (
    "你是一个博客读者，擅长阅读并总结博客文章。"
    "请以第三人称提供一段不超过100字的博客内容简洁总结。"
)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class HttpClientConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    ratelimit: RateLimit | None = None
    default_headers: dict[str, str] = field(default_factory=dict[str, str])


@dataclass(frozen=True)
class SummarizerConfig:
    """Holds chat completion API configuration values."""

    api_key: str
    model: str = DEEPSEEK_MODEL
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    http: HttpClientConfig = field(
        default_factory=lambda: HttpClientConfig(
            name="deepseek",
            base_url=DEEPSEEK_BASE_URL,
            timeout_seconds=DEEPSEEK_TIMEOUT_SECONDS,
        )
    )


def get_summarizer_config(*, http: HttpClientConfig | None = None) -> SummarizerConfig:
    values = require_env_vars(("DEEPSEEK_API_KEY",))
    base_url = optional_env_var("DEEPSEEK_BASE_URL", DEEPSEEK_BASE_URL).rstrip("/")
    return SummarizerConfig(
        api_key=values["DEEPSEEK_API_KEY"],
        model=optional_env_var("DEEPSEEK_MODEL", DEEPSEEK_MODEL),
        system_prompt=optional_env_var("DEEPSEEK_SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT),
        http=http
        or HttpClientConfig(
            name="deepseek",
            base_url=base_url,
            timeout_seconds=DEEPSEEK_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        ),
    )
