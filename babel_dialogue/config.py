"""Runtime settings for the dialogue core.

Values come from BABEL_* environment variables, optionally loaded from a
`.env` file next to the working directory:

    BABEL_LLM_URL            base URL of the conversational backend ("" = offline)
    BABEL_LLM_API_KEY        bearer token, if the backend needs one
    BABEL_LLM_FORMAT         "openai" (chat completions) or "koboldcpp"
    BABEL_LLM_MODEL          model name sent with openai-format requests
    BABEL_HTTP_TIMEOUT       per-request HTTP timeout, seconds
    BABEL_CHAR_DELAY         typewriter delay per character, seconds
    BABEL_HOLD_DELAY         typewriter hold poll interval, seconds
    BABEL_POLL_INTERVAL      reply poll interval, seconds
    BABEL_RESPONSE_TIMEOUT   give up waiting for a reply after this many seconds
    BABEL_REENTRANT_POLICY   "reject" or "replace" (see DialogueController)
    BABEL_REPLY_ROLE         history role for backend replies: "assistant" or "system"
    BABEL_LOG_LEVEL          logging level used by the launcher
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ProviderFormat = Literal["koboldcpp", "openai"]
ReentrantPolicy = Literal["reject", "replace"]

_ENV_PREFIX = "BABEL_"


class Settings(BaseModel):
    llm_url: str = ""
    llm_api_key: str = ""
    llm_format: ProviderFormat = "openai"
    llm_model: str = ""
    http_timeout: float = Field(default=60.0, gt=0)

    char_delay: float = Field(default=0.08, ge=0)
    hold_delay: float = Field(default=0.1, gt=0)
    poll_interval: float = Field(default=0.1, gt=0)
    response_timeout: float = Field(default=30.0, gt=0)

    reentrant_policy: ReentrantPolicy = "reject"
    reply_role: Literal["assistant", "system"] = "assistant"
    log_level: str = "INFO"

    @property
    def online(self) -> bool:
        return bool(self.llm_url)

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Settings:
        """Build settings from BABEL_* variables; unset ones keep defaults."""
        load_dotenv(env_file or Path.cwd() / ".env")
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(_ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)
